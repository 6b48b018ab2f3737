"""reducemap constants — type-family tags, option names, shorthand aliases.

Every runtime value and every map descriptor classifies into exactly one
type family.  Comparison between input and map is tag equality, nothing
more: no coercion, no range or format checks.
"""

from __future__ import annotations

from typing import Dict, Tuple

# ── Type-family tags ─────────────────────────────────────────
# Plain strings so they print well in errors and debug logs.
TYPE_STRING: str = "string"
TYPE_NUMBER: str = "number"
TYPE_BOOLEAN: str = "boolean"
TYPE_OBJECT: str = "object"
TYPE_ARRAY: str = "array"
TYPE_NULL: str = "null"

PRIMITIVE_TAGS: Tuple[str, ...] = (
    TYPE_STRING,
    TYPE_NUMBER,
    TYPE_BOOLEAN,
    TYPE_OBJECT,
    TYPE_ARRAY,
)

# Capitalized names are the constructor-style spelling ({"a": "Number"}).
# Both spellings are accepted so a map can round-trip through JSON.
TAG_ALIASES: Dict[str, str] = {
    "String": TYPE_STRING,
    "string": TYPE_STRING,
    "Number": TYPE_NUMBER,
    "number": TYPE_NUMBER,
    "integer": TYPE_NUMBER,
    "Boolean": TYPE_BOOLEAN,
    "boolean": TYPE_BOOLEAN,
    "Object": TYPE_OBJECT,
    "object": TYPE_OBJECT,
    "Array": TYPE_ARRAY,
    "array": TYPE_ARRAY,
    "null": TYPE_NULL,
}

# Canonical spelling used by to_shorthand().
TAG_NAMES: Dict[str, str] = {
    TYPE_STRING: "String",
    TYPE_NUMBER: "Number",
    TYPE_BOOLEAN: "Boolean",
    TYPE_OBJECT: "Object",
    TYPE_ARRAY: "Array",
}

# ── Options ──────────────────────────────────────────────────
# Python field name → camelCase name accepted by Options.from_mapping().
OPTION_NAMES: Dict[str, str] = {
    "keep_keys": "keepKeys",
    "throw_error_on_alien": "throwErrorOnAlien",
    "allow_nullish": "allowNullish",
    "allow_nullish_keys": "allowNullishKeys",
    "permit_empty_map": "permitEmptyMap",
    "permit_undefined_map": "permitUndefinedMap",
}

# ── JSON Schema ──────────────────────────────────────────────
# "object" and "array" are absent on purpose: they need the properties /
# items inspection in _json_schema.py.
JSON_SCHEMA_SCALARS: Dict[str, str] = {
    "string": TYPE_STRING,
    "number": TYPE_NUMBER,
    "integer": TYPE_NUMBER,
    "boolean": TYPE_BOOLEAN,
    "null": TYPE_NULL,
}

# ── Interface text ───────────────────────────────────────────
INTERFACE_KEYWORDS: Dict[str, str] = {
    "string": TYPE_STRING,
    "number": TYPE_NUMBER,
    "boolean": TYPE_BOOLEAN,
    "null": TYPE_NULL,
    "undefined": TYPE_NULL,
}

# Generic reference names whose first type argument is the element type.
INTERFACE_ARRAY_GENERICS: Tuple[str, ...] = ("Array", "ReadonlyArray")
