"""JSON Schema → map importer.

Only the structural part of a schema is read: `type`, `properties`,
`items` and the combinators.  Constraints (`minimum`, `pattern`, `enum`,
`required`, ...) are ignored; the engine checks type families only.

The schema must be dereferenced beforehand.  A `$ref` anywhere is an
ImporterParseError, never a silent OBJECT.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from ._constants import JSON_SCHEMA_SCALARS, TYPE_NULL
from ._errors import ImporterParseError, format_path
from ._json_adapter import load_json
from ._shape import (
    ARRAY,
    OBJECT,
    ArrayShape,
    ObjectShape,
    Shape,
    as_shape,
)

logger = logging.getLogger(__name__)

_PREFIX = "jsonSchemaParser: "


def parse_json_schema_to_map(schema: Any) -> Shape:
    """Convert a dereferenced JSON Schema into an ObjectShape or ArrayShape.

    `schema` is a mapping or JSON text (str / bytes).

    Example:
        >>> parse_json_schema_to_map({
        ...     "type": "object",
        ...     "properties": {"name": {"type": "string"},
        ...                    "tags": {"type": "array", "items": {"type": "string"}}},
        ... })
        ObjectShape({'name': STRING, 'tags': ArrayShape(STRING)})
    """
    if isinstance(schema, (str, bytes, bytearray)):
        schema = load_json(schema, ImporterParseError, _PREFIX + "schema")

    if not isinstance(schema, Mapping):
        raise ImporterParseError(_PREFIX + "schema must be an object")

    if "$ref" in schema:
        raise ImporterParseError(
            _PREFIX + "$ref is not supported. Schema must be dereferenced before parsing.")

    kind = schema.get("type")
    if "properties" in schema and kind in (None, "object"):
        shape: Shape = _object_shape(schema, [])
    elif kind == "array" and "items" in schema:
        shape = ArrayShape(_convert(_first_item(schema["items"]), ["items"]))
    else:
        raise ImporterParseError(
            _PREFIX + 'schema must have "properties" or be an array type')

    logger.debug("converted JSON schema to %r", shape)
    return shape


def _object_shape(schema: Mapping[str, Any], path: List[Any]) -> ObjectShape:
    properties = schema.get("properties")
    if not isinstance(properties, Mapping):
        raise ImporterParseError(
            _PREFIX + '"properties" must be an object at {}'.format(format_path(path) or "/"))
    fields: Dict[str, Shape] = {}
    for key, prop in properties.items():
        fields[key] = _convert(prop, path + [key])
    return ObjectShape(fields)


def _convert(prop: Any, path: List[Any]) -> Shape:
    """Map one property schema to a shape."""
    if not isinstance(prop, Mapping):
        # `true` / `{}`-style "anything" schemas
        return OBJECT

    if "$ref" in prop:
        raise ImporterParseError(
            _PREFIX + '$ref found in property "{}". Schema must be dereferenced '
            "before parsing.".format(_label(path)))

    kind = prop.get("type")

    # Union of type names: the first non-null one wins.
    if isinstance(kind, list):
        concrete = [k for k in kind if k != TYPE_NULL]
        if not concrete:
            return OBJECT
        kind = concrete[0]

    if kind is None:
        for combinator in ("anyOf", "oneOf"):
            if combinator in prop:
                return _first_alternative(prop[combinator], path + [combinator])
        if "allOf" in prop:
            return _merge_all_of(prop["allOf"], path + ["allOf"])
        if "properties" in prop:
            return _object_shape(prop, path)
        return OBJECT

    if kind in JSON_SCHEMA_SCALARS:
        return as_shape(JSON_SCHEMA_SCALARS[kind])

    if kind == "object":
        if "properties" in prop:
            return _object_shape(prop, path)
        return OBJECT

    if kind == "array":
        if "items" in prop:
            items = _first_item(prop["items"])
            if items is None:
                return ARRAY
            return ArrayShape(_convert(items, path + ["items"]))
        return ARRAY

    return OBJECT


def _first_item(items: Any) -> Any:
    # Tuple-form `items` (a list of schemas): the first describes the rest.
    if isinstance(items, list):
        return items[0] if items else None
    return items


def _first_alternative(alternatives: Any, path: List[Any]) -> Shape:
    if not isinstance(alternatives, list):
        raise ImporterParseError(
            _PREFIX + "{} must be a list".format(_label(path)))
    for i, alt in enumerate(alternatives):
        if isinstance(alt, Mapping) and alt.get("type") == TYPE_NULL:
            continue
        return _convert(alt, path + [i])
    return OBJECT


def _merge_all_of(parts: Any, path: List[Any]) -> Shape:
    """Structural merge: earlier parts first, later ones override on collision."""
    if not isinstance(parts, list):
        raise ImporterParseError(
            _PREFIX + "{} must be a list".format(_label(path)))
    fields: Dict[str, Shape] = {}
    for i, part in enumerate(parts):
        shape = _convert(part, path + [i])
        if not isinstance(shape, ObjectShape):
            return OBJECT
        fields.update(shape.fields)
    return ObjectShape(fields)


def _label(path: List[Any]) -> str:
    return ".".join(str(p) for p in path)

