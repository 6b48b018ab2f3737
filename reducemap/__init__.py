"""reducemap — reduce plain data to the keys a map declares.

Drop everything the map does not sanction: unknown keys, None values and
values of the wrong type family.  Nested dicts and lists are reduced
recursively; a one-element list in the map describes every element.

Quick start:
    >>> from reducemap import reduce_by_map
    >>> reduce_by_map({"a": 1, "b": 2, "c": 3}, {"a": int, "b": str})
    {'a': 1}

keep_keys keeps the declared structure instead, nulling what is missing:
    >>> reduce_by_map({"a": 1}, {"a": int, "b": str}, keep_keys=True)
    {'a': 1, 'b': None}

Maps can also be imported from a JSON Schema (parse_json_schema_to_map)
or from interface declarations (parse_interface_text_to_map).
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from ._constants import (
    TYPE_ARRAY,
    TYPE_BOOLEAN,
    TYPE_NULL,
    TYPE_NUMBER,
    TYPE_OBJECT,
    TYPE_STRING,
)
from ._core import MISSING, inject_missing_keys, reduce_by_map
from ._errors import (
    ERR_ALIEN_KEY,
    ERR_IMPORT,
    ERR_INVALID_MAP,
    ERR_INVALID_ROOT,
    ERR_OPTIONS,
    AlienKeyError,
    ImporterParseError,
    InvalidMapError,
    InvalidOptionsError,
    InvalidRootError,
    ReduceError,
)
from ._interface import parse_interface_text, parse_interface_text_to_map
from ._json_adapter import clone_value, load_json
from ._json_schema import parse_json_schema_to_map
from ._options import Options, OptionsLike
from ._shape import (
    ARRAY,
    BOOLEAN,
    NULL,
    NUMBER,
    OBJECT,
    STRING,
    TYPE_OTHER,
    ArrayShape,
    NullShape,
    ObjectShape,
    Primitive,
    Shape,
    as_shape,
    shape_type,
    to_shorthand,
    value_type,
)

__version__ = "1.0.0"

__all__ = [
    # Engine
    "reduce_by_map",
    "reduce_json",
    "inject_missing_keys",
    "MISSING",
    # Importers
    "reduce_by_json_schema",
    "reduce_by_interface_text",
    "parse_json_schema_to_map",
    "parse_interface_text",
    "parse_interface_text_to_map",
    # Descriptors
    "Shape",
    "Primitive",
    "NullShape",
    "ObjectShape",
    "ArrayShape",
    "STRING",
    "NUMBER",
    "BOOLEAN",
    "OBJECT",
    "ARRAY",
    "NULL",
    "as_shape",
    "to_shorthand",
    "shape_type",
    "value_type",
    "clone_value",
    # Type-family tags
    "TYPE_STRING",
    "TYPE_NUMBER",
    "TYPE_BOOLEAN",
    "TYPE_OBJECT",
    "TYPE_ARRAY",
    "TYPE_NULL",
    "TYPE_OTHER",
    # Options
    "Options",
    # Exceptions
    "ReduceError",
    "InvalidRootError",
    "InvalidMapError",
    "AlienKeyError",
    "InvalidOptionsError",
    "ImporterParseError",
    # Error codes
    "ERR_INVALID_ROOT",
    "ERR_INVALID_MAP",
    "ERR_ALIEN_KEY",
    "ERR_OPTIONS",
    "ERR_IMPORT",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())


# ── JSON input ────────────────────────────────────────────────

def reduce_json(raw: Union[bytes, str], shape: Any = MISSING,
                options: OptionsLike = None, **flags: Any) -> Any:
    """Parse JSON text and reduce the result.

    Malformed JSON raises InvalidRootError, like any other unusable root.
    """
    value = load_json(raw, InvalidRootError)
    return reduce_by_map(value, shape, options, **flags)


# ── Importer shortcuts ────────────────────────────────────────

def reduce_by_json_schema(value: Any, schema: Any,
                          options: OptionsLike = None, **flags: Any) -> Any:
    """Reduce `value` with the map derived from a dereferenced JSON Schema."""
    shape = parse_json_schema_to_map(schema)
    return reduce_by_map(value, shape, options, **flags)


async def reduce_by_interface_text(value: Any, text: Any,
                                   interface_name: Union[str, OptionsLike] = None,
                                   options: OptionsLike = None,
                                   **flags: Any) -> Any:
    """Reduce `value` with the map derived from interface declarations.

    Options may be passed in place of `interface_name`:
        await reduce_by_interface_text(data, text, {"keepKeys": True})
    """
    name: Optional[str]
    if isinstance(interface_name, (Options, Mapping)):
        if options is not None:
            raise InvalidOptionsError("options given twice")
        name, options = None, interface_name
    else:
        name = interface_name
    shape = await parse_interface_text_to_map(text, name)
    return reduce_by_map(value, shape, options, **flags)
