"""Map descriptors (shapes) and type classification.

A shape is a closed union of four node kinds:

    Primitive(tag)      STRING, NUMBER, BOOLEAN, OBJECT, ARRAY singletons
    NullShape           the NULL singleton
    ObjectShape(fields) allowed keys, each with its own shape
    ArrayShape(element) "list of values matching element"

Shapes are immutable.  The engine never writes to them, so one shape can
be shared by any number of concurrent reductions.

Callers rarely build nodes by hand.  as_shape() accepts the shorthand
most maps are written in:

    >>> as_shape({"name": str, "tags": [str], "meta": dict})
    ObjectShape({'name': STRING, 'tags': ArrayShape(STRING), 'meta': OBJECT})
"""

from __future__ import annotations

import numbers
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Set, Tuple

from ._constants import (
    PRIMITIVE_TAGS,
    TAG_ALIASES,
    TAG_NAMES,
    TYPE_ARRAY,
    TYPE_BOOLEAN,
    TYPE_NULL,
    TYPE_NUMBER,
    TYPE_OBJECT,
    TYPE_STRING,
)
from ._errors import InvalidMapError

TYPE_OTHER: str = "other"


class Shape:
    """Base class of all map descriptor nodes."""

    __slots__ = ()

    @property
    def tag(self) -> str:
        raise NotImplementedError

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("{} is immutable".format(type(self).__name__))


class Primitive(Shape):
    """Opaque type marker.  Use the module singletons, not this class."""

    __slots__ = ("_tag",)

    def __init__(self, tag: str) -> None:
        if tag not in PRIMITIVE_TAGS:
            raise InvalidMapError("unknown primitive tag '{}'".format(tag))
        object.__setattr__(self, "_tag", tag)

    @property
    def tag(self) -> str:
        return self._tag

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Primitive) and other._tag == self._tag

    def __hash__(self) -> int:
        return hash(("Primitive", self._tag))

    def __repr__(self) -> str:
        return self._tag.upper()


class NullShape(Shape):
    """A literal-null map entry.

    Classifies as "null": a non-null value under it is a type mismatch.
    It is not a wildcard.
    """

    __slots__ = ()

    @property
    def tag(self) -> str:
        return TYPE_NULL

    def __eq__(self, other: object) -> bool:
        return isinstance(other, NullShape)

    def __hash__(self) -> int:
        return hash("NullShape")

    def __repr__(self) -> str:
        return "NULL"


class ObjectShape(Shape):
    """Allowed keys of an object, each mapped to the shape of its value."""

    __slots__ = ("_fields",)

    def __init__(self, fields: Optional[Mapping[Any, Shape]] = None) -> None:
        copied: Dict[Any, Shape] = {}
        for key, sub in (fields or {}).items():
            if not isinstance(sub, Shape):
                raise InvalidMapError(
                    "field '{}' is not a Shape (use as_shape for shorthand)".format(key))
            copied[key] = sub
        object.__setattr__(self, "_fields", MappingProxyType(copied))

    @property
    def tag(self) -> str:
        return TYPE_OBJECT

    @property
    def fields(self) -> Mapping[Any, Shape]:
        return self._fields

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._fields)

    def get(self, key: Any) -> Optional[Shape]:
        return self._fields.get(key)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ObjectShape) and dict(other._fields) == dict(self._fields)

    def __hash__(self) -> int:
        return hash(("ObjectShape", frozenset(self._fields.items())))

    def __repr__(self) -> str:
        return "ObjectShape({!r})".format(dict(self._fields))


class ArrayShape(Shape):
    """List whose every element must match `element`.

    `element` is None for the empty array descriptor ([] in shorthand),
    which declares no elements at all.
    """

    __slots__ = ("_element",)

    def __init__(self, element: Optional[Shape] = None) -> None:
        if element is not None and not isinstance(element, Shape):
            raise InvalidMapError("array element is not a Shape (use as_shape for shorthand)")
        object.__setattr__(self, "_element", element)

    @property
    def tag(self) -> str:
        return TYPE_ARRAY

    @property
    def element(self) -> Optional[Shape]:
        return self._element

    def __len__(self) -> int:
        return 0 if self._element is None else 1

    def broadcast(self, length: int) -> Tuple[Shape, ...]:
        """One element descriptor per input index, as a fresh tuple.

        The shape itself is left untouched so it stays valid for the next
        input, whatever its length.
        """
        if self._element is None:
            return ()
        return (self._element,) * length

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ArrayShape) and other._element == self._element

    def __hash__(self) -> int:
        return hash(("ArrayShape", self._element))

    def __repr__(self) -> str:
        if self._element is None:
            return "ArrayShape()"
        return "ArrayShape({!r})".format(self._element)


STRING = Primitive(TYPE_STRING)
NUMBER = Primitive(TYPE_NUMBER)
BOOLEAN = Primitive(TYPE_BOOLEAN)
OBJECT = Primitive(TYPE_OBJECT)
ARRAY = Primitive(TYPE_ARRAY)
NULL = NullShape()

_BY_TAG: Dict[str, Shape] = {
    TYPE_STRING: STRING,
    TYPE_NUMBER: NUMBER,
    TYPE_BOOLEAN: BOOLEAN,
    TYPE_OBJECT: OBJECT,
    TYPE_ARRAY: ARRAY,
    TYPE_NULL: NULL,
}

# Python types accepted as shorthand.  Looked up by identity, so bool never
# falls through to int here.
_BY_TYPE: Dict[type, Shape] = {
    str: STRING,
    int: NUMBER,
    float: NUMBER,
    bool: BOOLEAN,
    dict: OBJECT,
    object: OBJECT,
    list: ARRAY,
    tuple: ARRAY,
    type(None): NULL,
}


# ── Shorthand conversion ──────────────────────────────────────

def as_shape(x: Any) -> Shape:
    """Convert shorthand into a Shape.  Shapes are returned unchanged.

    Raises InvalidMapError for anything that is not a descriptor,
    including self-referencing containers.
    """
    return _as_shape(x, set())


def _as_shape(x: Any, active: Set[int]) -> Shape:
    if isinstance(x, Shape):
        return x
    if x is None:
        return NULL
    if isinstance(x, type):
        found = _BY_TYPE.get(x)
        if found is None:
            raise InvalidMapError("type {} has no shape".format(x.__name__))
        return found
    if isinstance(x, str):
        tag = TAG_ALIASES.get(x)
        if tag is None:
            raise InvalidMapError("unknown type name '{}'".format(x))
        return _BY_TAG[tag]

    if isinstance(x, (Mapping, list, tuple)):
        if id(x) in active:
            raise InvalidMapError("map contains a reference cycle")
        active.add(id(x))
        try:
            if isinstance(x, Mapping):
                return ObjectShape({k: _as_shape(v, active) for k, v in x.items()})
            # Only the first element is the pattern; extra elements are ignored.
            if not x:
                return ArrayShape()
            return ArrayShape(_as_shape(x[0], active))
        finally:
            active.discard(id(x))

    raise InvalidMapError("cannot use {} as a map".format(type(x).__name__))


def to_shorthand(shape: Any) -> Any:
    """Inverse of as_shape, using JSON-friendly type names.

    >>> to_shorthand(as_shape({"a": int, "b": [str], "c": None}))
    {'a': 'Number', 'b': ['String'], 'c': None}
    """
    shape = as_shape(shape)
    if isinstance(shape, Primitive):
        return TAG_NAMES[shape.tag]
    if isinstance(shape, NullShape):
        return None
    if isinstance(shape, ObjectShape):
        return {k: to_shorthand(v) for k, v in shape.fields.items()}
    if isinstance(shape, ArrayShape):
        return [] if shape.element is None else [to_shorthand(shape.element)]
    raise InvalidMapError("unknown shape node {}".format(type(shape).__name__))


# ── Classification ────────────────────────────────────────────

def shape_type(descriptor: Any) -> str:
    """Type family of a map descriptor (shorthand accepted)."""
    return as_shape(descriptor).tag


def value_type(value: Any) -> str:
    """Type family of a runtime value.

    Anything that is not plain data classifies as "other", which no
    descriptor ever matches.
    """
    if value is None:
        return TYPE_NULL
    # bool before numbers: bool is a subclass of int.
    if isinstance(value, bool):
        return TYPE_BOOLEAN
    if isinstance(value, numbers.Real):
        return TYPE_NUMBER
    if isinstance(value, str):
        return TYPE_STRING
    if isinstance(value, (list, tuple)):
        return TYPE_ARRAY
    if isinstance(value, Mapping):
        return TYPE_OBJECT
    return TYPE_OTHER


def is_empty_shape(shape: Shape) -> bool:
    """True for an ObjectShape without fields or an element-less ArrayShape."""
    return isinstance(shape, (ObjectShape, ArrayShape)) and len(shape) == 0
