"""reducemap core — the reduction engine and the missing-key materializer.

reduce_by_map() walks a private copy of the input alongside the map.  For
every key (or list index) it looks up the map entry and applies one rule:

    no entry          → alien: delete, or AlienKeyError in strict mode
    value is None     → delete, unless allow_nullish_keys
    type differs      → delete, or set to None under keep_keys
    otherwise         → keep

Nested dicts and lists whose entry is a nested shape are pruned first,
recursively, then judged by the same rule.  Under keep_keys a second pass
(inject_missing_keys) puts back every declared key the input lacked.

Options travel as an explicit argument; the map is read-only.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Tuple

from ._constants import TYPE_ARRAY, TYPE_OBJECT
from ._errors import AlienKeyError, InvalidMapError, InvalidRootError, format_path
from ._json_adapter import clone_value
from ._options import Options, OptionsLike, resolve_options
from ._shape import (
    ArrayShape,
    ObjectShape,
    Shape,
    as_shape,
    is_empty_shape,
    value_type,
)

logger = logging.getLogger(__name__)


class _Missing:
    """Sentinel for "no map given", distinct from None."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


# ── Entry point ───────────────────────────────────────────────

def reduce_by_map(value: Any, shape: Any = MISSING,
                  options: OptionsLike = None, **flags: Any) -> Any:
    """Reduce `value` to the keys declared by `shape`.

    `shape` is a Shape or shorthand (see as_shape).  `options` is an
    Options, a mapping of flag names, or None; keyword flags override it.

    The caller's value is never modified.  The result is a fresh structure,
    except for the passthrough cases (allow_nullish, permit_undefined_map,
    permit_empty_map, empty list) which hand the input back as is.
    """
    opts = resolve_options(options, **flags)

    if value is None:
        if opts.allow_nullish:
            return value
        raise InvalidRootError(
            "array or object expected, received None. Override with option allow_nullish")

    # None at the root cannot mean "must be null"; it means no map at all.
    if shape is MISSING or shape is None:
        if opts.permit_undefined_map:
            return value
        raise InvalidMapError(
            "map is undefined. Override with option permit_undefined_map")

    root_type = value_type(value)
    if root_type not in (TYPE_OBJECT, TYPE_ARRAY):
        raise InvalidRootError(
            "array or object expected, received type '{}'".format(type(value).__name__))

    shape = as_shape(shape)

    if root_type == TYPE_ARRAY and isinstance(shape, ArrayShape):
        if len(value) == 0 and not opts.keep_keys:
            return value

    if opts.permit_empty_map and is_empty_shape(shape):
        return value

    if not isinstance(shape, (ObjectShape, ArrayShape)):
        # A bare tag at the root only says "any dict" or "any list".
        if shape.tag != root_type:
            raise InvalidMapError(
                "map of type '{}' cannot describe a root of type '{}'".format(
                    shape.tag, root_type))
        return clone_value(value)

    result = clone_value(value)
    _reduce_node(result, shape, opts, [])

    if opts.keep_keys:
        # Mismatched leaves are already None; now re-add the absent ones.
        inject_missing_keys(result, shape)
    return result


# ── Recursive walk ────────────────────────────────────────────

def _reduce_node(node: Any, shape: Shape, opts: Options, path: List[Any]) -> None:
    """Prune a copied dict or list in place against `shape`."""
    if isinstance(node, dict):
        fields = shape.fields if isinstance(shape, ObjectShape) else {}
        for key in list(node.keys()):
            keep, new = _judge(node[key], fields.get(key), opts, path + [key])
            if keep:
                node[key] = new
            else:
                del node[key]
        return

    # Lists: the element shape is broadcast to one entry per index.  A
    # dropped element is removed and the list closes up.
    if isinstance(shape, ArrayShape):
        entries: Tuple[Shape, ...] = shape.broadcast(len(node))
    else:
        entries = ()
    kept = []
    for i, item in enumerate(node):
        entry = entries[i] if i < len(entries) else None
        keep, new = _judge(item, entry, opts, path + [i])
        if keep:
            kept.append(new)
    node[:] = kept


def _judge(value: Any, entry: Optional[Shape], opts: Options,
           path: List[Any]) -> Tuple[bool, Any]:
    """Decide whether one key survives.  Returns (keep, value_to_store)."""
    if isinstance(value, list) and isinstance(entry, ArrayShape):
        _reduce_node(value, entry, opts, path)
    elif isinstance(value, dict) and isinstance(entry, ObjectShape):
        _reduce_node(value, entry, opts, path)

    if entry is None:
        if opts.throw_error_on_alien:
            raise AlienKeyError(path)
        _trace("dropped alien key %s", path)
        return False, None

    if value is None:
        if opts.allow_nullish_keys:
            return True, None
        _trace("dropped null value at %s", path)
        return False, None

    if value_type(value) != entry.tag:
        if opts.keep_keys:
            _trace("nulled mismatched value at %s", path)
            return True, None
        _trace("dropped mismatched value at %s", path)
        return False, None

    return True, value


# ── Missing-key materializer ──────────────────────────────────

def inject_missing_keys(value: Any, shape: Any) -> Any:
    """Add every key declared in `shape` but absent from `value`, in place.

    Absent keys are seeded with {} or [] when their shape is a non-empty
    nested shape, None otherwise, and nested containers are filled the
    same way.  An empty list gets one seeded element so the element shape
    shows up.  Present keys are never overwritten, and None or mismatched
    values are not descended into.
    """
    shape = as_shape(shape)

    if isinstance(value, dict) and isinstance(shape, ObjectShape):
        for key, entry in shape.fields.items():
            if key not in value:
                value[key] = _seed(entry)
                _trace("materialized key %s", [key])
            if _descends(value[key], entry):
                inject_missing_keys(value[key], entry)

    elif isinstance(value, list) and isinstance(shape, ArrayShape):
        if shape.element is None:
            return value
        if not value:
            value.append(_seed(shape.element))
        for item in value:
            if _descends(item, shape.element):
                inject_missing_keys(item, shape.element)

    return value


def _seed(entry: Shape) -> Any:
    if isinstance(entry, ObjectShape) and len(entry):
        return {}
    if isinstance(entry, ArrayShape) and len(entry):
        return []
    return None


def _descends(value: Any, entry: Shape) -> bool:
    return ((isinstance(value, dict) and isinstance(entry, ObjectShape))
            or (isinstance(value, list) and isinstance(entry, ArrayShape)))


def _trace(msg: str, path: List[Any]) -> None:
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(msg, format_path(path) or "/")
