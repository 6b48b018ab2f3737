"""reducemap error codes and exception classes.

Every failure is a ReduceError subclass carrying a `.code` string, so a
caller can catch the whole family at once or compare codes the way the
tests do.  Silent pruning (alien keys, nullish values, type mismatches)
is the designed behavior and never raises unless the matching strict
option is set.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

# ── Error codes ──────────────────────────────────────────────

ERR_INVALID_ROOT: str = "ERR_INVALID_ROOT"  # nullish or non-container input
ERR_INVALID_MAP: str = "ERR_INVALID_MAP"    # missing or malformed map
ERR_ALIEN_KEY: str = "ERR_ALIEN_KEY"        # unsanctioned key, strict mode
ERR_OPTIONS: str = "ERR_OPTIONS"            # unknown option or bad value
ERR_IMPORT: str = "ERR_IMPORT"              # importer could not build a map


class ReduceError(Exception):
    """Base exception for reducemap.

    The `.code` attribute is one of the ERR_* strings above.
    """

    code: str = ""

    def __init__(self, msg: str = "") -> None:
        super().__init__(msg or self.code)


class InvalidRootError(ReduceError):
    """The root input is None (without allow_nullish) or not a dict/list."""

    code = ERR_INVALID_ROOT


class InvalidMapError(ReduceError):
    """The map is missing (without permit_undefined_map) or not a descriptor."""

    code = ERR_INVALID_MAP


class AlienKeyError(ReduceError):
    """A key exists in the input but not in the map, and throw_error_on_alien is set.

    `.path` lists the keys and indices leading to the offending key, root first.
    """

    code = ERR_ALIEN_KEY

    def __init__(self, path: Sequence[Any], msg: str = "") -> None:
        self.path: List[Any] = list(path)
        super().__init__(msg or "alien entry found in object at {}".format(
            format_path(self.path)))


class InvalidOptionsError(ReduceError, ValueError):
    code = ERR_OPTIONS


class ImporterParseError(ReduceError, ValueError):
    """A shape importer could not turn its source into a map.

    Raised for malformed text or schema, unsupported $ref, unknown interface
    names and reference cycles.  `.line` and `.column` are set when the
    error comes from the interface-text grammar.
    """

    code = ERR_IMPORT

    def __init__(self, msg: str = "", line: Optional[int] = None,
                 column: Optional[int] = None) -> None:
        self.line = line
        self.column = column
        super().__init__(msg)


def format_path(path: Sequence[Any]) -> str:
    """Render a key path as a JSON Pointer ("/a/0/b"), "" for the root."""
    parts = []
    for tok in path:
        # RFC 6901 escaping: "~" first, then "/".
        parts.append(str(tok).replace("~", "~0").replace("/", "~1"))
    return "".join("/" + p for p in parts)
