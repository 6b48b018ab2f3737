"""Plain-data adapter: structural deep copy and JSON loading.

The engine works on its own copy of the input so the caller's data is
never touched.  The copy is structural rather than a JSON round-trip:

    Mapping        → dict   (keys kept as they are)
    list / tuple   → list
    str, bool, int, float, None → same object (immutable)
    anything else  → same object, kept as an opaque leaf

Opaque leaves (datetime, bytes, custom classes) classify as "other".  No
typed map entry ever matches them, so they are pruned, except inside a
subtree that an OBJECT or ARRAY tag keeps whole.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Type, Union

from ._errors import ReduceError


def clone_value(x: Any) -> Any:
    """Deep-copy the container structure of a plain-data value."""
    if isinstance(x, Mapping):
        return {k: clone_value(v) for k, v in x.items()}
    if isinstance(x, (list, tuple)):
        return [clone_value(v) for v in x]
    return x


# ── JSON text → plain data ────────────────────────────────────
# json.loads() already yields exactly the plain-data model.  NaN and
# Infinity are accepted; they are numbers as far as classification goes.

def load_json(raw: Union[bytes, bytearray, str],
              error: Type[ReduceError] = ReduceError,
              what: str = "JSON input") -> Any:
    """Parse JSON text, raising `error` (a ReduceError subclass) on failure."""
    if isinstance(raw, (bytes, bytearray)):
        try:
            text = bytes(raw).decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise error("{}: invalid UTF-8".format(what)) from e
    elif isinstance(raw, str):
        text = raw
    else:
        raise error("{}: expected str or bytes, got {}".format(what, type(raw).__name__))

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise error("{}: {} (line {}, column {})".format(what, e.msg, e.lineno, e.colno)) from e

