"""Reduction options.

Options are an immutable record passed explicitly down every recursive
call of the engine.  Nothing is stored at module level, so two reductions
running at the same time (threads or asyncio tasks) never see each
other's flags.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Dict, Mapping, Union

from ._constants import OPTION_NAMES
from ._errors import InvalidOptionsError

# camelCase spelling → field name.
_ALIASES: Dict[str, str] = {camel: name for name, camel in OPTION_NAMES.items()}


@dataclasses.dataclass(frozen=True)
class Options:
    """Policy flags for one reduction.  All default to False."""

    keep_keys: bool = False
    throw_error_on_alien: bool = False
    allow_nullish: bool = False
    allow_nullish_keys: bool = False
    permit_empty_map: bool = False
    permit_undefined_map: bool = False

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "Options":
        """Build Options from a config mapping.

        Accepts the Python field names and the camelCase names
        (`keepKeys`, `throwErrorOnAlien`, ...).  Unknown names and
        non-bool values raise InvalidOptionsError.
        """
        if not isinstance(mapping, Mapping):
            raise InvalidOptionsError(
                "options must be a mapping, got {}".format(type(mapping).__name__))
        return cls(**_normalize(mapping))

    def replace(self, **flags: Any) -> "Options":
        """Return a copy with the given flags overridden."""
        if not flags:
            return self
        return dataclasses.replace(self, **_normalize(flags))

    def as_dict(self) -> Dict[str, bool]:
        return dataclasses.asdict(self)


def _normalize(mapping: Mapping[str, Any]) -> Dict[str, bool]:
    out: Dict[str, bool] = {}
    for key, value in mapping.items():
        name = _ALIASES.get(key, key)
        if name not in OPTION_NAMES:
            raise InvalidOptionsError("unknown option '{}'".format(key))
        # bool only: 0/1 or "true" in a config file is almost always a mistake.
        if not isinstance(value, bool):
            raise InvalidOptionsError(
                "option '{}' must be a bool, got {}".format(key, type(value).__name__))
        out[name] = value
    return out


OptionsLike = Union[Options, Mapping[str, Any], None]


def resolve_options(options: OptionsLike = None, **flags: Any) -> Options:
    """Merge an Options / mapping / None with keyword overrides."""
    if options is None:
        base = Options()
    elif isinstance(options, Options):
        base = options
    else:
        base = Options.from_mapping(options)
    return base.replace(**flags)

