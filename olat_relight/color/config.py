"""Tone state: which operator is active and its white point."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping, MutableMapping

from ..datatypes import ToneMode
from .exceptions import TonemapConfigError
from .operators import DEFAULT_MAX_POINT

ALIAS_KEYS = {
    "tone_mapping": "mode",
    "tone_mode": "mode",
    "white_point": "max_point",
}


def _normalise_key(key: str) -> str:
    return key.strip().lower().replace("-", "_")


@dataclass(frozen=True, slots=True)
class TMConfig:
    """Global tone state consumed by the compositor."""

    mode: ToneMode = ToneMode.REINHARD
    max_point: float = DEFAULT_MAX_POINT

    def resolved(self) -> TMConfig:
        """Return a validated copy with the mode coerced to :class:`ToneMode`."""

        try:
            mode = ToneMode.parse(self.mode)
        except ValueError as exc:
            raise TonemapConfigError("mode", str(exc)) from None
        try:
            max_point = float(self.max_point)
        except (TypeError, ValueError):
            raise TonemapConfigError("max_point", "must be a number") from None
        if not max_point > 0:
            raise TonemapConfigError("max_point", "must be greater than zero")
        return replace(self, mode=mode, max_point=max_point)

    def merged(self, **overrides: Any) -> TMConfig:
        updates: dict[str, Any] = {}
        for key, value in overrides.items():
            key_norm = _normalise_key(key)
            alias = ALIAS_KEYS.get(key_norm, key_norm)
            if alias not in self.__dataclass_fields__:
                raise TonemapConfigError(alias, "unknown field in overrides")
            updates[alias] = value
        return replace(self, **updates).resolved()

    def as_dict(self) -> dict[str, Any]:
        return {"mode": self.mode.value, "max_point": self.max_point}

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> TMConfig:
        prepared: MutableMapping[str, Any] = {}
        for raw_key, value in mapping.items():
            key_norm = _normalise_key(raw_key)
            alias = ALIAS_KEYS.get(key_norm, key_norm)
            if alias not in cls.__dataclass_fields__:
                raise TonemapConfigError(alias, "unknown field in tone section")
            prepared[alias] = value
        return cls(**prepared).resolved()


DEFAULT_TM_CONFIG = TMConfig().resolved()
