"""Exception hierarchy for the colour pipeline."""

from __future__ import annotations

from dataclasses import dataclass


class TonemapError(RuntimeError):
    """Base class for all tone reproduction failures."""


@dataclass(slots=True)
class TonemapConfigError(TonemapError):
    """Raised when tone state fails validation."""

    field: str
    problem: str

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"{self.field}: {self.problem}"
