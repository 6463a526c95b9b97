"""Exception hierarchy for scene loading and frame export."""

from __future__ import annotations

__all__ = [
    "AssetLoadError",
    "ExportError",
    "ExportPathError",
    "ExportWriterError",
    "ManifestError",
    "RelightError",
    "SceneNotFoundError",
]


class RelightError(RuntimeError):
    """Base class for scene, asset and export failures."""


class ManifestError(RelightError):
    """Raised when the scene manifest cannot be read or is malformed."""


class SceneNotFoundError(RelightError):
    """Raised when a requested scene is not present in the manifest."""


class AssetLoadError(RelightError):
    """Raised when a single asset cannot be fetched or decoded."""

    def __init__(self, location: str, problem: str) -> None:
        super().__init__(f"{location}: {problem}")
        self.location = location
        self.problem = problem


class ExportError(RelightError):
    """Raised when the rendered frame cannot be written out."""


class ExportPathError(ExportError):
    """The export destination directory could not be created."""


class ExportWriterError(ExportError):
    """Pillow rejected the frame or failed while writing the PNG."""
