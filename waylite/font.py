"""Font files loaded from disk as raw bytes."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .assets import Asset


@dataclass(frozen=True)
class FontAsset(Asset):
    """The raw bytes of a font file, ready for a text rasteriser."""

    data: bytes

    @classmethod
    def load(cls, path: str | os.PathLike[str]) -> "FontAsset":
        """Read the font file at ``path``."""
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise OSError(
                exc.errno, f"failed to read font: {path}: {exc.strerror}"
            ) from exc
        return cls(data)