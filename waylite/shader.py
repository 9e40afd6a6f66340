"""GLSL shader sources, given inline or read from files."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .assets import Asset


@dataclass(frozen=True)
class ShaderSource:
    """Where GLSL source comes from: literal text or a file on disk."""

    text: str | None = None
    path: Path | None = None

    def __post_init__(self) -> None:
        if (self.text is None) == (self.path is None):
            raise ValueError("a shader source needs exactly one of text or path")

    @classmethod
    def inline(cls, src: str) -> "ShaderSource":
        """Use GLSL text directly."""
        return cls(text=str(src))

    @classmethod
    def file(cls, path: str | os.PathLike[str]) -> "ShaderSource":
        """Read GLSL from ``path`` when resolved."""
        return cls(path=Path(path))

    def resolve(self) -> str:
        """Return the GLSL text, reading the file if needed."""
        if self.text is not None:
            return self.text
        assert self.path is not None
        try:
            return self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise OSError(
                exc.errno, f"failed to read shader: {self.path}: {exc.strerror}"
            ) from exc


@dataclass(frozen=True)
class ShaderConfig:
    """The vertex and fragment sources of one shader program."""

    vert: ShaderSource
    frag: ShaderSource

    @classmethod
    def from_files(
        cls, vert: str | os.PathLike[str], frag: str | os.PathLike[str]
    ) -> "ShaderConfig":
        """Read both shaders from files."""
        return cls(ShaderSource.file(vert), ShaderSource.file(frag))

    @classmethod
    def from_inline(cls, vert: str, frag: str) -> "ShaderConfig":
        """Use inline GLSL text for both shaders."""
        return cls(ShaderSource.inline(vert), ShaderSource.inline(frag))


@dataclass(frozen=True)
class ShaderAsset(Asset):
    """Vertex and fragment GLSL source ready for compilation."""

    vert_src: str
    frag_src: str

    @classmethod
    def load(cls, config: ShaderConfig) -> "ShaderAsset":
        """Resolve both sources of ``config``."""
        return cls(config.vert.resolve(), config.frag.resolve())