"""Per-frame scene: raw instance data grouped by primitive kind."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Hashable


@dataclass(frozen=True, order=True)
class PrimitiveId:
    """Identifies a primitive within a scene."""

    value: int


@dataclass
class PrimitiveLayer:
    """Packed instance bytes of one primitive kind, with the bound texture."""

    instances: bytearray = field(default_factory=bytearray)
    count: int = 0
    texture: Any = None


class Scene:
    """Collects primitives for one frame, one layer per primitive kind."""

    def __init__(self, background: tuple[float, float, float] = (0.0, 0.0, 0.0)) -> None:
        self.background = background
        self._layers: dict[Hashable, PrimitiveLayer] = {}
        self._ids = itertools.count()

    def push_raw(self, kind: Hashable, data: bytes, texture: Any = None) -> PrimitiveId:
        """Append one instance of ``kind``; a given texture replaces the layer's."""
        layer = self._layers.setdefault(kind, PrimitiveLayer())
        layer.instances += data
        layer.count += 1
        if texture is not None:
            layer.texture = texture
        return PrimitiveId(next(self._ids))

    def get_layer(self, kind: Hashable) -> PrimitiveLayer | None:
        """Return the layer of ``kind``, or ``None`` if nothing was ever pushed."""
        return self._layers.get(kind)

    def clear_primitives(self) -> None:
        """Empty every layer for the next frame; the background is kept."""
        for layer in self._layers.values():
            layer.instances.clear()
            layer.count = 0
            layer.texture = None