"""Renderable primitives and the instance data they hand to the GPU.

Each primitive packs into one 64-byte instance of sixteen 32-bit floats, in
pixel coordinates; the vertex shaders convert to clip space using a
``u_viewport`` uniform.
"""

from __future__ import annotations

import abc
import struct
from dataclasses import dataclass
from typing import Any

from .scene import PrimitiveId, Scene

INSTANCE_SIZE = 64
INSTANCE_FORMAT = struct.Struct("<16f")


@dataclass(frozen=True)
class Rect:
    """An axis-aligned rectangle in pixels."""

    x: float
    y: float
    w: float
    h: float


_NO_CLIP = Rect(0.0, 0.0, 1e9, 1e9)


def _edges(rect: Rect) -> tuple[float, float, float, float]:
    return rect.x, rect.y, rect.x + rect.w, rect.y + rect.h


def _color(value: Any) -> tuple[float, float, float, float]:
    color = tuple(float(c) for c in value)
    if len(color) != 4:
        raise ValueError(f"a colour has 4 components, got {len(color)}")
    return color  # type: ignore[return-value]


@dataclass(frozen=True)
class AttribDesc:
    """One per-instance vertex attribute: location, components, stride, offset."""

    location: int
    size: int
    stride: int
    offset: int


@dataclass(frozen=True)
class AtlasKey:
    """Identifies a rasterised glyph; the size is stored as pixels times 64."""

    font_id: int
    glyph_id: int
    font_size_x64: int


@dataclass(frozen=True)
class AtlasTile:
    """Where a glyph sits in the atlas texture, and its bearing."""

    x: int
    y: int
    w: int
    h: int
    bearing_x: int
    bearing_y: int


class RenderablePrimitive(abc.ABC):
    """A primitive with shaders, an attribute layout and instance data."""

    _VERT_SRC = ""
    _FRAG_SRC = ""
    _ATTRIBS: tuple[AttribDesc, ...] = ()

    @classmethod
    def vert_src(cls) -> str:
        return cls._VERT_SRC

    @classmethod
    def frag_src(cls) -> str:
        return cls._FRAG_SRC

    @classmethod
    def attrib_layout(cls) -> tuple[AttribDesc, ...]:
        return cls._ATTRIBS

    @abc.abstractmethod
    def to_instance(self) -> tuple[float, ...]:
        """The sixteen floats of this primitive's instance data."""

    @abc.abstractmethod
    def bounding_box(self) -> Rect:
        """The screen rectangle the primitive covers."""

    def clip(self) -> Rect | None:
        return None

    def texture_id(self) -> Any:
        return None

    def add_to_scene(self, scene: Scene) -> PrimitiveId:
        """Pack this primitive and append it to its layer in ``scene``."""
        data = INSTANCE_FORMAT.pack(*self.to_instance())
        return scene.push_raw(type(self), data, self.texture_id())


_QUAD_VERT = """#version 300 es
precision mediump float;

layout(location = 0) in vec4 i_screen_rect;
layout(location = 1) in vec4 i_color;
layout(location = 2) in vec4 i_clip_rect;

uniform vec2 u_viewport;

out vec4 v_color;
out vec4 v_clip;

void main() {
    vec2 corner = vec2(float(gl_VertexID & 1), float((gl_VertexID >> 1) & 1));
    vec2 pos = mix(i_screen_rect.xy, i_screen_rect.zw, corner);
    vec2 ndc = pos / u_viewport * 2.0 - 1.0;
    gl_Position = vec4(ndc, 0.0, 1.0);
    v_color = i_color;
    v_clip  = i_clip_rect;
}
"""

_QUAD_FRAG = """#version 300 es
precision mediump float;

in vec4 v_color;
in vec4 v_clip;

out vec4 frag_color;

void main() {
    if (gl_FragCoord.x < v_clip.x || gl_FragCoord.x > v_clip.z ||
        gl_FragCoord.y < v_clip.y || gl_FragCoord.y > v_clip.w) {
        discard;
    }
    frag_color = v_color;
}
"""

_MONO_VERT = """#version 300 es
precision mediump float;

layout(location = 0) in vec4 i_screen_rect;
layout(location = 1) in vec4 i_atlas_rect;
layout(location = 2) in vec4 i_color;
layout(location = 3) in vec4 i_clip_rect;

uniform vec2 u_viewport;

out vec2 v_uv;
out vec4 v_color;
out vec4 v_clip;

void main() {
    vec2 corner = vec2(float(gl_VertexID & 1), float((gl_VertexID >> 1) & 1));
    vec2 pos;
    pos.x = mix(i_screen_rect.x, i_screen_rect.z, corner.x);
    pos.y = mix(i_screen_rect.y, i_screen_rect.w, corner.y);
    vec2 ndc = pos / u_viewport * 2.0 - 1.0;
    gl_Position = vec4(ndc, 0.0, 1.0);
    vec2 raw_uv = mix(i_atlas_rect.xy, i_atlas_rect.zw, corner);
    v_uv    = raw_uv;
    v_color = i_color;
    v_clip  = i_clip_rect;
}
"""

_MONO_FRAG = """#version 300 es
precision mediump float;

uniform sampler2D u_atlas;

in vec2 v_uv;
in vec4 v_color;
in vec4 v_clip;

out vec4 frag_color;

void main() {
    if (gl_FragCoord.x < v_clip.x || gl_FragCoord.x > v_clip.z ||
        gl_FragCoord.y < v_clip.y || gl_FragCoord.y > v_clip.w) {
        discard;
    }
    float alpha = texture(u_atlas, v_uv).r;
    frag_color = vec4(v_color.rgb, v_color.a * alpha);
}
"""

_IMAGE_VERT = """#version 300 es
precision mediump float;

layout(location = 0) in vec4 i_screen_rect;
layout(location = 1) in vec4 i_clip_rect;

uniform vec2 u_viewport;

out vec2 v_uv;
out vec4 v_clip;

void main() {
    vec2 corner = vec2(float(gl_VertexID & 1), float((gl_VertexID >> 1) & 1));
    vec2 pos = mix(i_screen_rect.xy, i_screen_rect.zw, corner);
    vec2 ndc = pos / u_viewport * 2.0 - 1.0;
    gl_Position = vec4(ndc, 0.0, 1.0);
    v_uv   = corner;
    v_clip = i_clip_rect;
}
"""

_IMAGE_FRAG = """#version 300 es
precision mediump float;

uniform sampler2D u_atlas;

in vec2 v_uv;
in vec4 v_clip;

out vec4 frag_color;

void main() {
    if (gl_FragCoord.x < v_clip.x || gl_FragCoord.x > v_clip.z ||
        gl_FragCoord.y < v_clip.y || gl_FragCoord.y > v_clip.w) {
        discard;
    }
    frag_color = texture(u_atlas, v_uv);
}
"""


@dataclass(frozen=True)
class Quad(RenderablePrimitive):
    """A solid-colour rectangle."""

    bounds: Rect
    color: tuple[float, float, float, float]
    clip_rect: Rect | None = None

    _VERT_SRC = _QUAD_VERT
    _FRAG_SRC = _QUAD_FRAG
    _ATTRIBS = (
        AttribDesc(0, 4, INSTANCE_SIZE, 0),
        AttribDesc(1, 4, INSTANCE_SIZE, 16),
        AttribDesc(2, 4, INSTANCE_SIZE, 32),
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "color", _color(self.color))

    def to_instance(self) -> tuple[float, ...]:
        clip = self.clip_rect or _NO_CLIP
        return (*_edges(self.bounds), *self.color, *_edges(clip), 0.0, 0.0, 0.0, 0.0)

    def bounding_box(self) -> Rect:
        return self.bounds

    def clip(self) -> Rect | None:
        return self.clip_rect


@dataclass(frozen=True)
class MonoSprite(RenderablePrimitive):
    """A single-channel atlas tile tinted with a colour, used for glyphs."""

    bounds: Rect
    tile: AtlasTile
    atlas_size: tuple[int, int]
    atlas_tex: Any
    color: tuple[float, float, float, float]
    clip_rect: Rect | None = None

    _VERT_SRC = _MONO_VERT
    _FRAG_SRC = _MONO_FRAG
    _ATTRIBS = (
        AttribDesc(0, 4, INSTANCE_SIZE, 0),
        AttribDesc(1, 4, INSTANCE_SIZE, 16),
        AttribDesc(2, 4, INSTANCE_SIZE, 32),
        AttribDesc(3, 4, INSTANCE_SIZE, 48),
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "color", _color(self.color))

    def to_instance(self) -> tuple[float, ...]:
        atlas_w, atlas_h = (float(n) for n in self.atlas_size)
        tile = self.tile
        uv = (
            tile.x / atlas_w,
            tile.y / atlas_h,
            (tile.x + tile.w) / atlas_w,
            (tile.y + tile.h) / atlas_h,
        )
        clip = self.clip_rect or _NO_CLIP
        return (*_edges(self.bounds), *uv, *self.color, *_edges(clip))

    def bounding_box(self) -> Rect:
        return self.bounds

    def clip(self) -> Rect | None:
        return self.clip_rect

    def texture_id(self) -> Any:
        return self.atlas_tex


@dataclass(frozen=True)
class Image(RenderablePrimitive):
    """A full-colour RGBA texture drawn into a rectangle."""

    bounds: Rect
    texture: Any
    clip_rect: Rect | None = None

    _VERT_SRC = _IMAGE_VERT
    _FRAG_SRC = _IMAGE_FRAG
    _ATTRIBS = (
        AttribDesc(0, 4, INSTANCE_SIZE, 0),
        AttribDesc(1, 4, INSTANCE_SIZE, 16),
    )

    def to_instance(self) -> tuple[float, ...]:
        clip = self.clip_rect or _NO_CLIP
        return (*_edges(self.bounds), *_edges(clip), *(0.0,) * 8)

    def bounding_box(self) -> Rect:
        return self.bounds

    def clip(self) -> Rect | None:
        return self.clip_rect

    def texture_id(self) -> Any:
        return self.texture