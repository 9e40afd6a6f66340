# waylite

Building blocks for a Wayland client, written in plain Python with no
third-party dependencies:

- a codec for the Wayland wire format,
- a model of Wayland protocol XML descriptions,
- a connection to the compositor's Unix socket that buffers messages and
  passes file descriptors,
- a CPU-side toolkit for preparing frames: typed assets (fonts, PNG images,
  shader sources), scenes and renderable primitives.

## Installing

```
pip install .
```

To run the test suite:

```
pip install .[test]
pytest
```

## Modules

| Module | Contents |
| --- | --- |
| `waylite.wire` | `encode_u32`, `encode_int`, `encode_string`, `encode_array`, `encode_message`; `parse_header`, `read_message`, `read_u32`, `read_int`, `read_string`, `read_array`. Little-endian words, strings and arrays padded to four bytes, 8-byte message headers. |
| `waylite.protocol` | `parse_protocol` and `load_protocol` read protocol XML into `Protocol`, `Interface`, `Message`, `Arg`, `Enum` and `Entry` objects. Request and event opcodes follow declaration order. Also `to_const_name` and `to_pascal_case`. |
| `waylite.connection` | `Connection` and `resolve_socket_path`. |
| `waylite.assets` | `AssetManager`, `Asset`, `AssetPostProcessor`, `Handle`, `AssetId`. |
| `waylite.font` | `FontAsset`: the raw bytes of a font file. |
| `waylite.image` | `ImageAsset` and `decode_png`: 8-bit RGB or RGBA PNG decoded to RGBA8. |
| `waylite.shader` | `ShaderSource`, `ShaderConfig`, `ShaderAsset`: GLSL given inline or read from files. |
| `waylite.scene` | `Scene`, `PrimitiveLayer`, `PrimitiveId`. |
| `waylite.primitives` | `Quad`, `MonoSprite`, `Image`, with `Rect`, `AttribDesc`, `AtlasKey`, `AtlasTile` and the `RenderablePrimitive` base. |
| `waylite.color` | `hsv_to_rgb`, and `bounce` for motion that reflects at `0` and a limit. |

## The wire codec

```python
import io
from waylite import wire

# wl_display.sync(callback id 2): object 1, opcode 0
frame = wire.encode_message(1, 0, wire.encode_u32(2))
object_id, opcode, body = wire.read_message(io.BytesIO(frame))
assert (object_id, opcode) == (1, 0)
assert wire.read_u32(body, 0) == 2

text, next_offset = wire.read_string(wire.encode_string("hello"), 0)
assert (text, next_offset) == ("hello", 12)
```

Values that do not fit their wire type raise `ValueError`. So do reads past
the end of a buffer. `read_message` raises `EOFError` when the stream ends
inside a message.

## Protocol descriptions

```python
from waylite.protocol import parse_protocol

proto = parse_protocol("""
<protocol name="example">
  <interface name="wl_display" version="1">
    <request name="sync"><arg name="callback" type="new_id" interface="wl_callback"/></request>
    <request name="get_registry"><arg name="registry" type="new_id" interface="wl_registry"/></request>
  </interface>
</protocol>
""")
display = proto.interface("wl_display")
assert display.request_opcode("get_registry") == 1
```

`load_protocol(path)` does the same for a file. Lookups of unknown names
raise `KeyError`. Malformed XML, missing attributes and unknown argument
types raise `ValueError`.

## The connection

`Connection.connect()` finds the socket from the environment. That is
`$XDG_RUNTIME_DIR/$WAYLAND_DISPLAY`, and `WAYLAND_DISPLAY` defaults to
`wayland-0`. An absolute `WAYLAND_DISPLAY` is used as given.
`resolve_socket_path` raises `FileNotFoundError` when `XDG_RUNTIME_DIR` is not
set. `Connection.connect_to(path)` connects to a given socket. A connection is
a context manager.

- `alloc_id()` hands out object ids starting at 2.
- `send_msg(object_id, opcode, args)` queues a message; `flush()` writes the
  queue.
- `send_msg_with_fds(...)` flushes, then sends one message with the
  descriptors attached as `SCM_RIGHTS`. It closes those descriptors afterwards.
- `recv_msg()` blocks for one message and returns `(object_id, opcode, body)`.
  `try_recv_msg()` returns `None` when nothing is waiting.
- Descriptors that arrive are queued. `pop_fd()` takes the oldest and raises
  `OSError` when there is none.

## Assets

```python
from dataclasses import dataclass
from waylite.assets import Asset, AssetManager, AssetPostProcessor

@dataclass
class Text(Asset):
    value: str

    @classmethod
    def load(cls, params):
        return cls(str(params))

class Upper(AssetPostProcessor):
    input_type = Text
    output_type = str

    def process(self, asset):
        return asset.value.upper()

assets = AssetManager()
handle = assets.load(Text, "hi")
assert assets.pending_count(Text) == 1
results = assets.process_pending(Upper())   # [(handle, None)]
assert handle.get_processed(str, assets) == "HI"
```

`process_pending` does not stop at a failure. For every processed asset it
returns the handle together with the exception it raised, or `None`.
`load_and_process` loads and processes at once and skips the pending queue.
`remove` drops the asset and every processed output of it.

## Scenes and primitives

```python
from waylite.primitives import Quad, Rect
from waylite.scene import Scene

scene = Scene(background=(1.0, 1.0, 1.0))
Quad(Rect(10, 10, 200, 100), (1.0, 0.0, 0.0, 1.0)).add_to_scene(scene)
layer = scene.get_layer(Quad)
assert layer.count == 1 and len(layer.instances) == 64
```

Each primitive packs into 64 bytes: sixteen little-endian floats in pixel
coordinates. Primitives also carry their GLSL ES 3.0 shader sources
(`vert_src`, `frag_src`) and attribute layout (`attrib_layout`). Without a
clip rectangle, the instance gets the clip `(0, 0, 1e9, 1e9)`.
`Scene.clear_primitives()` empties the layers and keeps the background.

## What it does not do

- There is no command to run.
- Nothing here opens a window.
- There are no request proxies or event handlers for Wayland interfaces.
  Messages are built and read with `waylite.wire` and `waylite.protocol`,
  and the caller routes them.
- Nothing here allocates shared-memory buffers.
- Nothing here draws on the GPU. Scenes and primitives only produce packed
  instance data and shader sources for a renderer to consume.