import pytest

from waylite.assets import AssetManager
from waylite.shader import ShaderAsset, ShaderConfig, ShaderSource

VERT = "#version 300 es\nvoid main() {}\n"
FRAG = "#version 300 es\nprecision mediump float;\nvoid main() {}\n"


def test_inline_source_resolves_to_text():
    assert ShaderSource.inline(VERT).resolve() == VERT


def test_file_source_reads_file(tmp_path):
    path = tmp_path / "quad.vert"
    path.write_text(VERT, encoding="utf-8")
    assert ShaderSource.file(path).resolve() == VERT


def test_missing_file_raises_with_context(tmp_path):
    source = ShaderSource.file(tmp_path / "missing.frag")
    with pytest.raises(FileNotFoundError) as info:
        source.resolve()
    assert "failed to read shader" in str(info.value)


@pytest.mark.parametrize("kwargs", [{}, {"text": "x", "path": "y"}])
def test_source_needs_exactly_one_origin(kwargs):
    with pytest.raises(ValueError):
        ShaderSource(**kwargs)


def test_load_inline_config():
    asset = ShaderAsset.load(ShaderConfig.from_inline(VERT, FRAG))
    assert asset.vert_src == VERT
    assert asset.frag_src == FRAG


def test_load_from_files_through_manager(tmp_path):
    vert = tmp_path / "a.vert"
    frag = tmp_path / "a.frag"
    vert.write_text(VERT, encoding="utf-8")
    frag.write_text(FRAG, encoding="utf-8")
    manager = AssetManager()
    handle = manager.load(ShaderAsset, ShaderConfig.from_files(vert, frag))
    stored = manager.get(handle)
    assert (stored.vert_src, stored.frag_src) == (VERT, FRAG)


def test_load_fails_when_one_file_is_missing(tmp_path):
    vert = tmp_path / "a.vert"
    vert.write_text(VERT, encoding="utf-8")
    config = ShaderConfig.from_files(vert, tmp_path / "gone.frag")
    with pytest.raises(OSError):
        ShaderAsset.load(config)