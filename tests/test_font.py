import pytest

from waylite.assets import AssetManager
from waylite.font import FontAsset


def test_load_reads_file_bytes(tmp_path):
    path = tmp_path / "face.ttf"
    path.write_bytes(b"\x00\x01\x00\x00font-bytes")
    asset = FontAsset.load(path)
    assert asset.data == b"\x00\x01\x00\x00font-bytes"


def test_load_accepts_string_path(tmp_path):
    path = tmp_path / "face.otf"
    path.write_bytes(b"OTTO")
    assert FontAsset.load(str(path)).data == b"OTTO"


def test_missing_file_raises_with_context(tmp_path):
    missing = tmp_path / "absent.ttf"
    with pytest.raises(FileNotFoundError) as info:
        FontAsset.load(missing)
    assert "failed to read font" in str(info.value)
    assert "absent.ttf" in str(info.value)


def test_load_through_asset_manager(tmp_path):
    path = tmp_path / "face.ttf"
    path.write_bytes(b"glyphs")
    manager = AssetManager()
    handle = manager.load(FontAsset, path)
    assert manager.get(handle).data == b"glyphs"
    assert manager.count(FontAsset) == 1
    assert manager.pending_count(FontAsset) == 1