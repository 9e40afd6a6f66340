import pytest

from waylite.assets import Asset, AssetManager, AssetPostProcessor, Handle


class TextAsset(Asset):
    def __init__(self, text):
        self.text = text

    @classmethod
    def load(cls, params):
        if params == "bad":
            raise ValueError("cannot load")
        return cls(params)


class NumberAsset(Asset):
    def __init__(self, value):
        self.value = value

    @classmethod
    def load(cls, params):
        return cls(int(params))


class Upper:
    def __init__(self, text):
        self.text = text


class UpperProcessor(AssetPostProcessor):
    input_type = TextAsset
    output_type = Upper

    def process(self, asset):
        if asset.text == "fail":
            raise RuntimeError("refused")
        return Upper(asset.text.upper())


class LengthProcessor(AssetPostProcessor):
    input_type = TextAsset
    output_type = int

    def process(self, asset):
        return len(asset.text)


def test_load_stores_asset_and_queues_it():
    manager = AssetManager()
    handle = manager.load(TextAsset, "hello")
    assert manager.get(handle).text == "hello"
    assert manager.count(TextAsset) == 1
    assert manager.pending_count(TextAsset) == 1


def test_ids_are_unique():
    manager = AssetManager()
    first = manager.load(TextAsset, "a")
    second = manager.load(TextAsset, "a")
    third = manager.insert(NumberAsset(3))
    assert len({first.id, second.id, third.id}) == 3


def test_load_error_propagates_and_stores_nothing():
    manager = AssetManager()
    with pytest.raises(ValueError):
        manager.load(TextAsset, "bad")
    assert manager.count(TextAsset) == 0


def test_unknown_type_counts_are_zero():
    manager = AssetManager()
    assert manager.count(NumberAsset) == 0
    assert manager.pending_count(NumberAsset) == 0
    assert list(manager.iter_handles(NumberAsset)) == []


def test_insert_uses_asset_type():
    manager = AssetManager()
    handle = manager.insert(NumberAsset(5))
    assert handle.asset_type is NumberAsset
    assert manager.get(handle).value == 5
    assert manager.count(TextAsset) == 0


def test_iter_handles_lists_all():
    manager = AssetManager()
    handles = {manager.load(TextAsset, "a"), manager.load(TextAsset, "b")}
    assert set(manager.iter_handles(TextAsset)) == handles


def test_process_pending_stores_outputs_and_drains():
    manager = AssetManager()
    handle = manager.load(TextAsset, "hello")
    assert manager.get_processed(handle, Upper) is None
    results = manager.process_pending(UpperProcessor())
    assert results == [(handle, None)]
    assert manager.get_processed(handle, Upper).text == "HELLO"
    assert handle.get_processed(Upper, manager).text == "HELLO"
    assert manager.pending_count(TextAsset) == 0
    assert manager.process_pending(UpperProcessor()) == []


def test_process_pending_collects_failures():
    manager = AssetManager()
    bad = manager.load(TextAsset, "fail")
    good = manager.load(TextAsset, "ok")
    results = dict(manager.process_pending(UpperProcessor()))
    assert isinstance(results[bad], RuntimeError)
    assert results[good] is None
    assert manager.get_processed(bad, Upper) is None
    assert manager.get_processed(good, Upper).text == "OK"


def test_process_pending_skips_removed_assets():
    manager = AssetManager()
    removed = manager.load(TextAsset, "gone")
    kept = manager.load(TextAsset, "kept")
    manager.remove(removed)
    results = manager.process_pending(UpperProcessor())
    assert [handle for handle, _ in results] == [kept]


def test_remove_drops_all_outputs():
    manager = AssetManager()
    handle = manager.load(TextAsset, "abc")
    manager.process_pending(UpperProcessor())
    manager.load_and_process("xy", LengthProcessor())
    manager.get_processed(handle, int)
    removed = manager.remove(handle)
    assert removed.text == "abc"
    assert manager.get(handle) is None
    assert manager.get_processed(handle, Upper) is None
    assert manager.remove(handle) is None


def test_load_and_process_bypasses_queue():
    manager = AssetManager()
    handle = manager.load_and_process("four", LengthProcessor())
    assert manager.pending_count(TextAsset) == 0
    assert manager.get_processed(handle, int) == len("four")
    assert manager.get(handle).text == "four"


def test_load_and_process_failure_stores_nothing():
    manager = AssetManager()
    with pytest.raises(RuntimeError):
        manager.load_and_process("fail", UpperProcessor())
    assert manager.count(TextAsset) == 0


def test_handles_compare_by_id_and_type():
    manager = AssetManager()
    handle = manager.load(TextAsset, "a")
    assert handle == Handle(handle.id, TextAsset)
    assert handle != Handle(handle.id, NumberAsset)


def test_asset_base_is_abstract():
    with pytest.raises(TypeError):
        Asset()
    with pytest.raises(TypeError):
        AssetPostProcessor()