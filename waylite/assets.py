"""A typed, handle-based asset store.

Assets load themselves through :meth:`Asset.load`. The manager keeps one store
per asset type, created on first use, and hands out :class:`Handle` values
that refer to stored assets. Post-processors turn stored assets into other
forms (for example GPU textures); their outputs are kept per output type and
removed together with the asset.
"""

from __future__ import annotations

import abc
import itertools
from dataclasses import dataclass, field
from typing import Any, Generic, Iterator, TypeVar

A = TypeVar("A", bound="Asset")


@dataclass(frozen=True)
class AssetId:
    """Opaque identifier of a stored asset; never reused within a manager."""

    value: int


@dataclass(frozen=True)
class Handle(Generic[A]):
    """A typed reference to an asset owned by an :class:`AssetManager`."""

    asset_id: AssetId
    asset_type: type = field(compare=True)

    @property
    def id(self) -> AssetId:
        return self.asset_id

    def get_processed(self, output_type: type, manager: "AssetManager") -> Any:
        """Return this asset's processed output of ``output_type``, or ``None``."""
        return manager.get_processed(self, output_type)


class Asset(abc.ABC):
    """A self-loading asset."""

    @classmethod
    @abc.abstractmethod
    def load(cls, params: Any) -> "Asset":
        """Construct the asset from ``params``; raise if it cannot be loaded."""


class AssetPostProcessor(abc.ABC):
    """Converts assets of ``input_type`` into values of ``output_type``."""

    input_type: type
    output_type: type

    @abc.abstractmethod
    def process(self, asset: Any) -> Any:
        """Return the processed form of ``asset``; raise on failure."""


@dataclass
class _Store:
    storage: dict[AssetId, Any] = field(default_factory=dict)
    pending: list[AssetId] = field(default_factory=list)


class AssetManager:
    """Central storage for loaded assets and their processed outputs."""

    def __init__(self) -> None:
        self._stores: dict[type, _Store] = {}
        self._processed: dict[type, dict[AssetId, Any]] = {}
        self._ids = itertools.count()

    def _next_id(self) -> AssetId:
        return AssetId(next(self._ids))

    def _store(self, asset_type: type) -> _Store:
        return self._stores.setdefault(asset_type, _Store())

    def _add(self, asset_type: type, asset: Any, pending: bool) -> Handle:
        asset_id = self._next_id()
        store = self._store(asset_type)
        store.storage[asset_id] = asset
        if pending:
            store.pending.append(asset_id)
        return Handle(asset_id, asset_type)

    def load(self, asset_type: type[A], params: Any) -> Handle[A]:
        """Load an asset of ``asset_type`` from ``params`` and store it."""
        asset = asset_type.load(params)
        return self._add(asset_type, asset, pending=True)

    def insert(self, asset: Asset) -> Handle:
        """Store an asset built outside :meth:`load`."""
        return self._add(type(asset), asset, pending=True)

    def get(self, handle: Handle[A]) -> A | None:
        """Return the stored asset, or ``None`` if it is not present."""
        store = self._stores.get(handle.asset_type)
        return None if store is None else store.storage.get(handle.asset_id)

    def remove(self, handle: Handle[A]) -> A | None:
        """Remove an asset and every processed output of it; return the asset."""
        for outputs in self._processed.values():
            outputs.pop(handle.asset_id, None)
        return self._store(handle.asset_type).storage.pop(handle.asset_id, None)

    def count(self, asset_type: type) -> int:
        """Number of stored assets of ``asset_type``."""
        store = self._stores.get(asset_type)
        return 0 if store is None else len(store.storage)

    def pending_count(self, asset_type: type) -> int:
        """Number of assets of ``asset_type`` waiting to be processed."""
        store = self._stores.get(asset_type)
        return 0 if store is None else len(store.pending)

    def iter_handles(self, asset_type: type[A]) -> Iterator[Handle[A]]:
        """Yield a handle for every stored asset of ``asset_type``."""
        store = self._stores.get(asset_type)
        if store is None:
            return
        for asset_id in list(store.storage):
            yield Handle(asset_id, asset_type)

    def process_pending(
        self, processor: AssetPostProcessor
    ) -> list[tuple[Handle, Exception | None]]:
        """Run ``processor`` over every pending asset of its input type.

        Failures do not stop the run: each processed asset yields its handle
        and the exception it raised, or ``None`` on success. Assets removed
        since they were queued are skipped.
        """
        store = self._store(processor.input_type)
        pending, store.pending = store.pending, []
        outputs = self._processed.setdefault(processor.output_type, {})
        results: list[tuple[Handle, Exception | None]] = []
        for asset_id in pending:
            if asset_id not in store.storage:
                continue
            handle: Handle = Handle(asset_id, processor.input_type)
            try:
                outputs[asset_id] = processor.process(store.storage[asset_id])
            except Exception as exc:
                results.append((handle, exc))
            else:
                results.append((handle, None))
        return results

    def load_and_process(self, params: Any, processor: AssetPostProcessor) -> Handle:
        """Load an asset and process it at once, bypassing the pending queue."""
        asset = processor.input_type.load(params)
        output = processor.process(asset)
        handle = self._add(processor.input_type, asset, pending=False)
        self._processed.setdefault(processor.output_type, {})[handle.asset_id] = output
        return handle

    def get_processed(self, handle: Handle, output_type: type) -> Any:
        """Return the processed output of ``output_type`` for ``handle``, or ``None``."""
        outputs = self._processed.get(output_type)
        return None if outputs is None else outputs.get(handle.asset_id)