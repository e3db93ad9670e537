"""Backends that keep the forest in this process.

``LocalBackend`` owns a private TreeStore plus the service pair over it and
serializes every call with one re-entrant lock, reads included, so no caller
ever observes a half-applied mutation. Durable subclasses load the forest once
at construction and write it back after each successful mutation.
"""

import logging
import threading
from typing import Callable, List, Optional, TypeVar

from ..core.clock import Clock, now_ms
from ..exceptions import StorageError, ValidationError
from ..repositories.tree_store import TreeStore
from ..schemas.item import Item, ItemDraft, ItemUpdate, Version
from ..schemas.search import SearchFilters, SearchResult
from ..services.item_service import ItemService, random_id
from ..services.search_service import SearchService
from .base import ItemBackend

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LocalBackend(ItemBackend):
    """Lock-guarded store and services. Subclasses supply ``_load`` / ``_persist``."""

    # Whether mutations are written back through _persist().
    durable = False

    def __init__(self, clock: Clock = now_ms, id_factory: Callable[[str], str] = random_id):
        self._lock = threading.RLock()
        try:
            self._store = TreeStore.from_forest(self._load())
        except ValidationError as e:
            raise StorageError(f"Stored forest is invalid: {e.message}", e) from e
        self._items = ItemService(self._store, clock=clock, id_factory=id_factory)
        self._search = SearchService(self._store, clock=clock)
        logger.info(
            f"{type(self).__name__} ready",
            extra={"item_count": len(self._store)},
        )

    # ------------------------------------------------------------------
    # Persistence hooks
    # ------------------------------------------------------------------

    def _load(self) -> List[Item]:
        return []

    def _persist(self, roots: List[Item]) -> None:
        pass

    def _mutate(self, operation: Callable[[], T]) -> T:
        """Run *operation* under the lock and persist the result.

        Service operations validate before they touch the tree, so a raised
        error leaves nothing to undo. A failed write rolls the store back to
        the forest it held before the operation.
        """
        with self._lock:
            before = self._store.snapshot() if self.durable else None
            result = operation()
            if self.durable:
                try:
                    self._persist(self._store.roots)
                except StorageError:
                    self._store.replace(before)
                    raise
                except Exception as e:
                    self._store.replace(before)
                    logger.error(f"Persisting forest failed: {e}")
                    raise StorageError("Failed to persist items", e) from e
            return result

    # ------------------------------------------------------------------
    # ItemBackend
    # ------------------------------------------------------------------

    def list_items(self) -> List[Item]:
        with self._lock:
            return self._items.list_items()

    def get_item(self, item_id: str) -> Optional[Item]:
        with self._lock:
            return self._items.get_item(item_id)

    def add_item(self, parent_id: Optional[str], draft: ItemDraft) -> Item:
        return self._mutate(lambda: self._items.add_item(parent_id, draft))

    def update_item(self, item_id: str, updates: ItemUpdate) -> Item:
        return self._mutate(lambda: self._items.update_item(item_id, updates))

    def delete_item(self, item_id: str) -> None:
        with self._lock:
            if self._store.find_node(item_id) is None:
                return
            self._mutate(lambda: self._items.delete_item(item_id))

    def move_item(self, item_id: str, new_parent_id: Optional[str]) -> Item:
        return self._mutate(lambda: self._items.move_item(item_id, new_parent_id))

    def search_items(self, query: str, filters: Optional[SearchFilters] = None) -> List[SearchResult]:
        with self._lock:
            return self._search.search(query, filters)

    def list_versions(self, item_id: str) -> List[Version]:
        with self._lock:
            return self._items.list_versions(item_id)

    def create_version(self, item_id: str, label: Optional[str] = None) -> Version:
        return self._mutate(lambda: self._items.create_version(item_id, label))

    def restore_version(self, item_id: str, version_id: str) -> Item:
        return self._mutate(lambda: self._items.restore_version(item_id, version_id))

    def export_forest(self) -> List[Item]:
        with self._lock:
            return self._items.export_forest()

    def import_forest(self, forest: List[Item]) -> int:
        return self._mutate(lambda: self._items.import_forest(forest))

    def count(self) -> int:
        with self._lock:
            return len(self._store)


class MemoryBackend(LocalBackend):
    """Volatile backend: the forest lives as long as the process."""

    def __init__(
        self,
        forest: Optional[List[Item]] = None,
        clock: Clock = now_ms,
        id_factory: Callable[[str], str] = random_id,
    ):
        self._initial = [node.clone() for node in forest or []]
        super().__init__(clock=clock, id_factory=id_factory)

    def _load(self) -> List[Item]:
        initial, self._initial = self._initial, []
        return initial
