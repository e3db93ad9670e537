"""Storage backend interface.

Every backend exposes the same operations whatever holds the forest: process
memory, a JSON document, a SQL table or another prompt manager over HTTP.
The API layer only ever talks to an ``ItemBackend``.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..schemas.item import Item, ItemDraft, ItemUpdate, Version
from ..schemas.search import SearchFilters, SearchResult


class ItemBackend(ABC):
    """Abstract item store. Implementations must be safe to call from several threads."""

    @abstractmethod
    def list_items(self) -> List[Item]:
        """Full forest as a deep copy."""

    @abstractmethod
    def get_item(self, item_id: str) -> Optional[Item]:
        """Copy of the item, or None when the id does not resolve."""

    @abstractmethod
    def add_item(self, parent_id: Optional[str], draft: ItemDraft) -> Item:
        """Create an item at root level or under a folder."""

    @abstractmethod
    def update_item(self, item_id: str, updates: ItemUpdate) -> Item:
        """Apply a partial update."""

    @abstractmethod
    def delete_item(self, item_id: str) -> None:
        """Remove an item and its subtree. Unknown ids are ignored."""

    @abstractmethod
    def move_item(self, item_id: str, new_parent_id: Optional[str]) -> Item:
        """Re-parent an item under a folder, or to root when *new_parent_id* is None."""

    @abstractmethod
    def search_items(self, query: str, filters: Optional[SearchFilters] = None) -> List[SearchResult]:
        """Case-insensitive search over names and leaf content."""

    @abstractmethod
    def list_versions(self, item_id: str) -> List[Version]:
        pass

    @abstractmethod
    def create_version(self, item_id: str, label: Optional[str] = None) -> Version:
        pass

    @abstractmethod
    def restore_version(self, item_id: str, version_id: str) -> Item:
        pass

    @abstractmethod
    def export_forest(self) -> List[Item]:
        pass

    @abstractmethod
    def import_forest(self, forest: List[Item]) -> int:
        """Replace the whole forest; returns the number of items now stored."""

    def count(self) -> int:
        """Total number of items, folders included."""
        total = 0
        stack = list(self.list_items())
        while stack:
            node = stack.pop()
            total += 1
            stack.extend(node.children or [])
        return total

    def close(self) -> None:
        """Release connections and file handles. Safe to call more than once."""
