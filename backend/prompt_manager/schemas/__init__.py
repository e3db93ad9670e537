"""Pydantic schemas for API validation and the in-memory forest."""

from .item import (
    ItemKind,
    ItemMetadata,
    Version,
    Item,
    ItemDraft,
    ItemCreate,
    ItemUpdate,
    ItemMoveRequest,
)
from .search import (
    DateFilter,
    SearchFilters,
    SearchMatch,
    SearchResult,
)
from .transfer import ImportResult
from .version import VersionCreate

__all__ = [
    "ItemKind",
    "ItemMetadata",
    "Version",
    "Item",
    "ItemDraft",
    "ItemCreate",
    "ItemUpdate",
    "ItemMoveRequest",
    "DateFilter",
    "SearchFilters",
    "SearchMatch",
    "SearchResult",
    "ImportResult",
    "VersionCreate",
]
