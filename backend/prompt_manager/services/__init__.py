"""Business logic services."""

from .item_service import ItemService
from .search_service import SearchService

__all__ = ["ItemService", "SearchService"]
