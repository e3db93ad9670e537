"""API routes."""

from .items import router as items_router
from .search import router as search_router
from .versions import router as versions_router
from .transfer import router as transfer_router

__all__ = [
    "items_router",
    "search_router",
    "versions_router",
    "transfer_router",
]
