"""Version API endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends

from ..backends.base import ItemBackend
from ..schemas.item import Item, Version
from ..schemas.version import VersionCreate
from .deps import get_backend

router = APIRouter(prefix="/api/items/{item_id}/versions", tags=["versions"])


@router.get("", response_model=List[Version], response_model_exclude_none=True)
def list_versions(item_id: str, backend: ItemBackend = Depends(get_backend)):
    """Snapshots of an item's content, oldest first."""
    return backend.list_versions(item_id)


@router.post("", response_model=Version, response_model_exclude_none=True, status_code=201)
def create_version(
    item_id: str,
    data: Optional[VersionCreate] = None,
    backend: ItemBackend = Depends(get_backend),
):
    """Snapshot the current content. Without a label the version is named ``v{n}``."""
    return backend.create_version(item_id, data.label if data else None)


@router.post("/{version_id}/restore", response_model=Item, response_model_exclude_none=True)
def restore_version(item_id: str, version_id: str, backend: ItemBackend = Depends(get_backend)):
    """Copy a snapshot's content back onto the item. The history itself is unchanged."""
    return backend.restore_version(item_id, version_id)
