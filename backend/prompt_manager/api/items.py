"""Item API: CRUD and move over the configured backend.

Thin router; all tree semantics live in the backend's services.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response

from ..backends.base import ItemBackend
from ..exceptions import ItemNotFoundError
from ..schemas.item import Item, ItemCreate, ItemDraft, ItemMoveRequest, ItemUpdate
from .deps import get_backend

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/items", tags=["items"])


@router.get("", response_model=List[Item], response_model_exclude_none=True)
def list_items(backend: ItemBackend = Depends(get_backend)):
    """Whole forest, roots in order, children nested."""
    return backend.list_items()


@router.post("", response_model=Item, response_model_exclude_none=True, status_code=201)
def create_item(data: ItemCreate, backend: ItemBackend = Depends(get_backend)):
    """Create a folder or prompt at root level or under ``parentId``."""
    draft = ItemDraft.model_validate(data.model_dump(exclude={"parent_id"}, exclude_unset=True))
    return backend.add_item(data.parent_id, draft)


@router.get("/{item_id}", response_model=Item, response_model_exclude_none=True)
def get_item(item_id: str, backend: ItemBackend = Depends(get_backend)):
    item = backend.get_item(item_id)
    if item is None:
        raise ItemNotFoundError(item_id)
    return item


@router.patch("/{item_id}", response_model=Item, response_model_exclude_none=True)
def update_item(item_id: str, updates: ItemUpdate, backend: ItemBackend = Depends(get_backend)):
    """Partial update; ``metadata`` keys are merged into the existing metadata."""
    return backend.update_item(item_id, updates)


@router.delete("/{item_id}", status_code=204)
def delete_item(item_id: str, backend: ItemBackend = Depends(get_backend)):
    """Delete an item and everything below it. Unknown ids are not an error."""
    backend.delete_item(item_id)
    return Response(status_code=204)


@router.put("/{item_id}/move", response_model=Item, response_model_exclude_none=True)
def move_item(item_id: str, data: ItemMoveRequest, backend: ItemBackend = Depends(get_backend)):
    """Move under folder ``parentId``, or to root level when it is null."""
    return backend.move_item(item_id, data.parent_id)
