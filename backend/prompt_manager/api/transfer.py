"""Whole-forest export and import."""

import logging
from typing import List

from fastapi import APIRouter, Depends

from ..backends.base import ItemBackend
from ..schemas.item import Item
from ..schemas.transfer import ImportResult
from .deps import get_backend

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["transfer"])


@router.get("/export", response_model=List[Item], response_model_exclude_none=True)
def export_forest(backend: ItemBackend = Depends(get_backend)):
    """The full forest as nested records, suitable for ``PUT /api/import``."""
    return backend.export_forest()


@router.put("/import", response_model=ImportResult)
def import_forest(forest: List[Item], backend: ItemBackend = Depends(get_backend)):
    """Replace every stored item with *forest*. Ids must be unique across the forest."""
    imported = backend.import_forest(forest)
    logger.info("Forest imported", extra={"item_count": imported})
    return ImportResult(imported=imported)
