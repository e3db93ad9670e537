"""Search API."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..backends.base import ItemBackend
from ..exceptions import ValidationError
from ..schemas.item import ItemKind
from ..schemas.search import DateFilter, SearchFilters, SearchResult
from .deps import get_backend

router = APIRouter(prefix="/api/search", tags=["search"])


def _parse_kinds(raw: Optional[str]) -> List[ItemKind]:
    """``"folder,leaf"`` -> kinds. Blank entries are ignored."""
    if not raw:
        return []
    kinds = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        if part == "prompt":
            part = ItemKind.LEAF.value
        try:
            kinds.append(ItemKind(part))
        except ValueError:
            raise ValidationError(f"Unknown item kind: {part}", field="kinds")
    return kinds


@router.get("/", response_model=List[SearchResult], response_model_exclude_none=True)
def search_items(
    q: str = Query("", description="Case-insensitive text matched against names and prompt content"),
    kinds: Optional[str] = Query(None, description="Comma-separated kinds to keep (folder, leaf)"),
    date: DateFilter = Query(DateFilter.ANY, description="Only items modified within this window"),
    backend: ItemBackend = Depends(get_backend),
):
    """Matches in depth-first tree order, each with line/column positions of content hits."""
    filters = SearchFilters(kinds=_parse_kinds(kinds), date=date)
    return backend.search_items(q, filters)
