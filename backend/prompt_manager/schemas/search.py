"""Search filter and result schemas."""

from enum import Enum
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field

from .item import CAMEL_CONFIG, ItemKind, KindField

ONE_DAY_MS = 86_400_000


class DateFilter(str, Enum):
    """Recency window applied to ``metadata.lastModified``."""
    ANY = "any"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"

    @property
    def window_ms(self) -> Optional[int]:
        """Maximum age in milliseconds, or None for no restriction."""
        return {
            DateFilter.TODAY: ONE_DAY_MS,
            DateFilter.WEEK: ONE_DAY_MS * 7,
            DateFilter.MONTH: ONE_DAY_MS * 30,
        }.get(self)


class SearchFilters(BaseModel):
    """Optional result filters. An empty ``kinds`` list means every kind."""
    model_config = CAMEL_CONFIG

    kinds: List[KindField] = Field(
        default_factory=list,
        validation_alias=AliasChoices("kinds", "types"),
    )
    date: DateFilter = DateFilter.ANY


class SearchMatch(BaseModel):
    """One occurrence of the query inside a line of content (1-indexed, end exclusive)."""
    model_config = CAMEL_CONFIG

    line_content: str
    line_number: int
    start_column: int
    end_column: int


class SearchResult(BaseModel):
    """An item whose name or content matched the query."""
    model_config = CAMEL_CONFIG

    item_id: str
    item_name: str
    item_kind: ItemKind
    matches: List[SearchMatch] = []
    last_modified: Optional[int] = None
