"""Full-text search over the forest.

Results come back in traversal order, not ranked. Both filters (kind and
recency) only decide whether a node may produce a result; the walk always
continues into every folder's children.
"""

import logging
from typing import List, Optional

from ..core.clock import Clock, now_ms
from ..repositories.tree_store import TreeStore
from ..schemas.item import Item, ItemKind
from ..schemas.search import SearchFilters, SearchMatch, SearchResult

logger = logging.getLogger(__name__)


def find_matches(content: str, needle: str) -> List[SearchMatch]:
    """Every occurrence of *needle* (already lower-cased) in *content*, line by line.

    Columns are 1-indexed and the end column is exclusive. After a hit the
    scan resumes one character further on, so overlapping occurrences of a
    repeating pattern ("aa" in "aaa") are all reported.
    """
    matches: List[SearchMatch] = []
    for line_number, line in enumerate(content.split("\n"), start=1):
        haystack = line.lower()
        start = haystack.find(needle)
        while start != -1:
            matches.append(SearchMatch(
                line_content=line,
                line_number=line_number,
                start_column=start + 1,
                end_column=start + 1 + len(needle),
            ))
            start = haystack.find(needle, start + 1)
    return matches


def passes_filters(node: Item, filters: SearchFilters, now: int) -> bool:
    if filters.kinds and node.kind not in filters.kinds:
        return False
    window = filters.date.window_ms
    if window is not None and now - (node.metadata.last_modified or 0) > window:
        return False
    return True


class SearchService:
    """Case-insensitive name and content search with kind/date filters."""

    def __init__(self, store: TreeStore, clock: Clock = now_ms):
        self.store = store
        self.clock = clock

    def search(self, query: str, filters: Optional[SearchFilters] = None) -> List[SearchResult]:
        if not query.strip():
            return []

        filters = filters or SearchFilters()
        needle = query.lower()
        now = self.clock()
        results: List[SearchResult] = []

        for node in self.store.walk():
            if not passes_filters(node, filters, now):
                continue

            matches: List[SearchMatch] = []
            if node.kind == ItemKind.LEAF and node.content:
                matches = find_matches(node.content, needle)

            if needle in node.name.lower() or matches:
                results.append(SearchResult(
                    item_id=node.id,
                    item_name=node.name,
                    item_kind=node.kind,
                    matches=matches,
                    last_modified=node.metadata.last_modified,
                ))

        logger.debug(
            f"Search returned {len(results)} results",
            extra={"query": query, "kinds": [k.value for k in filters.kinds], "date": filters.date.value},
        )
        return results
