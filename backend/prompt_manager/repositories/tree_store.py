"""In-memory forest of items and the structural primitives over it.

The store is the sole owner of placement: it appends, extracts and removes
nodes and keeps each node's ``parent_id`` in step with where the node sits.
Traversal order is always depth-first in sequence order: a root, then its
children recursively, then the next root.

The store holds no lock. Callers (the local backends) serialize access.
"""

import logging
from typing import Iterable, Iterator, List, Optional, Tuple

from ..exceptions import NotAFolderError, ParentNotFoundError, ValidationError
from ..schemas.item import Item

logger = logging.getLogger(__name__)

# (containing list, index in it, owning folder or None for the root sequence)
_Slot = Tuple[List[Item], int, Optional[Item]]


def walk(nodes: Iterable[Item]) -> Iterator[Item]:
    """Depth-first preorder over *nodes* and all of their descendants."""
    for node in nodes:
        yield node
        if node.children:
            yield from walk(node.children)


def find_duplicate_ids(forest: Iterable[Item]) -> List[str]:
    """Ids that occur more than once anywhere in *forest*, in first-repeat order."""
    seen: set[str] = set()
    duplicates: List[str] = []
    for node in walk(forest):
        if node.id in seen and node.id not in duplicates:
            duplicates.append(node.id)
        seen.add(node.id)
    return duplicates


def normalize_forest(forest: List[Item]) -> List[Item]:
    """Check loaded or imported data and re-derive every ``parent_id`` from placement.

    Raises ValidationError on duplicate ids or on children under a non-folder.
    Stored ``parent_id`` values that disagree with the containing folder are
    overwritten. Mutates and returns *forest*.
    """
    duplicates = find_duplicate_ids(forest)
    if duplicates:
        raise ValidationError(
            f"Duplicate item ids in forest: {', '.join(duplicates)}", field="id"
        )
    for node in walk(forest):
        if node.children is not None and not node.is_folder:
            raise ValidationError(f"Item {node.id} is not a folder but has children", field="children")
    _adopt(forest, None)
    return forest


def _adopt(nodes: List[Item], parent_id: Optional[str]) -> None:
    for node in nodes:
        if node.parent_id != parent_id:
            logger.warning(
                f"Item {node.id} stored parentId {node.parent_id!r}, placed under {parent_id!r}",
                extra={"item_id": node.id},
            )
            node.parent_id = parent_id
        if node.children:
            _adopt(node.children, node.id)


def _without(nodes: List[Item], item_id: str) -> Tuple[List[Item], bool]:
    """Copy-on-write removal: new lists along the path to *item_id*, everything else shared."""
    for i, node in enumerate(nodes):
        if node.id == item_id:
            return nodes[:i] + nodes[i + 1:], True
        if node.children:
            children, removed = _without(node.children, item_id)
            if removed:
                replacement = node.model_copy(update={"children": children})
                return nodes[:i] + [replacement] + nodes[i + 1:], True
    return nodes, False


class TreeStore:
    """Ordered forest of root items with structural primitives.

    Public methods:
        find_node          -- depth-first lookup, live reference
        locate             -- (parent id, index) of a node
        insert             -- append at root or under a folder
        insert_at          -- put a node back at an exact position
        extract_node       -- detach a node with its subtree
        remove_subtree     -- copy-on-write delete, returns the new forest
        is_within          -- subtree membership, used for cycle checks
        walk / snapshot / replace
    """

    def __init__(self, roots: Optional[List[Item]] = None):
        self._roots: List[Item] = list(roots or [])

    @classmethod
    def from_forest(cls, forest: List[Item]) -> "TreeStore":
        """Build a store from loaded or imported data. See ``normalize_forest``."""
        return cls(normalize_forest(forest))

    def __len__(self) -> int:
        return sum(1 for _ in self.walk())

    def is_empty(self) -> bool:
        return not self._roots

    @property
    def roots(self) -> List[Item]:
        """Live root sequence. Read-only by convention; mutate through the store."""
        return self._roots

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def walk(self) -> Iterator[Item]:
        return walk(self._roots)

    def find_node(self, item_id: str) -> Optional[Item]:
        """Return the live node with *item_id*, or None. Never mutates."""
        for node in self.walk():
            if node.id == item_id:
                return node
        return None

    def locate(self, item_id: str) -> Optional[Tuple[Optional[str], int]]:
        """Return ``(parent_id, index)`` for *item_id*; parent_id is None at root."""
        slot = self._find_slot(item_id)
        if slot is None:
            return None
        _, index, owner = slot
        return (owner.id if owner else None), index

    def is_within(self, ancestor_id: str, candidate_id: str) -> bool:
        """True if *candidate_id* is *ancestor_id* itself or one of its descendants."""
        ancestor = self.find_node(ancestor_id)
        if ancestor is None:
            return False
        return any(node.id == candidate_id for node in walk([ancestor]))

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def insert_under_root(self, item: Item) -> None:
        item.parent_id = None
        self._roots.append(item)

    def insert_under_parent(self, parent_id: str, item: Item) -> None:
        """Append *item* to the children of folder *parent_id*."""
        self._children_of(parent_id).append(item)
        item.parent_id = parent_id

    def insert(self, parent_id: Optional[str], item: Item) -> None:
        if parent_id is None:
            self.insert_under_root(item)
        else:
            self.insert_under_parent(parent_id, item)

    def insert_at(self, parent_id: Optional[str], index: int, item: Item) -> None:
        """Insert *item* at *index* of the root sequence or of a folder's children."""
        container = self._roots if parent_id is None else self._children_of(parent_id)
        container.insert(index, item)
        item.parent_id = parent_id

    def extract_node(self, item_id: str) -> Optional[Item]:
        """Detach and return the node with *item_id* (subtree intact), or None."""
        slot = self._find_slot(item_id)
        if slot is None:
            return None
        container, index, _ = slot
        return container.pop(index)

    def remove_subtree(self, item_id: str) -> List[Item]:
        """Install and return a forest without *item_id* and its descendants.

        Lists on the path to the node are rebuilt rather than edited, so a
        reader still iterating the previous forest never sees it change.
        Unknown ids leave the forest as it is.
        """
        roots, removed = _without(self._roots, item_id)
        if removed:
            self._roots = roots
            logger.debug("Removed subtree", extra={"item_id": item_id})
        return self._roots

    def snapshot(self) -> List[Item]:
        """Deep copy of the whole forest."""
        return [node.clone() for node in self._roots]

    def replace(self, forest: List[Item]) -> None:
        self._roots = list(forest)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _children_of(self, parent_id: str) -> List[Item]:
        parent = self.find_node(parent_id)
        if parent is None:
            raise ParentNotFoundError(parent_id)
        if not parent.is_folder:
            raise NotAFolderError(parent_id)
        if parent.children is None:
            parent.children = []
        return parent.children

    def _find_slot(self, item_id: str, nodes: Optional[List[Item]] = None,
                   owner: Optional[Item] = None) -> Optional[_Slot]:
        nodes = self._roots if nodes is None else nodes
        for index, node in enumerate(nodes):
            if node.id == item_id:
                return nodes, index, owner
            if node.children:
                found = self._find_slot(item_id, node.children, node)
                if found:
                    return found
        return None
