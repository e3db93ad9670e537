"""Item lifecycle: add, update, move, delete and version snapshots.

Deep module over a TreeStore. Callers hand in drafts and partial updates and
get materialized copies back; id generation, default fields, metadata merging
and ``lastModified`` bookkeeping are handled here.
"""

import copy
import logging
import uuid
from typing import Callable, List, Optional

from ..core.clock import Clock, now_ms
from ..exceptions import (
    CyclicMoveError,
    ItemNotFoundError,
    TargetNotFolderError,
    ValidationError,
    VersionNotFoundError,
)
from ..repositories.tree_store import TreeStore, normalize_forest
from ..schemas.item import Item, ItemDraft, ItemKind, ItemMetadata, ItemUpdate, Version

# 12 hex chars = 48 bits of randomness per id; collisions are re-drawn.
ITEM_ID_HEX_LENGTH = 12

logger = logging.getLogger(__name__)


def random_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:ITEM_ID_HEX_LENGTH]}"


class ItemService:
    """Create/update/move/delete semantics on top of the tree store.

    Public methods:
        list_items / get_item   -- deep copies, never live nodes
        add_item                -- assigns id, timestamps, default fields
        update_item             -- field overwrite, metadata merge
        move_item               -- validated extract-then-insert
        delete_item             -- idempotent subtree removal
        list_versions / create_version / restore_version
        export_forest / import_forest
    """

    def __init__(
        self,
        store: TreeStore,
        clock: Clock = now_ms,
        id_factory: Callable[[str], str] = random_id,
    ):
        self.store = store
        self.clock = clock
        self.id_factory = id_factory

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_items(self) -> List[Item]:
        return self.store.snapshot()

    def get_item(self, item_id: str) -> Optional[Item]:
        node = self.store.find_node(item_id)
        return node.clone() if node else None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_item(self, parent_id: Optional[str], draft: ItemDraft) -> Item:
        """Materialize *draft* and append it at root or under folder *parent_id*.

        Raises:
            ParentNotFoundError: *parent_id* does not resolve.
            NotAFolderError: *parent_id* resolves to a leaf.
        """
        is_folder = draft.kind == ItemKind.FOLDER
        metadata = draft.metadata.model_copy(deep=True) if draft.metadata else ItemMetadata()
        metadata.last_modified = self.clock()

        item = Item(
            id=self._new_id("folder" if is_folder else "item"),
            name=draft.name,
            kind=draft.kind,
            children=[] if is_folder else None,
            content=draft.content if is_folder else (draft.content or ""),
            versions=copy.deepcopy(draft.versions),
            metadata=metadata,
        )
        self.store.insert(parent_id, item)

        logger.info(
            f"Added {item.kind.value} {item.id}",
            extra={"item_id": item.id, "parent_id": parent_id},
        )
        return item.clone()

    def update_item(self, item_id: str, updates: ItemUpdate) -> Item:
        """Apply the fields present in *updates*; metadata is merged, not replaced.

        ``metadata.lastModified`` is always reset to now, whatever the caller sent.
        """
        node = self._require(item_id)
        fields = updates.model_fields_set

        if "name" in fields and updates.name is None:
            raise ValidationError("Name cannot be null", field="name")
        if "content" in fields and node.is_folder:
            raise ValidationError("Folders have no content", field="content")

        metadata = node.metadata
        if "metadata" in fields and updates.metadata is not None:
            metadata = metadata.merged_with(updates.metadata)
        else:
            metadata = metadata.model_copy(deep=True)
        metadata.last_modified = self.clock()

        for field in fields - {"metadata"}:
            setattr(node, field, copy.deepcopy(getattr(updates, field)))
        node.metadata = metadata

        logger.info(f"Updated item {item_id}", extra={"item_id": item_id, "fields": sorted(fields)})
        return node.clone()

    def move_item(self, item_id: str, new_parent_id: Optional[str]) -> Item:
        """Re-parent *item_id* under folder *new_parent_id*, or to root when None.

        Every check runs before the tree is touched. The node is then extracted
        and inserted; if the insert fails it goes back where it was.

        Raises:
            ItemNotFoundError: *item_id* does not resolve.
            TargetNotFolderError: target missing or not a folder.
            CyclicMoveError: target is the item itself or inside its subtree.
        """
        self._require(item_id)
        if new_parent_id == item_id:
            raise CyclicMoveError(item_id, new_parent_id)

        if new_parent_id is not None:
            target = self.store.find_node(new_parent_id)
            if target is None or not target.is_folder:
                raise TargetNotFolderError(new_parent_id)
            if self.store.is_within(item_id, new_parent_id):
                raise CyclicMoveError(item_id, new_parent_id)

        origin_parent, origin_index = self.store.locate(item_id)
        node = self.store.extract_node(item_id)
        try:
            self.store.insert(new_parent_id, node)
        except Exception:
            self.store.insert_at(origin_parent, origin_index, node)
            logger.warning("Move failed, item restored", extra={"item_id": item_id})
            raise

        node.metadata.last_modified = self.clock()
        logger.info(
            f"Moved item {item_id}",
            extra={"item_id": item_id, "from_parent": origin_parent, "to_parent": new_parent_id},
        )
        return node.clone()

    def delete_item(self, item_id: str) -> bool:
        """Remove *item_id* and its subtree. Idempotent: unknown ids are a no-op.

        Returns True if something was removed.
        """
        if self.store.find_node(item_id) is None:
            logger.debug(f"Delete of unknown item {item_id} ignored")
            return False
        self.store.remove_subtree(item_id)
        logger.info(f"Deleted item {item_id}", extra={"item_id": item_id})
        return True

    # ------------------------------------------------------------------
    # Versions
    # ------------------------------------------------------------------

    def list_versions(self, item_id: str) -> List[Version]:
        node = self._require(item_id)
        return [v.model_copy() for v in node.versions or []]

    def create_version(self, item_id: str, label: Optional[str] = None) -> Version:
        """Snapshot the item's current content. Default label is ``v{n}``."""
        node = self._require(item_id)
        if node.is_folder:
            raise ValidationError("Folders do not keep versions", field="kind")

        existing = node.versions or []
        now = self.clock()
        version = Version(
            id=self._new_version_id(existing),
            timestamp=now,
            content=node.content or "",
            label=(label or "").strip() or f"v{len(existing) + 1}",
        )
        node.versions = existing + [version]
        node.metadata.last_modified = now

        logger.info(f"Created version {version.id}", extra={"item_id": item_id, "label": version.label})
        return version.model_copy()

    def restore_version(self, item_id: str, version_id: str) -> Item:
        """Replace the item's content with a snapshot's content. History is kept."""
        node = self._require(item_id)
        version = next((v for v in node.versions or [] if v.id == version_id), None)
        if version is None:
            raise VersionNotFoundError(item_id, version_id)

        node.content = version.content
        node.metadata.last_modified = self.clock()
        logger.info(f"Restored version {version_id}", extra={"item_id": item_id})
        return node.clone()

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def export_forest(self) -> List[Item]:
        return self.store.snapshot()

    def import_forest(self, forest: List[Item]) -> int:
        """Replace the whole forest. Returns the number of items imported."""
        self.store.replace(normalize_forest([node.clone() for node in forest]))
        count = len(self.store)
        logger.info(f"Imported {count} items")
        return count

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _require(self, item_id: str) -> Item:
        node = self.store.find_node(item_id)
        if node is None:
            raise ItemNotFoundError(item_id)
        return node

    def _new_id(self, prefix: str) -> str:
        while True:
            candidate = self.id_factory(prefix)
            if self.store.find_node(candidate) is None:
                return candidate

    def _new_version_id(self, existing: List[Version]) -> str:
        taken = {v.id for v in existing}
        while True:
            candidate = self.id_factory("ver")
            if candidate not in taken:
                return candidate
