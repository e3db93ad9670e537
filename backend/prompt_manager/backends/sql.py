"""SQL backend: one ``items`` row per node, rewritten in a single transaction per mutation."""

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ..core.clock import Clock, now_ms
from ..database import Base, create_db_engine, create_session_factory
from ..exceptions import StorageError, ValidationError
from ..models.item import ItemRecord
from ..schemas.item import Item
from ..services.forest_codec import forest_from_records, item_to_record
from ..services.item_service import random_id
from .local import LocalBackend

logger = logging.getLogger(__name__)


def flatten(roots: List[Item]) -> List[ItemRecord]:
    """Rows for every node in preorder, placement kept as (parent_id, position)."""
    rows: List[ItemRecord] = []

    def visit(nodes: List[Item], placement: Optional[str]) -> None:
        for position, node in enumerate(nodes):
            record = item_to_record(node)
            rows.append(ItemRecord(
                id=node.id,
                parent_id=placement,
                position=position,
                parent_ref=node.parent_id,
                name=node.name,
                kind=node.kind.value,
                has_children=node.children is not None,
                content=node.content,
                versions=record.get("versions"),
                meta=record.get("metadata", {}),
            ))
            if node.children:
                visit(node.children, node.id)

    visit(roots, None)
    return rows


def rebuild(rows: List[ItemRecord]) -> List[Dict[str, Any]]:
    """Nested records from flat rows. Rows whose placement parent is gone are dropped."""
    by_parent: Dict[Optional[str], List[ItemRecord]] = defaultdict(list)
    for row in sorted(rows, key=lambda r: r.position):
        by_parent[row.parent_id].append(row)
    placed = 0

    def build(row: ItemRecord) -> Dict[str, Any]:
        nonlocal placed
        placed += 1
        record: Dict[str, Any] = {
            "id": row.id,
            "name": row.name,
            "kind": row.kind,
            "metadata": row.meta or {},
        }
        if row.parent_ref is not None:
            record["parentId"] = row.parent_ref
        if row.content is not None:
            record["content"] = row.content
        if row.versions is not None:
            record["versions"] = row.versions
        if row.has_children:
            record["children"] = [build(child) for child in by_parent.get(row.id, [])]
        return record

    forest = [build(row) for row in by_parent.get(None, [])]
    if placed != len(rows):
        logger.warning(f"Dropped {len(rows) - placed} orphaned item rows")
    return forest


class SqlBackend(LocalBackend):
    """Forest persisted in a relational table via SQLAlchemy (SQLite or PostgreSQL)."""

    durable = True

    def __init__(
        self,
        database_url: Optional[str] = None,
        engine: Optional[Engine] = None,
        clock: Clock = now_ms,
        id_factory: Callable[[str], str] = random_id,
        **engine_options: Any,
    ):
        if engine is None:
            if not database_url:
                raise ValueError("SqlBackend needs a database_url or an engine")
            engine = create_db_engine(database_url, **engine_options)
        self.engine = engine
        self._session_factory = create_session_factory(engine)
        try:
            Base.metadata.create_all(bind=engine)
        except SQLAlchemyError as e:
            raise StorageError("Cannot create items table", e) from e
        super().__init__(clock=clock, id_factory=id_factory)

    def _load(self) -> List[Item]:
        try:
            with self._session_factory() as session:
                rows = list(session.scalars(select(ItemRecord)))
                records = rebuild(rows)
        except SQLAlchemyError as e:
            raise StorageError("Cannot read items table", e) from e
        try:
            return forest_from_records(records)
        except ValidationError as e:
            raise StorageError(f"Corrupt item rows: {e.message}", e) from e

    def _persist(self, roots: List[Item]) -> None:
        rows = flatten(roots)
        try:
            with self._session_factory() as session, session.begin():
                session.execute(delete(ItemRecord))
                session.add_all(rows)
        except SQLAlchemyError as e:
            raise StorageError("Cannot write items table", e) from e
        logger.debug(f"Wrote {len(rows)} item rows")

    def close(self) -> None:
        self.engine.dispose()
