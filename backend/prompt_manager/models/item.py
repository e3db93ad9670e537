"""Item row model: one row per node, placement by parent id and position."""

from sqlalchemy import Boolean, Column, Index, Integer, JSON, String, Text
from ..database import Base


class ItemRecord(Base):
    """Flattened forest node."""

    __tablename__ = "items"
    __table_args__ = (
        Index("ix_items_parent_id", "parent_id"),
        Index("ix_items_position", "position"),
    )

    id = Column(String(64), primary_key=True)

    # Placement: NULL = root level. Siblings are ordered by position.
    parent_id = Column(String(64), nullable=True)
    position = Column(Integer, nullable=False)

    # The item's own parentId field, kept separately so a round-trip is exact.
    parent_ref = Column(String(64), nullable=True)

    name = Column(Text, nullable=False)
    kind = Column(String(16), nullable=False)  # 'folder' or 'leaf'

    # True when the item carries a children list (possibly empty).
    has_children = Column(Boolean, nullable=False, default=False)

    content = Column(Text, nullable=True)
    versions = Column(JSON, nullable=True)  # [{id, timestamp, content, label}]

    # 'metadata' is reserved on declarative classes.
    meta = Column("metadata", JSON, nullable=False, default=dict)
