"""In-memory forest storage."""

from .tree_store import TreeStore

__all__ = ["TreeStore"]
