"""Database models."""

from .item import ItemRecord

__all__ = ["ItemRecord"]
