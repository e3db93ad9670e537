"""Storage backends behind the ItemBackend interface."""

from .base import ItemBackend
from .factory import create_backend
from .json_file import JsonFileBackend
from .local import LocalBackend, MemoryBackend
from .remote import RemoteBackend
from .sql import SqlBackend

__all__ = [
    "ItemBackend",
    "LocalBackend",
    "MemoryBackend",
    "JsonFileBackend",
    "SqlBackend",
    "RemoteBackend",
    "create_backend",
]
