"""Build the configured storage backend."""

import logging

from ..core.config import ConfigurationError, Settings, StorageBackendKind
from .base import ItemBackend
from .json_file import JsonFileBackend
from .local import MemoryBackend
from .remote import RemoteBackend
from .sql import SqlBackend

logger = logging.getLogger(__name__)


def create_backend(settings: Settings) -> ItemBackend:
    """Instantiate the backend selected by ``settings.storage_backend``.

    Raises:
        ConfigurationError: Unknown backend or missing backend settings.
    """
    settings.validate_backend_config()
    kind = settings.storage_backend

    if kind == StorageBackendKind.MEMORY:
        backend: ItemBackend = MemoryBackend()
    elif kind == StorageBackendKind.JSON:
        backend = JsonFileBackend(settings.data_file)
    elif kind == StorageBackendKind.SQL:
        backend = SqlBackend(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_recycle=settings.db_pool_recycle,
        )
    elif kind == StorageBackendKind.REMOTE:
        backend = RemoteBackend(
            settings.remote_api_url,
            token=settings.remote_api_token,
            timeout=settings.remote_api_timeout,
            max_retries=settings.remote_max_retries,
        )
    else:
        raise ConfigurationError(f"Unknown storage backend: {kind!r}")

    logger.info(f"Using {kind.value} storage backend")
    return backend
