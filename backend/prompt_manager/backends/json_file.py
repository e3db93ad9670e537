"""JSON document backend: the whole forest in one file, rewritten after each mutation."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, List, Union

from ..core.clock import Clock, now_ms
from ..exceptions import StorageError, ValidationError
from ..schemas.item import Item
from ..services.forest_codec import forest_from_json, forest_to_json
from ..services.item_service import random_id
from .local import LocalBackend

logger = logging.getLogger(__name__)


class JsonFileBackend(LocalBackend):
    """Forest persisted as nested camelCase records in a single JSON file.

    A missing or blank file starts an empty forest. A file that cannot be read
    or parsed raises StorageError rather than being overwritten.
    """

    durable = True

    def __init__(
        self,
        path: Union[str, Path],
        clock: Clock = now_ms,
        id_factory: Callable[[str], str] = random_id,
    ):
        self.path = Path(path)
        super().__init__(clock=clock, id_factory=id_factory)

    def _load(self) -> List[Item]:
        if not self.path.exists():
            logger.info(f"No data file at {self.path}, starting empty")
            return []
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}", e) from e
        if not text.strip():
            return []
        try:
            return forest_from_json(text)
        except ValidationError as e:
            raise StorageError(f"Corrupt data file {self.path}: {e.message}", e) from e

    def _persist(self, roots: List[Item]) -> None:
        payload = forest_to_json(roots)
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            # Write to a sibling temp file and swap it in, so readers never see a partial file.
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}", e) from e
        logger.debug(f"Wrote forest to {self.path}", extra={"bytes": len(payload)})
