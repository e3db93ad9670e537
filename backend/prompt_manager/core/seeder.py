"""Seed sample prompts on first startup.

Loads a JSON fixture of example prompts into an empty store so new users see
a populated tree straight away. Idempotent: skips if any item already exists.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..backends.base import ItemBackend
from ..exceptions import PromptManagerException
from ..schemas.item import ItemDraft
from .clock import now_ms

logger = logging.getLogger(__name__)

_FIXTURE_PATH = Path(__file__).parent.parent / "fixtures" / "sample_prompts.json"


def _add_tree(backend: ItemBackend, parent_id: Optional[str], nodes: List[Dict[str, Any]]) -> int:
    added = 0
    for node in nodes:
        data = dict(node)
        children = data.pop("children", None)
        for version in data.get("versions") or []:
            version.setdefault("timestamp", now_ms())
        created = backend.add_item(parent_id, ItemDraft.model_validate(data))
        added += 1
        if children:
            added += _add_tree(backend, created.id, children)
    return added


def seed_sample_items(backend: ItemBackend, fixture_path: Path = _FIXTURE_PATH) -> int:
    """Add the sample forest if the backend holds no items.

    Returns:
        Number of items seeded (0 if skipped).
    """
    existing = backend.count()
    if existing > 0:
        logger.debug("Store has %d items, skipping seed", existing)
        return 0

    if not fixture_path.exists():
        logger.debug("No seed fixture at %s", fixture_path)
        return 0

    try:
        with open(fixture_path, encoding="utf-8") as f:
            fixture = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to read seed fixture: %s", e)
        return 0

    try:
        seeded = _add_tree(backend, None, fixture.get("items", []))
    except PromptManagerException as e:
        logger.warning("Seeding stopped: %s", e.message)
        return 0

    if seeded:
        logger.info("Seeded %d sample items", seeded)
    return seeded
