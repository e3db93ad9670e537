"""Version schemas."""

from typing import Optional

from pydantic import BaseModel

from .item import CAMEL_CONFIG


class VersionCreate(BaseModel):
    """Snapshot the item's current content, optionally under a label."""
    model_config = CAMEL_CONFIG

    label: Optional[str] = None
