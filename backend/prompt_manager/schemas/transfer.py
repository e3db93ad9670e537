"""Import/export schemas."""

from pydantic import BaseModel

from .item import CAMEL_CONFIG


class ImportResult(BaseModel):
    """Outcome of replacing the forest with an imported one."""
    model_config = CAMEL_CONFIG

    imported: int
