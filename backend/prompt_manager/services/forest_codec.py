"""Serialization of the forest to and from nested JSON records.

The persisted form mirrors the Item shape with camelCase keys. Fields that
are absent on an item are omitted, so a leaf without ``children`` and a
folder with ``children: []`` survive a round-trip unchanged.
"""

import json
from typing import Any, Dict, List

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ValidationError
from ..schemas.item import Item

_FOREST_ADAPTER = TypeAdapter(List[Item])


def item_to_record(item: Item) -> Dict[str, Any]:
    return item.model_dump(mode="json", by_alias=True, exclude_none=True)


def forest_to_records(forest: List[Item]) -> List[Dict[str, Any]]:
    return [item_to_record(item) for item in forest]


def forest_from_records(records: Any) -> List[Item]:
    """Validate nested records into items. Raises ValidationError on bad shape."""
    try:
        return _FOREST_ADAPTER.validate_python(records)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid forest data: {e.error_count()} error(s): {e.errors()[0]['msg']}")


def forest_to_json(forest: List[Item], indent: int = 2) -> str:
    return json.dumps(forest_to_records(forest), indent=indent, ensure_ascii=False)


def forest_from_json(text: str) -> List[Item]:
    try:
        records = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Forest is not valid JSON: {e}")
    return forest_from_records(records)
