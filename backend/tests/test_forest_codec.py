"""Tests for the nested JSON form of the forest."""

import json

import pytest

from prompt_manager.exceptions import ValidationError
from prompt_manager.schemas.item import ItemKind, Version
from prompt_manager.services.forest_codec import (
    forest_from_json,
    forest_from_records,
    forest_to_json,
    item_to_record,
)
from tests.conftest import make_item


class TestRecords:

    def test_camel_case_keys_and_absent_fields_omitted(self):
        leaf = make_item("a", parent_id="f", last_modified=5)
        record = item_to_record(leaf)
        assert record == {
            "id": "a",
            "name": "a",
            "kind": "leaf",
            "parentId": "f",
            "content": "",
            "metadata": {"lastModified": 5},
        }

    def test_empty_children_kept_distinct_from_absent(self):
        folder = make_item("f", kind=ItemKind.FOLDER)
        leaf = make_item("l")
        assert item_to_record(folder)["children"] == []
        assert "children" not in item_to_record(leaf)

    def test_round_trip_is_lossless(self):
        leaf = make_item(
            "l", parent_id="f", content="line 1\nline 2",
            versions=[Version(id="ver-1", timestamp=1, content="old", label="v1")],
        )
        forest = [
            make_item("f", kind=ItemKind.FOLDER, children=[leaf]),
            make_item("root-leaf", content=""),
            make_item("bare", kind=ItemKind.FOLDER, last_modified=None),
        ]
        forest[0].metadata.tags = ["a", "b"]
        assert forest_from_json(forest_to_json(forest)) == forest

    def test_legacy_type_key_and_prompt_kind(self):
        [item] = forest_from_records([
            {"id": "p", "name": "Old", "type": "prompt", "content": "x", "metadata": {}},
        ])
        assert item.kind == ItemKind.LEAF

    def test_unknown_metadata_keys_survive(self):
        records = [{"id": "p", "name": "P", "kind": "leaf", "metadata": {"temperature": 0.7}}]
        [item] = forest_from_records(records)
        assert item_to_record(item)["metadata"] == {"temperature": 0.7}


class TestInvalidInput:

    def test_not_json(self):
        with pytest.raises(ValidationError):
            forest_from_json("{nope")

    def test_wrong_shape(self):
        with pytest.raises(ValidationError):
            forest_from_json(json.dumps({"id": "not a list"}))

    def test_missing_required_field(self):
        with pytest.raises(ValidationError):
            forest_from_records([{"id": "x", "kind": "leaf"}])

    def test_unknown_kind(self):
        with pytest.raises(ValidationError):
            forest_from_records([{"id": "x", "name": "x", "kind": "chapter"}])
