"""Unit tests for TreeStore: placement primitives over the ordered forest."""

import pytest

from prompt_manager.exceptions import NotAFolderError, ParentNotFoundError, ValidationError
from prompt_manager.repositories.tree_store import TreeStore, find_duplicate_ids
from prompt_manager.schemas.item import ItemKind
from tests.conftest import make_item


def _forest():
    """a(folder)[b(folder)[c], d], e"""
    c = make_item("c", parent_id="b")
    b = make_item("b", kind=ItemKind.FOLDER, children=[c], parent_id="a")
    d = make_item("d", parent_id="a")
    a = make_item("a", kind=ItemKind.FOLDER, children=[b, d])
    e = make_item("e")
    return [a, e]


class TestTraversal:

    def test_walk_is_depth_first_in_sequence_order(self):
        store = TreeStore(_forest())
        assert [n.id for n in store.walk()] == ["a", "b", "c", "d", "e"]

    def test_len_counts_every_node(self):
        assert len(TreeStore(_forest())) == 5

    def test_empty_store(self):
        store = TreeStore()
        assert store.is_empty()
        assert len(store) == 0
        assert list(store.walk()) == []

    def test_find_node_at_depth(self):
        store = TreeStore(_forest())
        assert store.find_node("c").name == "c"

    def test_find_node_unknown_returns_none(self):
        assert TreeStore(_forest()).find_node("nope") is None

    def test_locate_returns_parent_and_index(self):
        store = TreeStore(_forest())
        assert store.locate("d") == ("a", 1)
        assert store.locate("e") == (None, 1)
        assert store.locate("nope") is None

    def test_is_within(self):
        store = TreeStore(_forest())
        assert store.is_within("a", "a")
        assert store.is_within("a", "c")
        assert not store.is_within("b", "d")
        assert not store.is_within("nope", "a")


class TestInsert:

    def test_insert_at_root_appends_and_clears_parent(self):
        store = TreeStore(_forest())
        item = make_item("x", parent_id="stale")
        store.insert(None, item)
        assert [n.id for n in store.roots] == ["a", "e", "x"]
        assert store.find_node("x").parent_id is None

    def test_insert_under_folder_appends_and_sets_parent(self):
        store = TreeStore(_forest())
        store.insert("b", make_item("x"))
        b = store.find_node("b")
        assert [n.id for n in b.children] == ["c", "x"]
        assert b.children[-1].parent_id == "b"

    def test_insert_under_missing_parent(self):
        store = TreeStore(_forest())
        with pytest.raises(ParentNotFoundError):
            store.insert("nope", make_item("x"))
        assert store.find_node("x") is None

    def test_insert_under_leaf(self):
        store = TreeStore(_forest())
        with pytest.raises(NotAFolderError):
            store.insert("c", make_item("x"))
        assert store.find_node("x") is None

    def test_insert_at_exact_position(self):
        store = TreeStore(_forest())
        store.insert_at("a", 0, make_item("x"))
        assert [n.id for n in store.find_node("a").children] == ["x", "b", "d"]

    def test_insert_under_folder_without_children_list(self):
        folder = make_item("f", kind=ItemKind.FOLDER)
        folder.children = None
        store = TreeStore([folder])
        store.insert("f", make_item("x"))
        assert [n.id for n in store.find_node("f").children] == ["x"]


class TestExtractAndRemove:

    def test_extract_keeps_subtree(self):
        store = TreeStore(_forest())
        node = store.extract_node("b")
        assert node.id == "b"
        assert [n.id for n in node.children] == ["c"]
        assert store.find_node("b") is None
        assert store.find_node("c") is None

    def test_extract_unknown_returns_none(self):
        store = TreeStore(_forest())
        assert store.extract_node("nope") is None
        assert len(store) == 5

    def test_remove_subtree_drops_descendants(self):
        store = TreeStore(_forest())
        roots = store.remove_subtree("a")
        assert [n.id for n in roots] == ["e"]
        assert [n.id for n in store.walk()] == ["e"]

    def test_remove_subtree_leaves_previous_forest_intact(self):
        store = TreeStore(_forest())
        before = store.roots
        store.remove_subtree("c")
        assert [n.id for n in before[0].children[0].children] == ["c"]
        assert store.find_node("b").children == []

    def test_remove_unknown_is_noop(self):
        store = TreeStore(_forest())
        before = store.roots
        assert store.remove_subtree("nope") is before


class TestWholeForest:

    def test_snapshot_is_deep(self):
        store = TreeStore(_forest())
        snap = store.snapshot()
        snap[0].children[0].name = "changed"
        assert store.find_node("b").name == "b"

    def test_from_forest_rejects_duplicate_ids(self):
        forest = _forest()
        forest.append(make_item("c"))
        with pytest.raises(ValidationError):
            TreeStore.from_forest(forest)

    def test_find_duplicate_ids(self):
        forest = _forest() + [make_item("c"), make_item("e"), make_item("c")]
        assert find_duplicate_ids(forest) == ["c", "e"]

    def test_from_forest_rejects_children_under_leaf(self):
        leaf = make_item("a", children=[make_item("b", parent_id="a")])
        with pytest.raises(ValidationError):
            TreeStore.from_forest([leaf])

    def test_from_forest_rejects_empty_children_list_on_leaf(self):
        with pytest.raises(ValidationError):
            TreeStore.from_forest([make_item("a", children=[])])

    def test_from_forest_derives_parent_ids_from_placement(self):
        c = make_item("c", parent_id="nowhere")
        b = make_item("b", kind=ItemKind.FOLDER, children=[c])
        a = make_item("a", kind=ItemKind.FOLDER, children=[b], parent_id="ghost")
        store = TreeStore.from_forest([a])
        assert store.find_node("a").parent_id is None
        assert store.find_node("b").parent_id == "a"
        assert store.find_node("c").parent_id == "b"
