"""Shared test fixtures for the prompt manager test suite.

Every test gets its own backend and app instance; nothing is shared between
tests. Time is pinned with ``FakeClock`` wherever recency matters and ids are
drawn from a counter so assertions can name them.
"""

import os

# Quiet, human-readable logs and no sample data before any app imports.
os.environ["LOG_FORMAT"] = "text"
os.environ["SEED_SAMPLE_DATA"] = "false"
os.environ["STORAGE_BACKEND"] = "memory"

import itertools
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from prompt_manager.backends import MemoryBackend
from prompt_manager.core.config import Settings
from prompt_manager.main import create_app
from prompt_manager.repositories.tree_store import TreeStore
from prompt_manager.schemas.item import Item, ItemDraft, ItemKind, ItemMetadata
from prompt_manager.services.item_service import ItemService
from prompt_manager.services.search_service import SearchService

ONE_DAY_MS = 86_400_000

# 2026-01-01T00:00:00Z
BASE_TIME_MS = 1_767_225_600_000


class FakeClock:
    """Settable epoch-millisecond clock."""

    def __init__(self, now: int = BASE_TIME_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class SequentialIds:
    """Id factory yielding ``prefix-1``, ``prefix-2``, ... across all prefixes."""

    def __init__(self):
        self._counter = itertools.count(1)

    def __call__(self, prefix: str) -> str:
        return f"{prefix}-{next(self._counter)}"


def make_settings(**overrides) -> Settings:
    """Settings isolated from the environment and any .env file."""
    values = {
        "storage_backend": "memory",
        "seed_sample_data": False,
        "rate_limit_per_minute": 0,
        "log_format": "text",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_draft(
    name: str = "Test Prompt",
    kind: ItemKind = ItemKind.LEAF,
    content: Optional[str] = None,
    **overrides,
) -> ItemDraft:
    """Factory for item drafts."""
    data = {"name": name, "kind": kind}
    if content is not None:
        data["content"] = content
    data.update(overrides)
    return ItemDraft.model_validate(data)


def make_item(
    item_id: str,
    name: Optional[str] = None,
    kind: ItemKind = ItemKind.LEAF,
    children: Optional[List[Item]] = None,
    content: Optional[str] = None,
    last_modified: Optional[int] = BASE_TIME_MS,
    **overrides,
) -> Item:
    """Factory for fully-formed items, for building forests directly."""
    if kind == ItemKind.FOLDER and children is None:
        children = []
    if kind == ItemKind.LEAF and content is None:
        content = ""
    return Item(
        id=item_id,
        name=name or item_id,
        kind=kind,
        children=children,
        content=content,
        metadata=ItemMetadata(last_modified=last_modified),
        **overrides,
    )


def make_item_payload(
    name: str = "Test Prompt",
    kind: str = "leaf",
    parent_id: Optional[str] = None,
    **overrides,
) -> dict:
    """Factory for POST /api/items bodies."""
    payload = {"name": name, "kind": kind}
    if parent_id is not None:
        payload["parentId"] = parent_id
    payload.update(overrides)
    return payload


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def ids() -> SequentialIds:
    return SequentialIds()


@pytest.fixture()
def store() -> TreeStore:
    return TreeStore()


@pytest.fixture()
def service(store, clock, ids) -> ItemService:
    return ItemService(store, clock=clock, id_factory=ids)


@pytest.fixture()
def search(store, clock) -> SearchService:
    return SearchService(store, clock=clock)


@pytest.fixture()
def backend(clock, ids) -> MemoryBackend:
    return MemoryBackend(clock=clock, id_factory=ids)


@pytest.fixture()
def app(backend):
    return create_app(backend=backend, app_settings=make_settings())


@pytest.fixture()
def client(app):
    """FastAPI TestClient over a fresh in-memory backend."""
    with TestClient(app) as c:
        yield c
