"""Tests for /health and / endpoints, app startup and seeding."""

from fastapi.testclient import TestClient

from prompt_manager.backends import MemoryBackend
from prompt_manager.core.seeder import seed_sample_items
from prompt_manager.main import create_app
from tests.conftest import make_draft, make_item_payload, make_settings


class TestHealth:

    def test_health_returns_200(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["backend"] == "ok"
        assert "uptime_seconds" in data
        assert "version" in data
        assert data["items"] == 0

    def test_health_counts_nested_items(self, client):
        folder = client.post("/api/items", json=make_item_payload(kind="folder")).json()
        client.post("/api/items", json=make_item_payload(parent_id=folder["id"]))
        assert client.get("/health").json()["items"] == 2

    def test_root_returns_api_info(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json()["name"] == "Prompt Manager API"


class TestResponseHeaders:

    def test_response_includes_middleware_headers(self, client):
        resp = client.get("/health")
        assert "x-request-id" in resp.headers
        assert "x-response-time" in resp.headers

    def test_request_id_propagated(self, client):
        resp = client.get("/api/items", headers={"X-Request-ID": "abc123"})
        assert resp.headers["x-request-id"] == "abc123"


class TestStartup:

    def test_backend_built_from_settings(self, tmp_path):
        data_file = tmp_path / "items.json"
        app = create_app(app_settings=make_settings(storage_backend="json", data_file=str(data_file)))
        with TestClient(app) as c:
            c.post("/api/items", json=make_item_payload(name="Persisted"))
        assert "Persisted" in data_file.read_text()

    def test_sample_data_seeded_when_empty(self):
        backend = MemoryBackend()
        app = create_app(backend=backend, app_settings=make_settings(seed_sample_data=True))
        with TestClient(app) as c:
            names = [i["name"] for i in c.get("/api/items").json()]
        assert names == ["General Assistants", "Translator", "Creative Writer"]
        assert backend.count() == 5


class TestSeeder:

    def test_seeds_fixture_forest(self):
        backend = MemoryBackend()
        assert seed_sample_items(backend) == 5
        folder = backend.list_items()[0]
        assert [c.name for c in folder.children] == ["Summarizer", "Code Reviewer"]
        assert folder.children[0].parent_id == folder.id
        assert folder.children[0].versions[0].label == "Initial Draft"

    def test_skips_non_empty_store(self):
        backend = MemoryBackend()
        backend.add_item(None, make_draft("Mine"))
        assert seed_sample_items(backend) == 0
        assert backend.count() == 1

    def test_missing_fixture(self, tmp_path):
        assert seed_sample_items(MemoryBackend(), tmp_path / "none.json") == 0
