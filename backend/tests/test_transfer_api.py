"""Tests for whole-forest export and import."""

from tests.conftest import make_item_payload


class TestTransferApi:

    def test_export_matches_list(self, client):
        folder = client.post("/api/items", json=make_item_payload(name="F", kind="folder")).json()
        client.post("/api/items", json=make_item_payload(name="L", parent_id=folder["id"]))
        assert client.get("/api/export").json() == client.get("/api/items").json()

    def test_export_then_import_round_trip(self, client):
        folder = client.post("/api/items", json=make_item_payload(name="F", kind="folder")).json()
        client.post("/api/items", json=make_item_payload(name="L", parent_id=folder["id"], content="x"))
        exported = client.get("/api/export").json()

        client.delete(f"/api/items/{folder['id']}")
        resp = client.put("/api/import", json=exported)
        assert resp.status_code == 200
        assert resp.json() == {"imported": 2}
        assert client.get("/api/items").json() == exported

    def test_import_replaces_everything(self, client):
        client.post("/api/items", json=make_item_payload(name="Gone"))
        forest = [{"id": "p1", "name": "Imported", "kind": "leaf", "content": "", "metadata": {}}]
        client.put("/api/import", json=forest)
        assert [i["id"] for i in client.get("/api/items").json()] == ["p1"]

    def test_import_duplicate_ids_rejected(self, client):
        existing = client.post("/api/items", json=make_item_payload(name="Keep")).json()
        forest = [
            {"id": "dup", "name": "A", "kind": "leaf"},
            {"id": "dup", "name": "B", "kind": "leaf"},
        ]
        resp = client.put("/api/import", json=forest)
        assert resp.status_code == 400
        assert resp.json()["error"] == "VALIDATION_ERROR"
        assert [i["id"] for i in client.get("/api/items").json()] == [existing["id"]]

    def test_import_malformed_body(self, client):
        resp = client.put("/api/import", json=[{"id": "x"}])
        assert resp.status_code == 422
