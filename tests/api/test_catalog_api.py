"""Item catalog endpoint tests"""

from fastapi.testclient import TestClient


class TestCatalogApi:
    def test_all_templates(self, client: TestClient) -> None:
        resp = client.get("/catalog/templates")
        assert resp.status_code == 200
        assert len(resp.json()["templates"]) == 14

    def test_search_by_slot(self, client: TestClient) -> None:
        resp = client.get("/catalog/templates", params={"slot": "ring"})
        ids = {t["id"] for t in resp.json()["templates"]}
        assert ids == {"copper_ring", "ruby_ring"}

    def test_records_use_catalog_format(self, client: TestClient) -> None:
        resp = client.get("/catalog/templates", params={"slot": "offHand"})
        (shield,) = resp.json()["templates"]
        assert shield["id"] == "wooden_shield"
        assert shield["rarity"] == "Common"
        assert shield["armor_bonus"] == 4

    def test_empty_slot(self, client: TestClient) -> None:
        resp = client.get("/catalog/templates", params={"slot": "feet"})
        assert resp.json() == {"templates": []}

    def test_unknown_slot(self, client: TestClient) -> None:
        resp = client.get("/catalog/templates", params={"slot": "tail"})
        assert resp.status_code == 422
