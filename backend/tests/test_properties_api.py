"""
API de imóveis: lista efectiva (seed + BD), override de seeds e apagar lógico.
"""
import pytest

from services.property_catalog import SEED_PROPERTIES


PROPERTY_PAYLOAD = {
    "name": "テストマンション",
    "address": "東京都港区芝浦",
    "price": 65000000,
    "layout": "2LDK",
    "size": 58.3,
    "builtYear": 2015,
    "status": "active",
}


class TestPropertyList:

    @pytest.mark.asyncio
    async def test_seed_catalog_listed_without_documents(self, client, agent_headers):
        response = await client.get("/properties", headers=agent_headers)

        assert response.status_code == 200
        ids = [p["id"] for p in response.json()]
        assert sorted(ids) == sorted(p["id"] for p in SEED_PROPERTIES)

    @pytest.mark.asyncio
    async def test_created_property_listed_first(self, client, agent_headers):
        created = (await client.post("/properties", json=PROPERTY_PAYLOAD, headers=agent_headers)).json()

        listing = (await client.get("/properties", headers=agent_headers)).json()

        assert listing[0]["id"] == created["id"]
        assert [p["id"] for p in listing].count(created["id"]) == 1

    @pytest.mark.asyncio
    async def test_search(self, client, agent_headers):
        response = await client.get("/properties", params={"search": "恵比寿"}, headers=agent_headers)
        assert [p["id"] for p in response.json()] == ["p2"]


class TestPropertyCreate:

    @pytest.mark.asyncio
    async def test_create(self, client, agent_headers, mock_db):
        response = await client.post("/properties", json=PROPERTY_PAYLOAD, headers=agent_headers)

        assert response.status_code == 200, response.text
        data = response.json()
        assert data["builtYear"] == 2015
        assert data["createdAt"]
        assert await mock_db.properties.find_one({"id": data["id"]}) is not None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field,value", [
        ("builtYear", 1899), ("builtYear", 2101), ("price", 0), ("size", 0), ("name", ""),
    ])
    async def test_validation(self, client, agent_headers, field, value):
        response = await client.post("/properties", json={**PROPERTY_PAYLOAD, field: value}, headers=agent_headers)
        assert response.status_code == 422


class TestSeedOverride:

    @pytest.mark.asyncio
    async def test_edit_seed_creates_complete_override(self, client, agent_headers, mock_db):
        response = await client.put("/properties/p1", json={"price": 140000000}, headers=agent_headers)

        assert response.status_code == 200, response.text
        data = response.json()
        assert data["price"] == 140000000
        assert data["name"] == "パークコート渋谷ザ・タワー"

        override = await mock_db.properties.find_one({"id": "p1"})
        assert override["address"] == "東京都渋谷区宇田川町"
        assert override["price"] == 140000000

        # O seed constante não muda
        assert SEED_PROPERTIES[0]["price"] == 150000000

    @pytest.mark.asyncio
    async def test_edited_seed_appears_once(self, client, agent_headers):
        await client.put("/properties/p3", json={"memo": "値下げ交渉可"}, headers=agent_headers)

        listing = (await client.get("/properties", headers=agent_headers)).json()

        assert [p["id"] for p in listing].count("p3") == 1
        assert listing[0]["id"] == "p3"

    @pytest.mark.asyncio
    async def test_soft_delete_seed(self, client, agent_headers, mock_db):
        response = await client.delete("/properties/p2", headers=agent_headers)
        assert response.status_code == 200

        listing = (await client.get("/properties", headers=agent_headers)).json()
        assert "p2" not in [p["id"] for p in listing]
        assert (await client.get("/properties/p2", headers=agent_headers)).status_code == 404

        tombstone = await mock_db.properties.find_one({"id": "p2"})
        assert tombstone["deleted"] is True

    @pytest.mark.asyncio
    async def test_soft_delete_created_property_keeps_document(self, client, agent_headers, mock_db):
        created = (await client.post("/properties", json=PROPERTY_PAYLOAD, headers=agent_headers)).json()

        await client.delete(f"/properties/{created['id']}", headers=agent_headers)

        stored = await mock_db.properties.find_one({"id": created["id"]})
        assert stored is not None
        assert stored["deleted"] is True
        assert stored["name"] == PROPERTY_PAYLOAD["name"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["price", "name", "builtYear", "status"])
    async def test_null_required_field_rejected(self, client, agent_headers, mock_db, field):
        response = await client.put("/properties/p1", json={field: None}, headers=agent_headers)

        assert response.status_code == 422
        assert await mock_db.properties.find_one({"id": "p1"}) is None
        assert (await client.get("/properties", headers=agent_headers)).status_code == 200

    @pytest.mark.asyncio
    async def test_missing_property(self, client, agent_headers):
        assert (await client.get("/properties/missing", headers=agent_headers)).status_code == 404
        assert (await client.put("/properties/missing", json={"price": 1}, headers=agent_headers)).status_code == 404
        assert (await client.delete("/properties/missing", headers=agent_headers)).status_code == 404
