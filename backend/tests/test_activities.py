"""
Registo de actividades embebido no lead.
"""
import pytest
import pytest_asyncio


@pytest_asyncio.fixture
async def lead(client, agent_headers, lead_payload):
    response = await client.post("/leads", json=lead_payload, headers=agent_headers)
    assert response.status_code == 200, response.text
    return response.json()


class TestActivities:

    @pytest.mark.asyncio
    async def test_add_activity(self, client, agent_headers, lead, agent_user):
        response = await client.post(
            f"/leads/{lead['id']}/activities",
            json={"type": "Call", "content": "初回ヒアリング実施"},
            headers=agent_headers,
        )

        assert response.status_code == 200, response.text
        activities = response.json()
        assert len(activities) == 1
        assert activities[0]["type"] == "Call"
        assert activities[0]["agentId"] == agent_user["id"]
        assert activities[0]["agentName"] == "佐藤 健"
        assert activities[0]["id"]

    @pytest.mark.asyncio
    async def test_activity_stamps_lead_updated_at(self, client, agent_headers, lead, mock_db):
        await mock_db.leads.update_one({"id": lead["id"]}, {"$set": {"updatedAt": "2020-01-01T00:00:00+00:00"}})

        await client.post(
            f"/leads/{lead['id']}/activities", json={"type": "Note", "content": "メモ"}, headers=agent_headers
        )

        stored = await mock_db.leads.find_one({"id": lead["id"]})
        assert stored["updatedAt"] > "2020-01-01T00:00:00+00:00"

    @pytest.mark.asyncio
    async def test_display_order_is_newest_first(self, client, agent_headers, lead):
        for day, content in [("01", "一"), ("03", "三"), ("02", "二")]:
            await client.post(
                f"/leads/{lead['id']}/activities",
                json={"type": "Email", "content": content, "timestamp": f"2025-06-{day}T10:00:00+09:00"},
                headers=agent_headers,
            )

        detail = (await client.get(f"/leads/{lead['id']}", headers=agent_headers)).json()

        assert [a["content"] for a in detail["activities"]] == ["三", "二", "一"]

    @pytest.mark.asyncio
    async def test_unparseable_timestamp_rejected(self, client, agent_headers, lead, mock_db):
        response = await client.post(
            f"/leads/{lead['id']}/activities",
            json={"type": "Call", "content": "x", "timestamp": "yesterday"},
            headers=agent_headers,
        )

        assert response.status_code == 422
        stored = await mock_db.leads.find_one({"id": lead["id"]})
        assert stored["activities"] == []
        assert (await client.get(f"/leads/{lead['id']}", headers=agent_headers)).status_code == 200

    @pytest.mark.asyncio
    async def test_naive_timestamp_stored_as_utc(self, client, agent_headers, lead):
        response = await client.post(
            f"/leads/{lead['id']}/activities",
            json={"type": "Visit", "content": "内見", "timestamp": "2025-06-01T10:00:00"},
            headers=agent_headers,
        )

        assert response.json()[0]["timestamp"] == "2025-06-01T10:00:00+00:00"

    @pytest.mark.asyncio
    async def test_stored_invalid_timestamp_does_not_break_detail(self, client, agent_headers, lead, mock_db):
        await mock_db.leads.update_one({"id": lead["id"]}, {"$set": {"activities": [
            {"id": "old", "type": "Note", "timestamp": "yesterday", "content": "旧"},
            {"id": "new", "type": "Note", "timestamp": "2025-06-01T10:00:00+00:00", "content": "新"},
        ]}})

        response = await client.get(f"/leads/{lead['id']}", headers=agent_headers)

        assert response.status_code == 200
        assert [a["id"] for a in response.json()["activities"]] == ["new", "old"]

    @pytest.mark.asyncio
    async def test_blank_content_rejected(self, client, agent_headers, lead):
        response = await client.post(
            f"/leads/{lead['id']}/activities", json={"type": "Call", "content": "   "}, headers=agent_headers
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_edit_reattributes_to_editor(self, client, agent_headers, admin_headers, lead, admin_user):
        created = (await client.post(
            f"/leads/{lead['id']}/activities", json={"type": "Call", "content": "電話"}, headers=agent_headers
        )).json()[0]

        response = await client.put(
            f"/leads/{lead['id']}/activities/{created['id']}",
            json={"type": "Meeting", "content": "来店商談"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        edited = response.json()[0]
        assert edited["id"] == created["id"]
        assert edited["type"] == "Meeting"
        assert edited["content"] == "来店商談"
        assert edited["timestamp"] == created["timestamp"]
        assert edited["agentId"] == admin_user["id"]

    @pytest.mark.asyncio
    async def test_delete_activity(self, client, agent_headers, lead):
        first = (await client.post(
            f"/leads/{lead['id']}/activities", json={"type": "Call", "content": "一"}, headers=agent_headers
        )).json()[0]
        await client.post(
            f"/leads/{lead['id']}/activities", json={"type": "Call", "content": "二"}, headers=agent_headers
        )

        response = await client.delete(f"/leads/{lead['id']}/activities/{first['id']}", headers=agent_headers)

        assert response.status_code == 200
        assert [a["content"] for a in response.json()] == ["二"]

    @pytest.mark.asyncio
    async def test_missing_activity(self, client, agent_headers, lead):
        response = await client.delete(f"/leads/{lead['id']}/activities/missing", headers=agent_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_missing_lead(self, client, agent_headers):
        response = await client.post(
            "/leads/missing/activities", json={"type": "Call", "content": "x"}, headers=agent_headers
        )
        assert response.status_code == 404
