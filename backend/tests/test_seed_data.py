"""
Dados de demonstração: ids fixos e escrita em lote por upsert.
"""
from datetime import datetime, timezone

import pytest
from pymongo import ReplaceOne

from services.seed_data import SEED_AGENTS, build_seed_leads, build_seed_operations

NOW = datetime(2025, 6, 15, 3, 0, tzinfo=timezone.utc)


class TestSeedLeads:

    def test_fixed_ids(self):
        leads = build_seed_leads(NOW)
        assert [lead["id"] for lead in leads] == [str(i) for i in range(1, 13)]

    def test_timestamps_relative_to_now(self):
        leads = {lead["id"]: lead for lead in build_seed_leads(NOW)}
        assert leads["1"]["updatedAt"] == NOW.isoformat()
        assert leads["2"]["createdAt"] == "2025-06-14T03:00:00+00:00"

    def test_agents_are_known(self):
        agent_ids = {agent["id"] for agent in SEED_AGENTS}
        assert all(lead["agentId"] in agent_ids for lead in build_seed_leads(NOW))

    def test_first_lead_has_activity_history(self):
        first = build_seed_leads(NOW)[0]
        assert [a["id"] for a in first["activities"]] == ["a1", "a2", "a3"]
        assert [p["id"] for p in first["inquiredProperties"]] == ["p1", "p2"]

    def test_every_status_represented(self):
        statuses = {lead["status"] for lead in build_seed_leads(NOW)}
        assert statuses == {"New", "Sent", "Scheduled", "Viewed", "Negotiating", "Closed"}


class TestSeedOperations:

    def test_one_upsert_per_lead(self):
        operations = build_seed_operations(NOW)
        assert len(operations) == 12
        assert all(isinstance(op, ReplaceOne) for op in operations)


class TestSeedEndpoint:

    @pytest.mark.asyncio
    async def test_requires_admin(self, client, agent_headers):
        response = await client.post("/dev/seed", headers=agent_headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_disabled_by_default(self, client, admin_headers, monkeypatch):
        from routes import dev
        monkeypatch.setattr(dev, "ENABLE_DEV_SEED", False)
        response = await client.post("/dev/seed", headers=admin_headers)
        assert response.status_code == 404
