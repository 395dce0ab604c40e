"""
Broker de alterações em tempo real: canais, subscrições e listeners.
"""
import asyncio

import pytest

from routes.websocket import _forward_changes
from services.property_catalog import SEED_PROPERTIES
from services.realtime import ChangeBroker, document_channel, is_valid_channel
from services.snapshots import load_snapshot


class TestChannels:

    @pytest.mark.parametrize("channel", [
        "leads", "properties", "settings/statuses", "settings/targets", "users",
        "leads/abc", "properties/p1",
    ])
    def test_valid_channels(self, channel):
        assert is_valid_channel(channel)

    @pytest.mark.parametrize("channel", ["", "tasks", "leads/", "users/1", "leads/a/b", "settings/other"])
    def test_invalid_channels(self, channel):
        assert not is_valid_channel(channel)

    def test_document_channel(self):
        assert document_channel("leads", "42") == "leads/42"


class TestChangeBroker:

    def test_subscribe_invalid_channel(self):
        with pytest.raises(ValueError):
            ChangeBroker().subscribe("tasks")

    @pytest.mark.asyncio
    async def test_publish_delivers_to_subscribers(self):
        change_broker = ChangeBroker()
        subscription = change_broker.subscribe("leads")

        await change_broker.publish("leads", {"id": "1"})

        event = await subscription.next_event()
        assert event == {"channel": "leads", "payload": {"id": "1"}}

    @pytest.mark.asyncio
    async def test_document_publish_reaches_both_channels(self):
        change_broker = ChangeBroker()
        collection = change_broker.subscribe("leads")
        document = change_broker.subscribe("leads/7")
        other = change_broker.subscribe("leads/8")

        await change_broker.publish_document("leads", "7")

        assert collection.pending() == 1
        assert document.pending() == 1
        assert other.pending() == 0

    @pytest.mark.asyncio
    async def test_unsubscribe_stops_delivery(self):
        change_broker = ChangeBroker()
        subscription = change_broker.subscribe("properties")
        subscription.close()

        await change_broker.publish("properties")

        assert subscription.pending() == 0
        assert change_broker.subscriber_count("properties") == 0

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_block_others(self):
        change_broker = ChangeBroker()
        received = []

        async def broken(channel, payload):
            raise RuntimeError("boom")

        async def working(channel, payload):
            received.append(channel)

        change_broker.add_listener("users", broken)
        change_broker.add_listener("users", working)
        subscription = change_broker.subscribe("users")

        await change_broker.publish("users")

        assert received == ["users"]
        assert subscription.pending() == 1


class TestSnapshots:

    @pytest.mark.asyncio
    async def test_properties_snapshot_is_merged_view(self, mock_db):
        await mock_db.properties.insert_one({"id": "p1", "deleted": True})

        data = await load_snapshot("properties")

        assert "p1" not in [p["id"] for p in data]
        assert len(data) == len(SEED_PROPERTIES) - 1

    @pytest.mark.asyncio
    async def test_statuses_snapshot_defaults(self):
        data = await load_snapshot("settings/statuses")
        assert [s["id"] for s in data][0] == "New"

    @pytest.mark.asyncio
    async def test_missing_lead_document(self):
        assert await load_snapshot("leads/missing") is None

    @pytest.mark.asyncio
    async def test_lead_document(self, mock_db):
        await mock_db.leads.insert_one({"id": "1", "name": "田中 太郎", "status": "New"})

        data = await load_snapshot("leads/1")

        assert data["name"] == "田中 太郎"

    @pytest.mark.asyncio
    async def test_invalid_channel(self):
        with pytest.raises(ValueError):
            await load_snapshot("processes")


class ClosedSocket:
    """WebSocket cujo cliente já desligou: qualquer envio falha."""

    def __init__(self):
        self.close_code = None

    async def send_json(self, data):
        raise RuntimeError("ligação fechada")

    async def close(self, code=1000, reason=None):
        self.close_code = code


class TestSnapshotForwarding:

    @pytest.mark.asyncio
    async def test_send_failure_ends_forwarding_and_closes(self):
        change_broker = ChangeBroker()
        subscription = change_broker.subscribe("users")
        socket = ClosedSocket()

        task = asyncio.create_task(_forward_changes(socket, subscription))
        await change_broker.publish("users")
        await asyncio.wait_for(task, timeout=1)

        assert task.exception() is None
        assert socket.close_code == 1011
