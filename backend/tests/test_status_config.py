"""
Configuração de estados: labels/cores/ordem configuráveis, ids fixos.
"""
import copy

import pytest

from models.lead import DEFAULT_STATUS_CONFIG
from services.realtime import STATUSES_CHANNEL, broker
from services.status_config import (
    get_status_color, get_status_label, status_store, validate_status_config
)


class TestLabels:

    def test_configured_label(self):
        assert get_status_label(DEFAULT_STATUS_CONFIG, "Closed") == "成約"

    def test_unconfigured_status_shows_raw_id(self):
        assert get_status_label(DEFAULT_STATUS_CONFIG, "Archived") == "Archived"

    def test_color_fallback(self):
        assert get_status_color(DEFAULT_STATUS_CONFIG, "Archived") == "#000000"


class TestValidateStatusConfig:

    def test_default_config_is_valid(self):
        assert validate_status_config(DEFAULT_STATUS_CONFIG) is None

    def test_cannot_remove_status(self):
        config = [item for item in DEFAULT_STATUS_CONFIG if item["id"] != "Viewed"]
        assert "Viewed" in validate_status_config(config)

    def test_cannot_add_status(self):
        config = copy.deepcopy(DEFAULT_STATUS_CONFIG)
        config.append({"id": "Lost", "label": "失注", "color": "#000000", "order": 7})
        assert "Lost" in validate_status_config(config)

    def test_duplicates_rejected(self):
        config = copy.deepcopy(DEFAULT_STATUS_CONFIG)
        config.append(copy.deepcopy(config[0]))
        assert validate_status_config(config) is not None


class TestStatusConfigStore:

    @pytest.mark.asyncio
    async def test_defaults_when_document_missing(self):
        config = await status_store.get()
        assert [item["id"] for item in config] == ["New", "Sent", "Scheduled", "Viewed", "Negotiating", "Closed"]

    @pytest.mark.asyncio
    async def test_reads_stored_config_sorted_by_order(self, mock_db):
        config = copy.deepcopy(DEFAULT_STATUS_CONFIG)
        config[0]["order"] = 10
        await mock_db.settings.insert_one({"_id": "statuses", "config": config})

        loaded = await status_store.get()

        assert loaded[-1]["id"] == "New"

    @pytest.mark.asyncio
    async def test_update_persists_and_notifies(self, mock_db):
        config = copy.deepcopy(DEFAULT_STATUS_CONFIG)
        config[5]["label"] = "契約済"
        subscription = broker.subscribe(STATUSES_CHANNEL)

        try:
            updated = await status_store.update(config)
        finally:
            subscription.close()

        assert get_status_label(updated, "Closed") == "契約済"
        stored = await mock_db.settings.find_one({"_id": "statuses"})
        assert stored["config"][5]["label"] == "契約済"
        assert subscription.pending() == 1

    @pytest.mark.asyncio
    async def test_cache_invalidated_by_change_notification(self, mock_db):
        assert get_status_label(await status_store.get(), "New") == "新規"

        config = copy.deepcopy(DEFAULT_STATUS_CONFIG)
        config[0]["label"] = "新着"
        await mock_db.settings.insert_one({"_id": "statuses", "config": config})
        # Sem notificação a cache mantém-se
        assert get_status_label(await status_store.get(), "New") == "新規"

        await broker.publish(STATUSES_CHANNEL)
        assert get_status_label(await status_store.get(), "New") == "新着"

    @pytest.mark.asyncio
    async def test_invalid_update_rejected(self):
        with pytest.raises(ValueError):
            await status_store.update(DEFAULT_STATUS_CONFIG[:3])
