"""
Snapshot completo de cada canal de tempo real.
Um subscritor recebe sempre o estado inteiro, nunca um delta.
"""
from typing import Any

from config import SNAPSHOT_MAX_DOCUMENTS
from database import db
from models.auth import user_response_from_doc
from services.lead_service import get_lead_by_id, load_leads
from services.property_catalog import get_seed_properties
from services.property_merge import find_effective_property, merge_properties
from services.realtime import (
    LEADS_CHANNEL, PROPERTIES_CHANNEL, STATUSES_CHANNEL, TARGETS_CHANNEL, USERS_CHANNEL
)
from services.status_config import status_store
from services.targets import TARGETS_DOC_ID


async def _properties() -> list:
    live = await db.properties.find({}, {"_id": 0}).to_list(length=SNAPSHOT_MAX_DOCUMENTS)
    return merge_properties(get_seed_properties(), live)


async def _property(prop_id: str):
    live_doc = await db.properties.find_one({"id": prop_id}, {"_id": 0})
    return find_effective_property(prop_id, get_seed_properties(), live_doc)


async def _targets() -> dict:
    doc = await db.settings.find_one({"_id": TARGETS_DOC_ID}, {"_id": 0})
    return doc or {}


async def _users() -> list:
    users = await db.users.find(
        {"isActive": {"$ne": False}},
        {"_id": 0, "password": 0}
    ).to_list(length=500)
    return [user_response_from_doc(u).model_dump(by_alias=True) for u in users]


async def load_snapshot(channel: str) -> Any:
    """Estado actual do canal (None para um documento que não existe)."""
    if channel == LEADS_CHANNEL:
        return await load_leads()
    if channel == PROPERTIES_CHANNEL:
        return await _properties()
    if channel == STATUSES_CHANNEL:
        return await status_store.get()
    if channel == TARGETS_CHANNEL:
        return await _targets()
    if channel == USERS_CHANNEL:
        return await _users()

    collection, _, doc_id = channel.partition("/")
    if collection == LEADS_CHANNEL:
        return await get_lead_by_id(doc_id)
    if collection == PROPERTIES_CHANNEL:
        return await _property(doc_id)
    raise ValueError(f"Canal inválido: {channel}")
