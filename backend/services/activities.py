"""
====================================================================
REGISTO DE ACTIVIDADES DE UM LEAD
====================================================================
As actividades estão embebidas no documento do lead. Cada operação
lê a lista, altera-a em memória e grava a lista inteira de volta,
junto com o updatedAt do lead.

Duas edições concorrentes do mesmo lead podem perder uma alteração
(last-write-wins sobre a lista inteira).
====================================================================
"""
import uuid
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping

from database import db
from models.auth import display_name
from models.common import parse_timestamp, timestamp_to_iso, utc_now_iso
from models.lead import ActivityInput
from services.realtime import LEADS_CHANNEL, broker

logger = logging.getLogger(__name__)


def _activity_time(activity: Mapping[str, Any]) -> datetime:
    try:
        return parse_timestamp(activity.get("timestamp"))
    except (ValueError, TypeError):
        logger.warning(f"timestamp inválido na actividade {activity.get('id')}: {activity.get('timestamp')!r}")
        return datetime.min.replace(tzinfo=timezone.utc)


def sort_activities(activities: List[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    """Ordem de apresentação: mais recente primeiro (datas inválidas no fim)."""
    return sorted(activities, key=_activity_time, reverse=True)


def _agent_fields(user: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "agentId": user.get("id"),
        "agentName": user.get("name") or display_name(user.get("lastName"), user.get("firstName")),
    }


def build_activity(data: ActivityInput, user: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "id": str(uuid.uuid4()),
        "type": data.type.value,
        "timestamp": timestamp_to_iso(data.timestamp) if data.timestamp else utc_now_iso(),
        "content": data.content,
        **_agent_fields(user),
    }


async def _load_activities(lead_id: str) -> List[Dict[str, Any]]:
    lead = await db.leads.find_one({"id": lead_id}, {"_id": 0, "activities": 1})
    if lead is None:
        raise LookupError(f"Lead {lead_id} não encontrado")
    return list(lead.get("activities") or [])


async def _save_activities(lead_id: str, activities: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    await db.leads.update_one(
        {"id": lead_id},
        {"$set": {"activities": activities, "updatedAt": utc_now_iso()}}
    )
    await broker.publish_document(LEADS_CHANNEL, lead_id)
    return sort_activities(activities)


def _find_index(activities: List[Mapping[str, Any]], activity_id: str) -> int:
    for index, activity in enumerate(activities):
        if activity.get("id") == activity_id:
            return index
    raise LookupError(f"Actividade {activity_id} não encontrada")


async def add_activity(lead_id: str, data: ActivityInput, user: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Acrescenta uma actividade. Retorna a lista ordenada para apresentação."""
    activities = await _load_activities(lead_id)
    activities.append(build_activity(data, user))
    logger.info(f"Actividade {data.type.value} adicionada ao lead {lead_id}")
    return await _save_activities(lead_id, activities)


async def edit_activity(
    lead_id: str,
    activity_id: str,
    data: ActivityInput,
    user: Mapping[str, Any]
) -> List[Dict[str, Any]]:
    """Edita tipo/data/conteúdo. A actividade passa a ser atribuída a quem edita."""
    activities = await _load_activities(lead_id)
    index = _find_index(activities, activity_id)

    edited = dict(activities[index])
    edited.update({
        "type": data.type.value,
        "content": data.content,
        **_agent_fields(user),
    })
    if data.timestamp:
        edited["timestamp"] = timestamp_to_iso(data.timestamp)
    activities[index] = edited

    logger.info(f"Actividade {activity_id} do lead {lead_id} editada")
    return await _save_activities(lead_id, activities)


async def delete_activity(lead_id: str, activity_id: str) -> List[Dict[str, Any]]:
    activities = await _load_activities(lead_id)
    del activities[_find_index(activities, activity_id)]
    logger.info(f"Actividade {activity_id} removida do lead {lead_id}")
    return await _save_activities(lead_id, activities)
