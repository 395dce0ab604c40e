"""
====================================================================
SERVIÇO DE LEADS
====================================================================
Lógica de negócio para gestão de leads.
Separado dos endpoints para facilitar manutenção e testes.
====================================================================
"""
import uuid
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from config import SNAPSHOT_MAX_DOCUMENTS
from database import db
from models.auth import display_name
from models.common import utc_now_iso
from models.lead import LeadCreate, LeadUpdate

logger = logging.getLogger(__name__)


# ==== FILTROS DA LISTA ====

def filter_leads(
    leads: Iterable[Mapping[str, Any]],
    name: Optional[str] = None,
    tags: Optional[List[str]] = None,
    agent_ids: Optional[List[str]] = None
) -> List[Mapping[str, Any]]:
    """
    Filtros da lista de leads.

    Args:
        name: Substring do nome (sem distinção de maiúsculas)
        tags: Lead passa se tiver pelo menos uma das tags
        agent_ids: Lead passa se estiver atribuído a um dos agentes
    """
    needle = name.lower() if name else None
    tag_set = set(tags or [])
    agent_set = set(agent_ids or [])

    result = []
    for lead in leads:
        if needle and needle not in (lead.get("name") or "").lower():
            continue
        if tag_set and not tag_set.intersection(lead.get("tags") or []):
            continue
        if agent_set and lead.get("agentId") not in agent_set:
            continue
        result.append(lead)
    return result


def distinct_tags(leads: Iterable[Mapping[str, Any]]) -> List[str]:
    """Todas as tags usadas, ordenadas."""
    tags = set()
    for lead in leads:
        tags.update(lead.get("tags") or [])
    return sorted(tags)


# ==== QUERIES COMUNS ====

async def load_leads(limit: Optional[int] = None) -> List[dict]:
    """Vista da colecção para listas e snapshots (mais recentes primeiro, com limite)."""
    limit = limit or SNAPSHOT_MAX_DOCUMENTS
    cursor = db.leads.find({}, {"_id": 0}).sort("createdAt", -1).limit(limit)
    return await cursor.to_list(length=limit)


async def load_all_leads(query: Optional[dict] = None, projection: Optional[dict] = None) -> List[dict]:
    """
    Colecção inteira, sem limite, para as agregações do dashboard.
    `projection` reduz os documentos aos campos que a agregação usa.
    """
    leads = []
    async for lead in db.leads.find(query or {}, projection or {"_id": 0}):
        leads.append(lead)
    return leads


async def get_lead_by_id(lead_id: str) -> Optional[dict]:
    """Obtém um lead pelo ID."""
    return await db.leads.find_one({"id": lead_id}, {"_id": 0})


async def get_agent(agent_id: str) -> Optional[dict]:
    """Agente activo pelo ID (a colecção users serve de directório de agentes)."""
    if not agent_id:
        return None
    return await db.users.find_one(
        {"id": agent_id, "isActive": {"$ne": False}},
        {"_id": 0, "password": 0}
    )


def agent_display_name(agent: Mapping[str, Any]) -> str:
    return agent.get("name") or display_name(agent.get("lastName"), agent.get("firstName"))


# ==== CRIAÇÃO E ACTUALIZAÇÃO ====

def create_lead_document(data: LeadCreate, agent_name: str) -> dict:
    """
    Constrói o documento de um novo lead.
    O nome do agente é desnormalizado no lead no momento da atribuição.
    """
    now = utc_now_iso()
    lead_doc = data.to_document()
    lead_doc.update({
        "id": str(uuid.uuid4()),
        "agentName": agent_name,
        "activities": [],
        "inquiredProperties": [],
        "createdAt": now,
        "updatedAt": now,
    })
    return lead_doc


def build_update_fields(data: LeadUpdate) -> Dict[str, Any]:
    """
    Campos a gravar numa edição: só os enviados no pedido, mais updatedAt.
    Campos opcionais enviados como null são limpos; os obrigatórios já foram
    rejeitados pelo LeadUpdate.
    """
    update_data = data.to_document(exclude_unset=True)
    update_data["updatedAt"] = utc_now_iso()
    return update_data
