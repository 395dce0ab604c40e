"""
Rotas para gestão de Leads (clientes potenciais)
"""
import logging
from typing import List, Optional
from fastapi import APIRouter, HTTPException, Depends, Query, Request

from config import KANBAN_ROLLBACK_ON_FAILURE
from database import db
from middleware.rate_limit import limit_write
from models.lead import Lead, LeadCreate, LeadUpdate, LeadMove, ActivityInput
from services.activities import add_activity, edit_activity, delete_activity, sort_activities
from services.auth import get_current_user
from services.kanban import GROUP_MODES, KanbanBoard, build_board
from services.lead_service import (
    agent_display_name, build_update_fields, create_lead_document, distinct_tags,
    filter_leads, get_agent, get_lead_by_id, load_leads
)
from services.realtime import LEADS_CHANNEL, broker
from services.status_config import status_store
from services.system_error_logger import system_error_logger

router = APIRouter(prefix="/leads", tags=["Leads"])
logger = logging.getLogger(__name__)


async def _write_failed(action: str, lead_id: Optional[str], error: Exception, user: dict):
    """Regista a falha de escrita e devolve 500 ao cliente (sem retry)."""
    await system_error_logger.log_write_failure("leads", action, lead_id, error, user.get("id"))
    raise HTTPException(status_code=500, detail=f"Erro ao {action} lead")


async def _resolve_agent_name(agent_id: str) -> str:
    agent = await get_agent(agent_id)
    if not agent:
        raise HTTPException(status_code=400, detail="Agente não encontrado")
    return agent_display_name(agent)


# ====================================================================
# LISTAGEM E QUADRO KANBAN
# ====================================================================

@router.get("", response_model=List[Lead])
async def list_leads(
    name: Optional[str] = None,
    tags: Optional[List[str]] = Query(default=None),
    agent_ids: Optional[List[str]] = Query(default=None, alias="agentIds"),
    user: dict = Depends(get_current_user)
):
    """Listar leads com filtros por nome, tags e agentes."""
    leads = await load_leads()
    return filter_leads(leads, name=name, tags=tags, agent_ids=agent_ids)


@router.get("/tags", response_model=List[str])
async def list_tags(user: dict = Depends(get_current_user)):
    """Todas as tags usadas nos leads (para o filtro da lista)."""
    return distinct_tags(await load_leads())


@router.get("/board")
async def get_board(
    group_by: str = Query(default="status", alias="groupBy"),
    user: dict = Depends(get_current_user)
):
    """Quadro Kanban por estado ou por prioridade."""
    if group_by not in GROUP_MODES:
        raise HTTPException(status_code=400, detail="groupBy deve ser 'status' ou 'priority'")
    leads = await load_leads()
    return build_board(leads, group_by, await status_store.get())


# ====================================================================
# CRUD
# ====================================================================

@router.get("/{lead_id}", response_model=Lead)
async def get_lead(lead_id: str, user: dict = Depends(get_current_user)):
    lead = await get_lead_by_id(lead_id)
    if not lead:
        raise HTTPException(status_code=404, detail="Lead não encontrado")
    lead["activities"] = sort_activities(lead.get("activities") or [])
    return lead


@router.post("", response_model=Lead)
@limit_write()
async def create_lead(request: Request, data: LeadCreate, user: dict = Depends(get_current_user)):
    """Registar um novo lead (nome, telefone, agente e estado obrigatórios)."""
    agent_name = await _resolve_agent_name(data.agent_id)
    lead_doc = create_lead_document(data, agent_name)

    try:
        await db.leads.insert_one(lead_doc)
    except Exception as e:
        await _write_failed("criar", lead_doc["id"], e, user)

    lead_doc.pop("_id", None)
    logger.info(f"Lead {lead_doc['id']} criado por {user.get('email')}")
    await broker.publish_document(LEADS_CHANNEL, lead_doc["id"])
    return lead_doc


async def _apply_update(lead_id: str, data: LeadUpdate, user: dict) -> dict:
    lead = await get_lead_by_id(lead_id)
    if not lead:
        raise HTTPException(status_code=404, detail="Lead não encontrado")

    update_data = build_update_fields(data)
    if update_data.get("agentId") and update_data["agentId"] != lead.get("agentId"):
        update_data["agentName"] = await _resolve_agent_name(update_data["agentId"])

    try:
        await db.leads.update_one({"id": lead_id}, {"$set": update_data})
    except Exception as e:
        await _write_failed("actualizar", lead_id, e, user)

    await broker.publish_document(LEADS_CHANNEL, lead_id)
    lead.update(update_data)
    lead["activities"] = sort_activities(lead.get("activities") or [])
    return lead


@router.put("/{lead_id}", response_model=Lead)
async def update_lead(lead_id: str, data: LeadUpdate, user: dict = Depends(get_current_user)):
    """Gravar o formulário de edição. Campos não enviados ficam como estavam."""
    return await _apply_update(lead_id, data, user)


@router.patch("/{lead_id}", response_model=Lead)
async def patch_lead(lead_id: str, data: LeadUpdate, user: dict = Depends(get_current_user)):
    """Edição inline de um ou mais campos."""
    return await _apply_update(lead_id, data, user)


@router.patch("/{lead_id}/move")
async def move_lead(lead_id: str, data: LeadMove, user: dict = Depends(get_current_user)):
    """
    Drag & drop no quadro. overId é o id de uma coluna ou de outro lead;
    sem alvo, ou no mesmo grupo, nada é alterado.
    """
    leads = await load_leads()
    board = KanbanBoard(
        leads,
        data.group_by,
        await status_store.get(),
        rollback_on_failure=KANBAN_ROLLBACK_ON_FAILURE,
    )
    if board.find(lead_id) is None:
        raise HTTPException(status_code=404, detail="Lead não encontrado")

    changed, move_data, message = await board.move(lead_id, data.over_id)
    if changed and not move_data.get("persisted"):
        raise HTTPException(status_code=500, detail=message)

    return {"changed": changed, "message": message, **move_data}


@router.delete("/{lead_id}")
async def delete_lead(lead_id: str, user: dict = Depends(get_current_user)):
    """Remove o lead definitivamente (com as suas actividades)."""
    try:
        result = await db.leads.delete_one({"id": lead_id})
    except Exception as e:
        await _write_failed("remover", lead_id, e, user)

    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Lead não encontrado")

    logger.info(f"Lead {lead_id} removido por {user.get('email')}")
    await broker.publish_document(LEADS_CHANNEL, lead_id)
    return {"success": True, "message": "Lead removido"}


# ====================================================================
# ACTIVIDADES
# ====================================================================

@router.post("/{lead_id}/activities")
async def create_activity(lead_id: str, data: ActivityInput, user: dict = Depends(get_current_user)):
    try:
        return await add_activity(lead_id, data, user)
    except LookupError:
        raise HTTPException(status_code=404, detail="Lead não encontrado")


@router.put("/{lead_id}/activities/{activity_id}")
async def update_activity(
    lead_id: str,
    activity_id: str,
    data: ActivityInput,
    user: dict = Depends(get_current_user)
):
    try:
        return await edit_activity(lead_id, activity_id, data, user)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{lead_id}/activities/{activity_id}")
async def remove_activity(lead_id: str, activity_id: str, user: dict = Depends(get_current_user)):
    try:
        return await delete_activity(lead_id, activity_id)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
