"""
Rotas de configuração: estados do Kanban, lista de agentes,
configuração do cliente e registo de erros do sistema.
"""
import logging
from typing import List, Optional
from fastapi import APIRouter, HTTPException, Depends, Query

from config import MAPS_API_KEY
from database import db
from models.auth import UserRole, UserResponse, user_response_from_doc
from models.lead import StatusConfig
from services.auth import get_current_user, require_roles
from services.status_config import status_store
from services.system_error_logger import system_error_logger

router = APIRouter(prefix="/settings", tags=["Settings"])
logger = logging.getLogger(__name__)


# ====================================================================
# ESTADOS
# ====================================================================

@router.get("/statuses", response_model=List[StatusConfig])
async def get_statuses(user: dict = Depends(get_current_user)):
    """Configuração de estados, ordenada pela ordem das colunas."""
    return await status_store.get()


@router.put("/statuses", response_model=List[StatusConfig])
async def update_statuses(
    config: List[StatusConfig],
    user: dict = Depends(require_roles([UserRole.ADMIN]))
):
    """
    Altera labels, cores e ordem. Não é possível adicionar nem remover estados.
    """
    try:
        return await status_store.update([item.to_document() for item in config])
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# ====================================================================
# AGENTES
# ====================================================================

@router.get("/agents", response_model=List[UserResponse])
async def list_agents(user: dict = Depends(get_current_user)):
    """Agentes activos, para atribuição de leads e filtros."""
    agents = await db.users.find(
        {"isActive": {"$ne": False}},
        {"_id": 0, "password": 0}
    ).sort("createdAt", 1).to_list(length=500)
    return [user_response_from_doc(agent) for agent in agents]


@router.get("/client-config")
async def get_client_config(user: dict = Depends(get_current_user)):
    """Configuração repassada ao frontend (chave do serviço de mapas)."""
    return {"mapsApiKey": MAPS_API_KEY}


# ====================================================================
# ERROS DO SISTEMA
# ====================================================================

@router.get("/system-errors")
async def get_system_errors(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=200),
    component: Optional[str] = None,
    resolved: Optional[bool] = None,
    user: dict = Depends(require_roles([UserRole.ADMIN]))
):
    return await system_error_logger.get_errors(
        page=page, limit=limit, component=component, resolved=resolved
    )


@router.post("/system-errors/{error_id}/resolve")
async def resolve_system_error(
    error_id: str,
    user: dict = Depends(require_roles([UserRole.ADMIN]))
):
    if not await system_error_logger.mark_as_resolved(error_id, user.get("email")):
        raise HTTPException(status_code=404, detail="Erro não encontrado")
    return {"success": True, "message": "Erro marcado como resolvido"}
