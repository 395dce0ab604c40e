"""
Rotas do dashboard: KPIs de receita, pipeline por agente, últimos
negócios fechados e objectivos mensais.
"""
import logging
from datetime import datetime
from typing import List
from zoneinfo import ZoneInfo
from fastapi import APIRouter, HTTPException, Depends, Path, Query

from config import BUSINESS_TIMEZONE
from models.auth import UserRole
from models.dashboard import DashboardMetrics, PipelineDataPoint, YearTargets
from models.lead import Lead, LeadStatus
from services.auth import get_current_user, require_roles
from services.lead_service import load_all_leads
from services.metrics import calculate_metrics, calculate_pipeline_data, get_recent_wins
from services.targets import get_year_targets, update_year_targets

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])
logger = logging.getLogger(__name__)

# Campos usados pelos KPIs e pelo pipeline
AGGREGATION_PROJECTION = {
    "_id": 0, "id": 1, "status": 1, "budget": 1, "discountRate": 1, "agentName": 1, "updatedAt": 1,
}


def business_now() -> datetime:
    """Agora no fuso horário de negócio (define "este mês")."""
    return datetime.now(ZoneInfo(BUSINESS_TIMEZONE))


@router.get("/metrics", response_model=DashboardMetrics)
async def get_metrics(user: dict = Depends(get_current_user)):
    now = business_now()
    leads = await load_all_leads(projection=AGGREGATION_PROJECTION)
    targets = await get_year_targets(now.year)
    return calculate_metrics(leads, targets, now=now)


@router.get("/pipeline", response_model=List[PipelineDataPoint])
async def get_pipeline(
    mode: str = Query(default="amount", pattern="^(amount|count)$"),
    user: dict = Depends(get_current_user)
):
    """Pipeline por agente: receita estimada (amount) ou número de leads (count)."""
    leads = await load_all_leads(projection=AGGREGATION_PROJECTION)
    return calculate_pipeline_data(leads, mode)


@router.get("/recent-wins", response_model=List[Lead])
async def get_recent_wins_route(user: dict = Depends(get_current_user)):
    closed = await load_all_leads({"status": LeadStatus.CLOSED.value})
    return get_recent_wins(closed)


@router.get("/targets/{year}")
async def get_targets(
    year: int = Path(ge=2000, le=2100),
    user: dict = Depends(get_current_user)
):
    return {"year": year, "targets": await get_year_targets(year)}


@router.put("/targets/{year}")
async def put_targets(
    data: YearTargets,
    year: int = Path(ge=2000, le=2100),
    user: dict = Depends(require_roles([UserRole.ADMIN]))
):
    """Substitui os objectivos de um ano; os outros anos ficam intactos."""
    try:
        targets = await update_year_targets(year, data.targets)
    except Exception as e:
        logger.error(f"Erro ao gravar objectivos de {year}: {e}")
        raise HTTPException(status_code=500, detail="Erro ao gravar objectivos")
    return {"year": year, "targets": targets}
