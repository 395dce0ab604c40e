"""
Rotas de desenvolvimento: carregamento dos dados de demonstração.
Só disponível com ENABLE_DEV_SEED=true.
"""
import logging
from fastapi import APIRouter, HTTPException, Depends, Request

from config import ENABLE_DEV_SEED
from database import db
from middleware.rate_limit import limit_seed
from models.auth import UserRole
from services.auth import require_roles
from services.realtime import LEADS_CHANNEL, broker
from services.seed_data import seed_leads
from services.system_error_logger import system_error_logger

router = APIRouter(prefix="/dev", tags=["Dev"])
logger = logging.getLogger(__name__)


@router.post("/seed")
@limit_seed()
async def seed(request: Request, user: dict = Depends(require_roles([UserRole.ADMIN]))):
    """Grava os leads de exemplo numa única escrita em lote (pode ser repetido)."""
    if not ENABLE_DEV_SEED:
        raise HTTPException(status_code=404, detail="Seed desactivado")

    try:
        written = await seed_leads(db)
    except Exception as e:
        logger.error(f"Erro no seed de leads: {e}")
        await system_error_logger.log_error(
            error_type="seed_error",
            message="Falha ao gravar os leads de demonstração",
            component="dev",
            details={"error": str(e)},
            severity="error",
            user_id=user.get("id"),
        )
        raise HTTPException(status_code=500, detail="Erro ao gravar dados de demonstração")

    await broker.publish(LEADS_CHANNEL)
    return {"success": True, "message": f"{written} leads gravados"}
