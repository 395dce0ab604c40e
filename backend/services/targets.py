"""
Objectivos de receita mensais.

Documento settings/targets: { "<ano>": { "<mês>": valor } }
Gravar um ano substitui só esse ano; os restantes ficam intactos.
"""
import logging
from typing import Dict

from database import db
from services.realtime import TARGETS_CHANNEL, broker

logger = logging.getLogger(__name__)

TARGETS_DOC_ID = "targets"


async def get_year_targets(year: int) -> Dict[str, float]:
    """Objectivos do ano; {} se ainda não foram definidos."""
    doc = await db.settings.find_one({"_id": TARGETS_DOC_ID}, {"_id": 0})
    if not doc:
        return {}
    return doc.get(str(year)) or {}


async def update_year_targets(year: int, targets: Dict[str, float]) -> Dict[str, float]:
    await db.settings.update_one(
        {"_id": TARGETS_DOC_ID},
        {"$set": {str(year): targets}},
        upsert=True
    )
    logger.info(f"Objectivos de {year} actualizados")
    await broker.publish(TARGETS_CHANNEL, {"year": year})
    return targets
