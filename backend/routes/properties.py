"""
====================================================================
ROTAS DE IMÓVEIS
====================================================================
A lista efectiva junta o catálogo seed com os documentos da BD.
Editar ou apagar um imóvel do seed cria/actualiza um documento
override com o mesmo id; o seed em si nunca muda.
Apagar é sempre lógico (deleted: true).
====================================================================
"""
import uuid
import logging
from typing import List, Optional
from fastapi import APIRouter, HTTPException, Depends, Request

from config import SNAPSHOT_MAX_DOCUMENTS
from database import db
from middleware.rate_limit import limit_write
from models.common import utc_now_iso
from models.property import Property, PropertyCreate, PropertyUpdate
from services.auth import get_current_user
from services.property_catalog import get_seed_properties, get_seed_property
from services.property_merge import find_effective_property, merge_properties, search_properties
from services.realtime import PROPERTIES_CHANNEL, broker
from services.system_error_logger import system_error_logger

router = APIRouter(prefix="/properties", tags=["Properties"])
logger = logging.getLogger(__name__)


async def _write_failed(action: str, prop_id: str, error: Exception, user: dict):
    await system_error_logger.log_write_failure("properties", action, prop_id, error, user.get("id"))
    raise HTTPException(status_code=500, detail=f"Erro ao {action} imóvel")


async def _load_live_properties() -> List[dict]:
    cursor = db.properties.find({}, {"_id": 0})
    return await cursor.to_list(length=SNAPSHOT_MAX_DOCUMENTS)


async def _get_effective(prop_id: str) -> Optional[dict]:
    live_doc = await db.properties.find_one({"id": prop_id}, {"_id": 0})
    return find_effective_property(prop_id, get_seed_properties(), live_doc)


@router.get("", response_model=List[Property])
async def list_properties(
    search: Optional[str] = None,
    user: dict = Depends(get_current_user)
):
    """Lista efectiva (seed + BD), mais recentes primeiro. `search` filtra por nome/morada."""
    effective = merge_properties(get_seed_properties(), await _load_live_properties())
    return search_properties(effective, search)


@router.get("/{prop_id}", response_model=Property)
async def get_property(prop_id: str, user: dict = Depends(get_current_user)):
    prop = await _get_effective(prop_id)
    if not prop:
        raise HTTPException(status_code=404, detail="Imóvel não encontrado")
    return prop


@router.post("", response_model=Property)
@limit_write()
async def create_property(request: Request, data: PropertyCreate, user: dict = Depends(get_current_user)):
    now = utc_now_iso()
    prop_doc = data.to_document()
    prop_doc.update({
        "id": str(uuid.uuid4()),
        "createdAt": now,
        "updatedAt": now,
    })

    try:
        await db.properties.insert_one(prop_doc)
    except Exception as e:
        await _write_failed("criar", prop_doc["id"], e, user)

    prop_doc.pop("_id", None)
    logger.info(f"Imóvel {prop_doc['id']} criado por {user.get('email')}")
    await broker.publish_document(PROPERTIES_CHANNEL, prop_doc["id"])
    return prop_doc


@router.put("/{prop_id}", response_model=Property)
async def update_property(
    prop_id: str,
    data: PropertyUpdate,
    user: dict = Depends(get_current_user)
):
    """
    Actualiza um imóvel. Para um imóvel do seed ainda sem documento,
    o documento override é criado com os dados do seed mais as alterações.
    """
    if not await _get_effective(prop_id):
        raise HTTPException(status_code=404, detail="Imóvel não encontrado")

    update_data = data.to_document(exclude_unset=True)
    update_data["updatedAt"] = utc_now_iso()

    update = {"$set": update_data}
    seed_prop = get_seed_property(prop_id)
    if seed_prop:
        # Campos do seed só entram na criação do override
        seed_fields = {
            k: v for k, v in seed_prop.items()
            if k != "id" and k not in update_data
        }
        if seed_fields:
            update["$setOnInsert"] = seed_fields

    try:
        await db.properties.update_one({"id": prop_id}, update, upsert=True)
    except Exception as e:
        await _write_failed("actualizar", prop_id, e, user)

    await broker.publish_document(PROPERTIES_CHANNEL, prop_id)
    return await _get_effective(prop_id)


@router.delete("/{prop_id}")
async def delete_property(prop_id: str, user: dict = Depends(get_current_user)):
    """Apagar lógico: marca deleted no documento (override criado se for seed)."""
    if not await _get_effective(prop_id):
        raise HTTPException(status_code=404, detail="Imóvel não encontrado")

    try:
        await db.properties.update_one(
            {"id": prop_id},
            {"$set": {"deleted": True, "updatedAt": utc_now_iso()}},
            upsert=True
        )
    except Exception as e:
        await _write_failed("apagar", prop_id, e, user)

    logger.info(f"Imóvel {prop_id} apagado por {user.get('email')}")
    await broker.publish_document(PROPERTIES_CHANNEL, prop_id)
    return {"success": True, "message": "Imóvel apagado"}
