"""
Configuração de estados (labels, cores e ordem das colunas).

Documento settings/statuses: { "config": [ {id, label, color, order}, ... ] }

StatusConfigStore é o único dono da leitura: cache read-through em memória,
invalidada pelas notificações do broker e partilhada por quem precisa dos labels.
Alterar a configuração muda só a apresentação - os ids canónicos são fixos.
"""
import copy
import logging
from typing import Any, Dict, List, Optional

from database import db
from models.lead import DEFAULT_STATUS_CONFIG, LEAD_STATUSES
from services.realtime import ChangeBroker, STATUSES_CHANNEL, broker as default_broker

logger = logging.getLogger(__name__)

STATUSES_DOC_ID = "statuses"
FALLBACK_COLOR = "#000000"


def sorted_config(config: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(config, key=lambda item: item.get("order", 0))


def get_status_label(config: List[Dict[str, Any]], status_id: str) -> str:
    """Label configurado; o id em bruto se o estado já não existir."""
    for item in config:
        if item.get("id") == status_id:
            return item.get("label") or status_id
    return status_id


def get_status_color(config: List[Dict[str, Any]], status_id: str) -> str:
    for item in config:
        if item.get("id") == status_id:
            return item.get("color") or FALLBACK_COLOR
    return FALLBACK_COLOR


def validate_status_config(config: List[Dict[str, Any]]) -> Optional[str]:
    """
    Verifica que a nova configuração só relabela/recolore/reordena.
    Retorna mensagem de erro ou None.
    """
    ids = [item.get("id") for item in config]
    if len(ids) != len(set(ids)):
        return "Estados duplicados na configuração"
    missing = [s for s in LEAD_STATUSES if s not in ids]
    if missing:
        return f"Não é possível remover estados: {', '.join(missing)}"
    unknown = [s for s in ids if s not in LEAD_STATUSES]
    if unknown:
        return f"Não é possível adicionar estados: {', '.join(unknown)}"
    return None


class StatusConfigStore:
    """Cache read-through da configuração de estados."""

    def __init__(self, change_broker: ChangeBroker = default_broker):
        self._config: Optional[List[Dict[str, Any]]] = None
        self._broker = change_broker
        change_broker.add_listener(STATUSES_CHANNEL, self._on_change)

    async def _on_change(self, channel: str, payload: Optional[Dict[str, Any]]):
        self.invalidate()

    def invalidate(self):
        self._config = None

    async def _load(self) -> List[Dict[str, Any]]:
        doc = await db.settings.find_one({"_id": STATUSES_DOC_ID}, {"_id": 0})
        config = doc.get("config") if doc else None
        if isinstance(config, list) and config:
            return config
        return copy.deepcopy(DEFAULT_STATUS_CONFIG)

    async def get(self) -> List[Dict[str, Any]]:
        """Configuração ordenada por `order`."""
        if self._config is None:
            self._config = sorted_config(await self._load())
        return copy.deepcopy(self._config)

    async def update(self, config: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        error = validate_status_config(config)
        if error:
            raise ValueError(error)

        await db.settings.update_one(
            {"_id": STATUSES_DOC_ID},
            {"$set": {"config": config}},
            upsert=True
        )
        logger.info("Configuração de estados actualizada")
        await self._broker.publish(STATUSES_CHANNEL)
        return await self.get()


status_store = StatusConfigStore()
