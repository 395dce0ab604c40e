"""
====================================================================
BROKER DE ALTERAÇÕES EM TEMPO REAL
====================================================================
Cada mutação publica uma notificação no canal da colecção/documento
afectado. Os subscritores (WebSockets, caches em memória) recebem a
notificação e voltam a ler o snapshot completo - nunca um delta.

Canais:
    leads, leads/{id}
    properties, properties/{id}
    settings/statuses, settings/targets
    users
====================================================================
"""
import asyncio
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

logger = logging.getLogger(__name__)

LEADS_CHANNEL = "leads"
PROPERTIES_CHANNEL = "properties"
STATUSES_CHANNEL = "settings/statuses"
TARGETS_CHANNEL = "settings/targets"
USERS_CHANNEL = "users"

COLLECTION_CHANNELS = {
    LEADS_CHANNEL,
    PROPERTIES_CHANNEL,
    STATUSES_CHANNEL,
    TARGETS_CHANNEL,
    USERS_CHANNEL,
}

# Canais de documento individual: "<colecção>/<id>"
DOCUMENT_PREFIXES = (LEADS_CHANNEL, PROPERTIES_CHANNEL)

Listener = Callable[[str, Optional[Dict[str, Any]]], Awaitable[None]]


def is_valid_channel(channel: str) -> bool:
    if channel in COLLECTION_CHANNELS:
        return True
    prefix, _, doc_id = channel.partition("/")
    return prefix in DOCUMENT_PREFIXES and bool(doc_id) and "/" not in doc_id


def document_channel(collection: str, doc_id: str) -> str:
    return f"{collection}/{doc_id}"


class Subscription:
    """Fila de notificações de um subscritor. Cancelar = unsubscribe."""

    def __init__(self, broker: "ChangeBroker", channel: str):
        self.channel = channel
        self._broker = broker
        self._queue: asyncio.Queue = asyncio.Queue()

    def _deliver(self, event: Dict[str, Any]):
        self._queue.put_nowait(event)

    async def next_event(self) -> Dict[str, Any]:
        return await self._queue.get()

    def pending(self) -> int:
        return self._queue.qsize()

    def close(self):
        self._broker.unsubscribe(self)


class ChangeBroker:
    """Fan-out de notificações por canal para filas e listeners em processo."""

    def __init__(self):
        self._subscriptions: Dict[str, Set[Subscription]] = defaultdict(set)
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)

    def subscribe(self, channel: str) -> Subscription:
        if not is_valid_channel(channel):
            raise ValueError(f"Canal inválido: {channel}")
        subscription = Subscription(self, channel)
        self._subscriptions[channel].add(subscription)
        logger.debug(f"Nova subscrição em {channel} ({len(self._subscriptions[channel])} activas)")
        return subscription

    def unsubscribe(self, subscription: Subscription):
        subscribers = self._subscriptions.get(subscription.channel)
        if subscribers is not None:
            subscribers.discard(subscription)
            if not subscribers:
                del self._subscriptions[subscription.channel]

    def add_listener(self, channel: str, listener: Listener):
        self._listeners[channel].append(listener)

    def subscriber_count(self, channel: str) -> int:
        return len(self._subscriptions.get(channel, ()))

    async def publish(self, channel: str, payload: Optional[Dict[str, Any]] = None):
        event = {"channel": channel, "payload": payload or {}}

        for listener in list(self._listeners.get(channel, [])):
            try:
                await listener(channel, payload)
            except Exception as e:
                # Um listener com erro não impede os restantes de receber a notificação
                logger.error(f"Listener de {channel} falhou: {e}")

        for subscription in list(self._subscriptions.get(channel, ())):
            subscription._deliver(event)

    async def publish_document(self, collection: str, doc_id: str, payload: Optional[Dict[str, Any]] = None):
        """Notifica a colecção e o canal do documento."""
        await self.publish(collection, {"id": doc_id, **(payload or {})})
        await self.publish(document_channel(collection, doc_id), payload)


broker = ChangeBroker()
