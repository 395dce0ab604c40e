"""
====================================================================
ROTAS WEBSOCKET
====================================================================
Subscrição de um canal (leads, leads/{id}, properties, ...).
Ao ligar, o cliente recebe o snapshot completo do canal e volta a
recebê-lo após cada alteração. Desligar = cancelar a subscrição.
====================================================================
"""
import asyncio
import logging
from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect, Query
from fastapi.encoders import jsonable_encoder

from services.auth import get_user_from_token
from services.realtime import Subscription, broker, is_valid_channel
from services.snapshots import load_snapshot

logger = logging.getLogger(__name__)

router = APIRouter(tags=["WebSocket"])


async def _send_snapshot(websocket: WebSocket, channel: str):
    data = await load_snapshot(channel)
    await websocket.send_json({"channel": channel, "data": jsonable_encoder(data)})


async def _forward_changes(websocket: WebSocket, subscription: Subscription):
    """Reenvia o snapshot após cada alteração; termina (com log) se o envio falhar."""
    try:
        while True:
            await subscription.next_event()
            # Várias notificações seguidas resultam num único snapshot
            while subscription.pending():
                await subscription.next_event()
            await _send_snapshot(websocket, subscription.channel)
    except asyncio.CancelledError:
        raise
    except Exception as e:
        logger.error(f"Erro ao enviar snapshot de {subscription.channel}: {e}")
        try:
            await websocket.close(code=1011)
        except RuntimeError:
            logger.debug(f"WebSocket de {subscription.channel} já estava fechado")


@router.websocket("/ws/{channel:path}")
async def websocket_channel(
    websocket: WebSocket,
    channel: str,
    token: str = Query(...)
):
    try:
        user = await get_user_from_token(token)
    except HTTPException:
        await websocket.close(code=4001, reason="Token inválido ou expirado")
        return

    if not is_valid_channel(channel):
        await websocket.close(code=4004, reason="Canal inválido")
        return

    await websocket.accept()
    subscription = broker.subscribe(channel)
    forward_task = None

    try:
        await _send_snapshot(websocket, channel)
        forward_task = asyncio.create_task(_forward_changes(websocket, subscription))

        while True:
            data = await websocket.receive_json()
            if data.get("type") == "ping":
                await websocket.send_json({"type": "pong"})

    except WebSocketDisconnect:
        logger.info(f"WebSocket desconectado: {user['id']} ({channel})")

    except Exception as e:
        logger.error(f"Erro WebSocket em {channel}: {e}")

    finally:
        if forward_task is not None:
            forward_task.cancel()
            await asyncio.gather(forward_task, return_exceptions=True)
        subscription.close()
