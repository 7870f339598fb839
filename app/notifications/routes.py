"""
WebSocket endpoint for push notifications.

Each connected client is registered with the notification hub for as
long as its socket stays open. The server only pushes; anything the
client sends is read and discarded so disconnects are noticed.
"""

from fastapi import APIRouter, Depends, WebSocket
from loguru import logger

from .hub import NotificationHub, get_notification_hub

router = APIRouter()


@router.websocket("/ws/{session_id}")
async def notifications_socket(
    websocket: WebSocket,
    session_id: str,
    hub: NotificationHub = Depends(get_notification_hub),
):
    await websocket.accept()
    handle = hub.register(websocket, session_id)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        hub.unregister(handle)
        logger.info(f"Session {session_id} disconnected")
