"""
Notification hub: the set of live client channels and fan-out to them.

Channels register when a websocket connects and unregister on disconnect.
After every successful upload the hub pushes a "File available" text frame
to each registered channel. Delivery is best-effort: a channel whose send
fails or times out is removed and the event is lost for that client, who
will see the file on its next listing instead.
"""

from __future__ import annotations

import asyncio
import threading
import uuid
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from loguru import logger

from filecast_core.config import settings

from .schemas import BroadcastReport, FileAvailable

# "Try Again Later": tells a dropped client to reconnect
DROPPED_CLOSE_CODE = 1013


@runtime_checkable
class Channel(Protocol):
    """Anything that can push a text frame to one client (e.g. a WebSocket)."""

    async def send_text(self, data: str) -> None: ...

    async def close(self, code: int = 1000, reason: str | None = None) -> None: ...


@dataclass(frozen=True)
class ChannelHandle:
    """Opaque token identifying one registration."""

    id: str
    session_id: str


class NotificationHub:
    """
    Registry of connected channels with best-effort broadcast.

    The registry is the only state shared between requests, so every
    read and write of it happens under a single lock. Broadcast sends to a
    snapshot taken under that lock and never holds it across an await.

    Usage:
        hub = NotificationHub()
        handle = hub.register(websocket, session_id="abc")
        await hub.broadcast(FileAvailable(name="report.pdf"))
        hub.unregister(handle)
    """

    def __init__(self, send_timeout: float | None = None, close_timeout: float = 1.0):
        """
        Args:
            send_timeout: Seconds allowed for a single channel send
                (defaults to settings.NOTIFY_SEND_TIMEOUT_SECONDS).
            close_timeout: Seconds allowed for closing a dropped channel.
        """
        self.close_timeout = close_timeout
        self.send_timeout = (
            send_timeout if send_timeout is not None else settings.NOTIFY_SEND_TIMEOUT_SECONDS
        )
        self._lock = threading.Lock()
        self._channels: dict[str, tuple[ChannelHandle, Channel]] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._channels)

    def sessions(self) -> list[str]:
        """Session ids of all registered channels."""
        with self._lock:
            return [handle.session_id for handle, _ in self._channels.values()]

    def register(self, channel: Channel, session_id: str) -> ChannelHandle:
        """
        Add a channel to the broadcast set.

        Registering a channel that is already present returns its existing handle.

        Args:
            channel: Connected channel to push events to.
            session_id: Client session identifier, used for logging.

        Returns:
            ChannelHandle: Token to pass to unregister().
        """
        with self._lock:
            for handle, existing in self._channels.values():
                if existing is channel:
                    return handle
            handle = ChannelHandle(id=uuid.uuid4().hex, session_id=session_id)
            self._channels[handle.id] = (handle, channel)
            count = len(self._channels)

        logger.info(f"Registered channel for session {session_id} ({count} connected)")
        return handle

    def unregister(self, handle: ChannelHandle) -> bool:
        """
        Remove a channel from the broadcast set. Safe to call more than once.

        Returns:
            bool: True if the channel was registered.
        """
        with self._lock:
            removed = self._channels.pop(handle.id, None) is not None
            count = len(self._channels)

        if removed:
            logger.info(f"Unregistered channel for session {handle.session_id} ({count} connected)")
        return removed

    def _snapshot(self) -> list[tuple[ChannelHandle, Channel]]:
        with self._lock:
            return list(self._channels.values())

    async def _send(self, handle: ChannelHandle, channel: Channel, message: str) -> bool:
        try:
            await asyncio.wait_for(channel.send_text(message), timeout=self.send_timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning(
                f"Send to session {handle.session_id} timed out after {self.send_timeout}s"
            )
        except Exception as e:
            logger.warning(f"Send to session {handle.session_id} failed: {type(e).__name__}: {e}")
        return False

    async def _close(self, handle: ChannelHandle, channel: Channel) -> None:
        try:
            await asyncio.wait_for(
                channel.close(code=DROPPED_CLOSE_CODE, reason="notification delivery failed"),
                timeout=self.close_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Closing session {handle.session_id} timed out")
        except Exception as e:
            logger.debug(f"Closing session {handle.session_id} failed: {type(e).__name__}: {e}")

    async def broadcast(self, event: FileAvailable) -> BroadcastReport:
        """
        Push an event to every registered channel.

        Channels that fail to receive are dropped from the set and closed, so
        the client notices and can reconnect. Never raises for delivery failures.

        Args:
            event: The event to send.

        Returns:
            BroadcastReport: How many channels received it and how many were dropped.
        """
        targets = self._snapshot()
        if not targets:
            logger.debug(f"No connected clients for '{event.name}'")
            return BroadcastReport()

        message = event.message
        results = await asyncio.gather(
            *(self._send(handle, channel, message) for handle, channel in targets)
        )

        dropped = [(handle, channel) for (handle, channel), ok in zip(targets, results) if not ok]
        for handle, _ in dropped:
            self.unregister(handle)
        if dropped:
            await asyncio.gather(*(self._close(handle, channel) for handle, channel in dropped))

        report = BroadcastReport(delivered=len(targets) - len(dropped), dropped=len(dropped))
        logger.info(
            f"Broadcast '{event.name}' to {report.delivered} client(s), dropped {report.dropped}"
        )
        return report


_hub: NotificationHub | None = None


def get_notification_hub() -> NotificationHub:
    """Process-wide hub, created on first use."""
    global _hub
    if _hub is None:
        _hub = NotificationHub()
    return _hub
