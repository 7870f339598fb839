# Notification hub

from .hub import Channel, ChannelHandle, NotificationHub, get_notification_hub
from .schemas import BroadcastReport, FileAvailable

__all__ = [
    "Channel",
    "ChannelHandle",
    "NotificationHub",
    "get_notification_hub",
    "FileAvailable",
    "BroadcastReport",
]
