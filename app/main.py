"""
FastAPI application for filecast.

Wires the file storage API, the notification websocket and the optional
static frontend into one app.

Usage:
    uvicorn app.main:app --reload --port 8080
"""

from pathlib import Path

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from loguru import logger

from app.files.routes import router as files_router
from app.notifications.hub import NotificationHub, get_notification_hub
from app.notifications.routes import router as notifications_router
from filecast_core.config import settings
from filecast_core.logging import setup_logging

# Initialize logging
setup_logging()

app = FastAPI(
    title="Filecast",
    description="Upload files to object storage and notify connected clients when they appear",
    version=settings.SERVICE_VERSION,
)

# CORS configuration for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# File storage REST resource
app.include_router(files_router, prefix="/api/storage", tags=["Storage"])

# Push channel (no prefix, route already has /ws)
app.include_router(notifications_router, tags=["Notifications"])


@app.get("/health")
def health(hub: NotificationHub = Depends(get_notification_hub)):
    """
    Health check endpoint.

    Returns:
        dict: Status, service information and number of connected clients.
    """
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "connected_clients": len(hub),
    }


# Mounted last so it only serves paths no route above claimed
if Path(settings.STATIC_DIR).is_dir():
    app.mount("/", StaticFiles(directory=settings.STATIC_DIR, html=True), name="static")
else:
    logger.info(f"Static directory '{settings.STATIC_DIR}' not found; frontend not mounted")
