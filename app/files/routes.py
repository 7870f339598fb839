"""
File storage routes.

- POST /upload: store a file and notify connected clients
- GET /files: list stored file names
- GET /download/{file_name}: fetch a stored file as an attachment
"""

from __future__ import annotations

import re
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.responses import PlainTextResponse, Response
from loguru import logger

from filecast_core.runtime.errors import ErrorCode, ServiceError

from .dependencies import get_orchestrator
from .orchestrator import FileFlowOrchestrator

router = APIRouter()

_STATUS_BY_CODE = {
    ErrorCode.INVALID_INPUT: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.PAYLOAD_TOO_LARGE: 413,
    ErrorCode.CLIENT_DISCONNECTED: 499,
    ErrorCode.STORAGE_UNAVAILABLE: 500,
}


def to_http_exception(error: ServiceError) -> HTTPException:
    """Map a ServiceError onto the HTTP status the API documents for it."""
    status_code = _STATUS_BY_CODE.get(error.code, 500)
    return HTTPException(status_code=status_code, detail=error.to_dict())


_TOKEN = re.compile(r"[A-Za-z0-9!#$%&'*+.^_`|~-]+")


def content_disposition(file_name: str) -> str:
    """Build an attachment header; plain token names stay bare, others are quoted."""
    if _TOKEN.fullmatch(file_name):
        return f"attachment; filename={file_name}"
    try:
        file_name.encode("latin-1")
        safe = file_name.isprintable()
    except UnicodeEncodeError:
        safe = False
    if not safe:
        return f"attachment; filename*=UTF-8''{quote(file_name)}"
    escaped = file_name.replace("\\", "\\\\").replace('"', '\\"')
    return f'attachment; filename="{escaped}"'


@router.post("/upload", response_class=PlainTextResponse)
async def upload_file(
    request: Request,
    file: UploadFile = File(...),
    orchestrator: FileFlowOrchestrator = Depends(get_orchestrator),
):
    """
    Upload a file to the bucket and broadcast its availability.

    Returns:
        str: "File uploaded successfully: <name>".
    """
    try:
        result = await orchestrator.upload_file(
            file.filename, file, is_disconnected=request.is_disconnected
        )
    except ServiceError as e:
        logger.error(f"Upload of '{file.filename}' failed: {e} (debug_id={e.debug_id})")
        raise to_http_exception(e) from e
    finally:
        await file.close()

    return result.message


@router.get("/files", response_model=list[str])
async def list_files(orchestrator: FileFlowOrchestrator = Depends(get_orchestrator)):
    """Return every stored file name."""
    try:
        return await orchestrator.list_files()
    except ServiceError as e:
        logger.error(f"Listing files failed: {e} (debug_id={e.debug_id})")
        raise to_http_exception(e) from e


@router.get("/download/{file_name}")
async def download_file(
    file_name: str,
    orchestrator: FileFlowOrchestrator = Depends(get_orchestrator),
):
    """
    Download a stored file.

    Raises:
        HTTPException: 404 if file_name was never uploaded, 500 on storage failure.
    """
    try:
        content = await orchestrator.download_file(file_name)
    except ServiceError as e:
        if e.code != ErrorCode.NOT_FOUND:
            logger.error(f"Download of '{file_name}' failed: {e} (debug_id={e.debug_id})")
        raise to_http_exception(e) from e

    return Response(
        content=content,
        media_type="application/octet-stream",
        headers={"Content-Disposition": content_disposition(file_name)},
    )
