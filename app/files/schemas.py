"""
Pydantic models for the file upload/list/download API.
"""

from enum import Enum

from pydantic import BaseModel


class UploadState(str, Enum):
    """Stages a single upload request passes through."""

    RECEIVING = "receiving"
    PERSISTING = "persisting"
    NOTIFYING = "notifying"
    COMPLETED = "completed"
    FAILED = "failed"


class UploadResult(BaseModel):
    """Returned by the orchestrator once an upload has been persisted."""

    name: str
    size: int
    state: UploadState = UploadState.COMPLETED
    notified: int = 0

    @property
    def message(self) -> str:
        return f"File uploaded successfully: {self.name}"
