# File upload/list/download flow

from .orchestrator import FileFlowOrchestrator, normalize_file_name
from .schemas import UploadResult, UploadState

__all__ = [
    "FileFlowOrchestrator",
    "normalize_file_name",
    "UploadResult",
    "UploadState",
]
