"""
Pydantic models for the notification hub.
"""

from pydantic import BaseModel


class FileAvailable(BaseModel):
    """Broadcast after a file has been persisted."""

    name: str

    model_config = {"frozen": True}

    @property
    def message(self) -> str:
        """Text frame pushed to every connected client."""
        return f"File available: {self.name}"


class BroadcastReport(BaseModel):
    """Outcome of a single broadcast."""

    delivered: int = 0
    dropped: int = 0

    @property
    def attempted(self) -> int:
        return self.delivered + self.dropped
