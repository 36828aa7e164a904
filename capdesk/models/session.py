"""Session-related data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class SessionStatus(Enum):
    """Lifecycle status of a recording session."""
    RECORDING = "recording"
    DONE = "done"


@dataclass(frozen=True)
class SessionRecord:
    """One recording attempt as tracked by the session ledger."""
    record_id: str
    started_at: datetime
    status: SessionStatus = SessionStatus.RECORDING
    file_path: Optional[str] = None
    process_handle: Optional[int] = None  # OS pid reported by the backend

    @property
    def is_recording(self) -> bool:
        return self.status is SessionStatus.RECORDING
