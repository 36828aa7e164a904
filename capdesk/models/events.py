"""Event models published to ledger and coordinator observers."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Any

from .session import SessionRecord


@dataclass(frozen=True)
class LedgerEvent:
    """Ledger mutation event."""
    event_type: str  # "created", "finalized"
    record: SessionRecord
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class CoordinatorEvent:
    """Coordinator lifecycle event."""
    event_type: str  # "phase_changed", "start_failed", "stop_failed"
    phase: Any  # CoordinatorPhase from services.recording_coordinator
    previous_phase: Optional[Any] = None
    record_id: Optional[str] = None
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)
