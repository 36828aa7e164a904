"""Services layer for capdesk session coordination."""

from .session_ledger import SessionLedger
from .recording_coordinator import RecordingCoordinator, CoordinatorPhase
from .notifier import EventNotifier

__all__ = [
    "SessionLedger",
    "RecordingCoordinator",
    "CoordinatorPhase",
    "EventNotifier",
]
