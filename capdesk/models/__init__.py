"""Data models for the capdesk application."""

from .session import SessionStatus, SessionRecord
from .events import LedgerEvent, CoordinatorEvent
from .backend import StartOptions, BackendResult, IN_PROGRESS_STATUSES

__all__ = [
    "SessionStatus",
    "SessionRecord",
    "LedgerEvent",
    "CoordinatorEvent",
    "StartOptions",
    "BackendResult",
    "IN_PROGRESS_STATUSES",
]
