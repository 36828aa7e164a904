"""Data models exchanged with the recording backend."""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any

# Start/status values meaning the backend-side capture is still going
IN_PROGRESS_STATUSES = frozenset({"started", "running"})


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


@dataclass
class StartOptions:
    """Options for a start request.

    Empty strings are treated as absent; the backend is the authority on
    path and duration format.
    """
    output_path_hint: Optional[str] = None
    background: bool = True
    duration_hint: Optional[str] = None  # "00:10:00" or "600"
    mic: Optional[str] = None
    system: Optional[str] = None

    def __post_init__(self):
        self.output_path_hint = _blank_to_none(self.output_path_hint)
        self.duration_hint = _blank_to_none(self.duration_hint)
        self.mic = _blank_to_none(self.mic)
        self.system = _blank_to_none(self.system)

    def to_payload(self) -> Dict[str, Any]:
        """Request body in the backend's start_recording argument names."""
        return {
            "output": self.output_path_hint,
            "background": self.background,
            "duration": self.duration_hint,
            "mic": self.mic,
            "system": self.system,
        }


@dataclass
class BackendResult:
    """Parsed start/stop response."""
    status: str
    file: Optional[str] = None
    pid: Optional[int] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_response(cls, data: Any) -> "BackendResult":
        """Build a result from a raw backend payload.

        Args:
            data: Decoded response body. Non-dict payloads are treated as a
                bare status string.

        Returns:
            BackendResult with normalized fields
        """
        if not isinstance(data, dict):
            data = {"status": "" if data is None else str(data)}

        pid = data.get("pid")
        try:
            pid = int(pid) if pid is not None else None
        except (TypeError, ValueError):
            pid = None

        return cls(
            status=str(data.get("status") or "").lower(),
            file=_blank_to_none(data.get("file")),
            pid=pid,
            raw=dict(data),
        )

    @property
    def is_in_progress(self) -> bool:
        return self.status in IN_PROGRESS_STATUSES
