"""Recording session coordinator: start/stop/poll protocol against the backend."""

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Iterable, Optional

from ..backend.base import AbstractRecorderBackend
from ..models.backend import BackendResult, StartOptions
from ..models.events import CoordinatorEvent
from .notifier import EventNotifier
from .session_ledger import SessionLedger

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 3.0
DEFAULT_ENDED_STATUSES = frozenset({"done", "stopped", "finished", "not_running", "no_pidfile"})


def _current_task() -> Optional[asyncio.Task]:
    try:
        return asyncio.current_task()
    except RuntimeError:
        # close() called from synchronous teardown with no running loop
        return None


class CoordinatorPhase(Enum):
    """Phase of the coordinator's current session attempt."""
    IDLE = "idle"
    STARTING = "starting"
    RECORDING = "recording"
    STOPPING = "stopping"


class RecordingCoordinator:
    """Drives recording sessions on the backend and mirrors them in the ledger.

    A start creates the ledger record before the backend answers so the UI
    shows "recording" immediately; the backend's response then either keeps
    the record open, finalizes it, or rolls it back. Only one session can be
    active: ``request_start`` is rejected unless the phase is IDLE, and
    ``request_stop`` unless it is RECORDING.

    While RECORDING the backend status is polled every ``poll_interval``
    seconds. Polling stops as soon as the phase leaves RECORDING, and any poll
    result that arrives afterwards is discarded.
    """

    TOPIC = "recording_coordinator"

    def __init__(self,
                 backend: AbstractRecorderBackend,
                 ledger: SessionLedger,
                 poll_interval: float = DEFAULT_POLL_INTERVAL,
                 ended_statuses: Optional[Iterable[str]] = None):
        """Initialize coordinator.

        Args:
            backend: Recording backend to drive
            ledger: Session ledger owned by the application
            poll_interval: Seconds between status polls while recording
            ended_statuses: Status values meaning the backend session is over
        """
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {poll_interval}")

        self.backend = backend
        self.ledger = ledger
        self.poll_interval = poll_interval
        self.ended_statuses: FrozenSet[str] = frozenset(
            s.lower() for s in (ended_statuses if ended_statuses is not None else DEFAULT_ENDED_STATUSES)
        )

        self._phase = CoordinatorPhase.IDLE
        self.active_record_id: Optional[str] = None
        self.last_backend_result: Optional[BackendResult] = None
        self.last_status: Optional[Dict[str, Any]] = None
        self.last_error: Optional[str] = None

        # File and pid reported by an in-progress start, used if stop omits them
        self._pending_file: Optional[str] = None
        self._pending_pid: Optional[int] = None

        self._poll_task: Optional[asyncio.Task] = None
        self._poll_generation = 0
        self._closed = False

        self._notifier = EventNotifier(self.TOPIC)
        logger.info(f"RecordingCoordinator initialized (poll interval: {poll_interval}s)")

    @property
    def phase(self) -> CoordinatorPhase:
        return self._phase

    @property
    def is_closed(self) -> bool:
        return self._closed

    def subscribe(self, callback: Callable[[CoordinatorEvent], None]) -> Callable[[], None]:
        """Register an observer for phase changes and failures."""
        return self._notifier.subscribe(callback)

    def _set_phase(self, phase: CoordinatorPhase) -> None:
        previous = self._phase
        if previous is phase:
            return
        self._phase = phase
        logger.debug(f"Phase {previous.value} -> {phase.value}")

        if previous is CoordinatorPhase.RECORDING:
            self._stop_polling()
        if phase is CoordinatorPhase.RECORDING:
            self._start_polling()

        self._notifier.publish(CoordinatorEvent(
            event_type="phase_changed",
            phase=phase,
            previous_phase=previous,
            record_id=self.active_record_id,
        ))

    def _report_failure(self, event_type: str, error: str, record_id: Optional[str]) -> None:
        self.last_error = error
        self._notifier.publish(CoordinatorEvent(
            event_type=event_type,
            phase=self._phase,
            record_id=record_id,
            error=error,
        ))

    async def request_start(self, options: Optional[StartOptions] = None) -> Dict[str, Any]:
        """Start a recording session.

        Args:
            options: Start options; defaults to a background start

        Returns:
            Result dictionary with success status and details
        """
        if self._closed:
            return {"success": False, "error": "Coordinator is closed"}
        if self._phase is not CoordinatorPhase.IDLE:
            logger.warning(f"Start ignored, coordinator is {self._phase.value}")
            return {
                "success": False,
                "error": f"Recording session already {self._phase.value}",
                "record_id": self.active_record_id,
            }

        options = options or StartOptions()
        self.last_error = None
        self.last_backend_result = None
        self._pending_file = None
        self._pending_pid = None

        self._set_phase(CoordinatorPhase.STARTING)
        # Optimistic: the record exists before the backend confirms
        record = self.ledger.create(file_path=options.output_path_hint)
        self.active_record_id = record.record_id

        try:
            result = await self.backend.start(options)
        except asyncio.CancelledError:
            logger.warning(f"Start cancelled, rolling back record {record.record_id}")
            self._rollback_start(record.record_id)
            raise
        except Exception as e:
            logger.error(f"Error starting recording: {e}")
            self._rollback_start(record.record_id)
            self._report_failure("start_failed", str(e), record.record_id)
            return {
                "success": False,
                "error": str(e),
                "record_id": record.record_id,
            }

        self.last_backend_result = result

        if result.is_in_progress:
            self._pending_file = result.file
            self._pending_pid = result.pid
            self._set_phase(CoordinatorPhase.RECORDING)
            logger.info(f"Recording in progress: {record.record_id} (status: {result.status})")
        else:
            self.ledger.finalize(record.record_id, result.file, process_handle=result.pid)
            self.active_record_id = None
            self._set_phase(CoordinatorPhase.IDLE)
            logger.info(f"Recording finished on start: {record.record_id} -> {result.file}")

        return {
            "success": True,
            "record_id": record.record_id,
            "status": result.status,
            "file": result.file,
        }

    def _rollback_start(self, record_id: str) -> None:
        self.ledger.finalize(record_id)
        self.active_record_id = None
        self._set_phase(CoordinatorPhase.IDLE)

    async def request_stop(self) -> Dict[str, Any]:
        """Stop the active recording session.

        A failed stop leaves the record open and returns the coordinator to
        RECORDING: the backend may still be capturing, so either a retry or a
        status poll reporting the end resolves it.

        Returns:
            Result dictionary with success status and details
        """
        if self._phase is not CoordinatorPhase.RECORDING:
            logger.debug(f"Stop ignored, coordinator is {self._phase.value}")
            return {"success": False, "error": "Not recording"}

        record_id = self.active_record_id
        self._set_phase(CoordinatorPhase.STOPPING)

        try:
            result = await self.backend.stop()
        except asyncio.CancelledError:
            logger.warning("Stop cancelled, session left unresolved")
            self._set_phase(CoordinatorPhase.RECORDING)
            raise
        except Exception as e:
            logger.error(f"Error stopping recording: {e}")
            self._set_phase(CoordinatorPhase.RECORDING)
            self._report_failure("stop_failed", str(e), record_id)
            return {
                "success": False,
                "error": str(e),
                "record_id": record_id,
            }

        self.last_backend_result = result
        record = self._finalize_active(result)

        return {
            "success": True,
            "record_id": record.record_id if record else None,
            "status": result.status,
            "file": record.file_path if record else result.file,
        }

    def _finalize_active(self, result: BackendResult):
        """Finalize the active record from a stop or poll result and go IDLE."""
        record_id = self.active_record_id
        if record_id is None:
            latest = self.ledger.latest()
            record_id = latest.record_id if latest else None
            logger.warning(f"Active record id lost, falling back to latest: {record_id}")

        record = None
        if record_id is not None:
            record = self.ledger.finalize(
                record_id,
                result.file or self._pending_file,
                process_handle=result.pid if result.pid is not None else self._pending_pid,
            )

        self.active_record_id = None
        self._pending_file = None
        self._pending_pid = None
        self._set_phase(CoordinatorPhase.IDLE)
        return record

    async def poll_status(self) -> Optional[Dict[str, Any]]:
        """Query backend status once and reconcile if the session has ended.

        Returns:
            The status blob, or None if not recording, the query failed, or
            the result went stale while it was in flight
        """
        if self._phase is not CoordinatorPhase.RECORDING:
            return None

        generation = self._poll_generation
        try:
            status = await self.backend.status()
        except Exception as e:
            logger.warning(f"Status poll failed: {e}")
            return None

        if generation != self._poll_generation or self._phase is not CoordinatorPhase.RECORDING:
            logger.debug("Discarding stale status poll result")
            return None

        self.last_status = status
        if self._is_session_ended(status):
            logger.info(f"Backend reports session ended: {status}")
            self._finalize_active(BackendResult.from_response(status))
        return status

    def _is_session_ended(self, status: Any) -> bool:
        if not isinstance(status, dict):
            return False
        return str(status.get("status") or "").lower() in self.ended_statuses

    def _start_polling(self) -> None:
        if self._closed:
            return
        self._poll_generation += 1
        self._poll_task = asyncio.get_running_loop().create_task(
            self._poll_loop(self._poll_generation)
        )

    def _stop_polling(self) -> None:
        self._poll_generation += 1
        task = self._poll_task
        self._poll_task = None
        # A poll that ended the session runs inside the task itself
        if task is not None and not task.done() and task is not _current_task():
            task.cancel()

    async def _poll_loop(self, generation: int) -> None:
        while generation == self._poll_generation:
            await asyncio.sleep(self.poll_interval)
            if generation != self._poll_generation:
                break
            await self.poll_status()

    def close(self) -> None:
        """Stop polling for good; later starts are rejected.

        Safe to call from synchronous teardown code. Any poll still in flight
        is cancelled and its result would be discarded.
        """
        if self._closed:
            return
        self._closed = True
        self._stop_polling()
        logger.info("RecordingCoordinator closed")

    async def aclose(self) -> None:
        """Close and wait for the polling task to finish cancelling."""
        task = self._poll_task
        self.close()
        if task is not None and task is not asyncio.current_task():
            await asyncio.gather(task, return_exceptions=True)

    async def __aenter__(self) -> "RecordingCoordinator":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()
