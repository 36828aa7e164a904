"""Session ledger: observable in-memory history of recording sessions."""

import logging
import random
import string
import threading
from dataclasses import replace
from datetime import datetime
from typing import Callable, List, Optional

from ..models.events import LedgerEvent
from ..models.session import SessionRecord, SessionStatus
from .notifier import EventNotifier

logger = logging.getLogger(__name__)


class SessionLedger:
    """Ordered history of recording sessions, most recent first.

    Records are only mutated through ``create`` and ``finalize``. Every
    mutation is published to subscribers after it has been applied, while the
    ledger lock is still held, so an observer calling ``list()`` from its
    callback always sees the new state.
    """

    TOPIC = "session_ledger"

    def __init__(self):
        self._records: List[SessionRecord] = []
        self._lock = threading.RLock()
        self._notifier = EventNotifier(self.TOPIC)
        logger.info("SessionLedger initialized")

    def _generate_record_id(self) -> str:
        """Timestamp-based id with a random suffix, unique within this ledger."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        while True:
            random_suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=8))
            record_id = f"{timestamp}_{random_suffix}"
            if self._find_index(record_id) is None:
                return record_id

    def _find_index(self, record_id: str) -> Optional[int]:
        for index, record in enumerate(self._records):
            if record.record_id == record_id:
                return index
        return None

    def create(self, file_path: Optional[str] = None) -> SessionRecord:
        """Create a pending record in RECORDING status.

        Args:
            file_path: Optional output path hint known before the backend
                confirms the recording

        Returns:
            The new record; its ``record_id`` addresses it later
        """
        with self._lock:
            record = SessionRecord(
                record_id=self._generate_record_id(),
                started_at=datetime.now(),
                status=SessionStatus.RECORDING,
                file_path=file_path or None,
            )
            self._records.insert(0, record)
            logger.info(f"Created session record: {record.record_id}")
            self._notifier.publish(LedgerEvent(event_type="created", record=record))
            return record

    def finalize(self,
                 record_id: str,
                 file_path: Optional[str] = None,
                 process_handle: Optional[int] = None) -> Optional[SessionRecord]:
        """Mark a record DONE.

        Args:
            record_id: Record to finalize
            file_path: Reported output file; ignored when empty so a known
                path is never cleared
            process_handle: Backend process id, if reported

        Returns:
            The updated record, or None if no record has that id
        """
        with self._lock:
            index = self._find_index(record_id)
            if index is None:
                logger.debug(f"Finalize ignored, unknown record: {record_id}")
                return None

            current = self._records[index]
            record = replace(
                current,
                status=SessionStatus.DONE,
                file_path=file_path or current.file_path,
                process_handle=process_handle if process_handle is not None else current.process_handle,
            )
            self._records[index] = record
            logger.info(f"Finalized session record: {record_id} (file: {record.file_path})")
            self._notifier.publish(LedgerEvent(event_type="finalized", record=record))
            return record

    def list(self) -> List[SessionRecord]:
        """Snapshot of the history in display order."""
        with self._lock:
            return list(self._records)

    def latest(self) -> Optional[SessionRecord]:
        """Most recently created record, if any."""
        with self._lock:
            return self._records[0] if self._records else None

    def get(self, record_id: str) -> Optional[SessionRecord]:
        with self._lock:
            index = self._find_index(record_id)
            return self._records[index] if index is not None else None

    def active(self) -> Optional[SessionRecord]:
        """The record still in RECORDING status, if any."""
        with self._lock:
            for record in self._records:
                if record.is_recording:
                    return record
            return None

    def subscribe(self, callback: Callable[[LedgerEvent], None]) -> Callable[[], None]:
        """Register an observer called with a ``LedgerEvent`` after each mutation.

        Returns:
            Callable that removes this observer
        """
        return self._notifier.subscribe(callback)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
