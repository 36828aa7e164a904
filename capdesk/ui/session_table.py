"""Console view of the session ledger and coordinator phase."""

import logging
from typing import Callable, List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..models.events import LedgerEvent, CoordinatorEvent
from ..models.session import SessionRecord
from ..services.recording_coordinator import CoordinatorPhase, RecordingCoordinator
from ..services.session_ledger import SessionLedger

logger = logging.getLogger(__name__)

PHASE_STYLES = {
    CoordinatorPhase.IDLE: "dim",
    CoordinatorPhase.STARTING: "yellow",
    CoordinatorPhase.RECORDING: "bold red",
    CoordinatorPhase.STOPPING: "yellow",
}


def build_session_table(records: List[SessionRecord]) -> Table:
    """Create a table with one row per session record, in ledger order."""
    table = Table(title="Recordings", show_lines=False)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Started", style="white")
    table.add_column("Status")
    table.add_column("File", style="green")
    table.add_column("PID", justify="right", style="dim")

    for record in records:
        status_style = "bold red" if record.is_recording else "green"
        table.add_row(
            record.record_id,
            record.started_at.strftime("%Y-%m-%d %H:%M:%S"),
            Text(record.status.value, style=status_style),
            record.file_path or "-",
            str(record.process_handle) if record.process_handle is not None else "-",
        )

    if not records:
        table.caption = "No recordings yet."
    return table


def render_phase(phase: CoordinatorPhase) -> Text:
    """Status indicator shown next to the recorder controls."""
    dot = "●" if phase is CoordinatorPhase.RECORDING else "○"
    return Text(f"{dot} {phase.value.capitalize()}", style=PHASE_STYLES.get(phase, ""))


class SessionTableView:
    """Observer printing ledger and coordinator events to a rich console."""

    def __init__(self,
                 ledger: SessionLedger,
                 coordinator: RecordingCoordinator,
                 console: Optional[Console] = None):
        self.ledger = ledger
        self.coordinator = coordinator
        self.console = console or Console()
        self._unsubscribers: List[Callable[[], None]] = []

    def attach(self) -> None:
        """Subscribe to ledger and coordinator events."""
        if self._unsubscribers:
            return
        self._unsubscribers = [
            self.ledger.subscribe(self._on_ledger_event),
            self.coordinator.subscribe(self._on_coordinator_event),
        ]
        logger.debug("SessionTableView attached")

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        logger.debug("SessionTableView detached")

    def _on_ledger_event(self, event: LedgerEvent) -> None:
        record = event.record
        if event.event_type == "created":
            self.console.print(f"🎙  Recording {record.record_id} started", markup=False)
        else:
            self.console.print(f"⏹  Recording {record.record_id} done: {record.file_path or 'no file'}", markup=False)

    def _on_coordinator_event(self, event: CoordinatorEvent) -> None:
        if event.event_type == "phase_changed":
            self.console.print(render_phase(event.phase))
        else:
            action = "start" if event.event_type == "start_failed" else "stop"
            self.console.print(Text.assemble((f"❌ Failed to {action} recording: ", "bold red"), event.error or ""))

    def render(self) -> None:
        """Print the current phase and the full session table."""
        self.console.print(render_phase(self.coordinator.phase))
        self.console.print(build_session_table(self.ledger.list()))
