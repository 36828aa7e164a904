"""Auto mode: record for a fixed duration against the configured backend."""

import asyncio
import logging
import time
from typing import List, Optional

from rich.console import Console

from .backend import AbstractRecorderBackend, BackendError, HttpRecorderBackend
from .config import CapdeskConfig
from .models.backend import StartOptions
from .models.session import SessionRecord
from .services import CoordinatorPhase, RecordingCoordinator, SessionLedger
from .ui import SessionTableView

logger = logging.getLogger(__name__)

# Granularity of the wait loop while the backend records
WAIT_STEP_SECONDS = 0.1


async def run_auto_mode(config: CapdeskConfig,
                        duration_seconds: float = 10,
                        backend: Optional[AbstractRecorderBackend] = None,
                        console: Optional[Console] = None) -> List[SessionRecord]:
    """Run one recording session end to end.

    This mode:
    1. Checks the backend is reachable
    2. Starts a background recording
    3. Waits for the duration, or until the backend ends the session
    4. Stops the recording and prints the ledger

    Args:
        config: Application configuration
        duration_seconds: How long to record
        backend: Backend to use; built from config when omitted
        console: Console for output

    Returns:
        Final ledger snapshot
    """
    console = console or Console()
    backend = backend or _initialize_backend(config)
    ledger = SessionLedger()
    logger.info(f"🤖 Starting auto mode: {duration_seconds}s recording")

    coordinator = RecordingCoordinator(
        backend,
        ledger,
        poll_interval=config.get_poll_interval(),
        ended_statuses=config.get_ended_statuses(),
    )
    view = SessionTableView(ledger, coordinator, console=console)

    async with coordinator:
        view.attach()
        try:
            if not await _check_backend_readiness(backend, console):
                return ledger.list()

            options = config.get_start_options()
            options.background = True
            await _run_recording_workflow(coordinator, options, duration_seconds, console)
            view.render()
        finally:
            view.detach()

    records = ledger.list()
    logger.info(f"Auto mode completed: {len(records)} record(s), phase {coordinator.phase.value}")
    return records


def _initialize_backend(config: CapdeskConfig) -> AbstractRecorderBackend:
    return HttpRecorderBackend(config.get_backend_url(), request_timeout=config.get_request_timeout())


async def _check_backend_readiness(backend: AbstractRecorderBackend, console: Console) -> bool:
    """Check the backend answers status queries."""
    try:
        status = await backend.status()
    except BackendError as e:
        console.print(f"❌ Backend not reachable: {e}", markup=False)
        logger.error(f"Backend readiness check failed: {e}")
        return False

    console.print(f"✅ Backend ready (status: {status.get('status', 'unknown')})", markup=False)
    return True


async def _run_recording_workflow(coordinator: RecordingCoordinator,
                                  options: StartOptions,
                                  duration_seconds: float,
                                  console: Console) -> None:
    """Start, wait, stop."""
    result = await coordinator.request_start(options)
    if not result["success"]:
        return

    start_time = time.monotonic()
    while coordinator.phase is CoordinatorPhase.RECORDING:
        if time.monotonic() - start_time >= duration_seconds:
            break
        await asyncio.sleep(WAIT_STEP_SECONDS)

    if coordinator.phase is not CoordinatorPhase.RECORDING:
        # Backend finished on its own (foreground start or poll-detected end)
        return

    stop_result = await coordinator.request_stop()
    if not stop_result["success"]:
        console.print("🔁 Retrying stop...")
        await coordinator.request_stop()
