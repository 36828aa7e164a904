"""Pytest configuration and fixtures for capdesk tests."""

import asyncio
import logging
import tempfile
from pathlib import Path
from typing import Any, Dict, List

import pytest
import yaml

from capdesk.backend.base import AbstractRecorderBackend
from capdesk.models.backend import BackendResult, StartOptions
from capdesk.services.recording_coordinator import RecordingCoordinator
from capdesk.services.session_ledger import SessionLedger


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class FakeRecorderBackend(AbstractRecorderBackend):
    """Scripted backend.

    Each response queue holds dicts (returned), exceptions (raised) or
    asyncio futures (awaited first, to simulate a slow backend). When a queue
    is empty the default response is used.
    """

    def __init__(self):
        self.start_responses: List[Any] = []
        self.stop_responses: List[Any] = []
        self.status_responses: List[Any] = []
        self.default_start = {"status": "running"}
        self.default_stop = {"status": "stopped"}
        self.default_status = {"status": "running"}
        self.devices = [{"name": "Built-in Microphone", "kind": "input"}]
        self.calls: List[tuple] = []

    def call_count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    async def _next(self, queue: List[Any], default: Any) -> Any:
        item = queue.pop(0) if queue else default
        if isinstance(item, asyncio.Future):
            item = await item
        if isinstance(item, BaseException):
            raise item
        return item

    async def start(self, options: StartOptions) -> BackendResult:
        self.calls.append(("start", options))
        return BackendResult.from_response(await self._next(self.start_responses, self.default_start))

    async def stop(self) -> BackendResult:
        self.calls.append(("stop",))
        return BackendResult.from_response(await self._next(self.stop_responses, self.default_stop))

    async def status(self) -> Dict[str, Any]:
        self.calls.append(("status",))
        return await self._next(self.status_responses, self.default_status)

    async def list_devices(self) -> Any:
        self.calls.append(("list_devices",))
        return self.devices


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def fake_backend():
    return FakeRecorderBackend()


@pytest.fixture
def ledger():
    return SessionLedger()


@pytest.fixture
def coordinator(fake_backend, ledger):
    """Coordinator whose polling timer never fires on its own during a test."""
    return RecordingCoordinator(fake_backend, ledger, poll_interval=60.0)


@pytest.fixture
def test_config():
    """Test configuration settings."""
    return {
        "backend": {
            "url": "http://127.0.0.1:8765",
            "request_timeout_seconds": 5,
        },
        "recording": {
            "background": True,
            "poll_interval_seconds": 0.01,
        },
        "storage": {
            "data_directory": "data",
        },
        "logging": {
            "level": "DEBUG",
            "file_path": "data/logs/capdesk.log",
            "console_output": False,
        },
    }


@pytest.fixture
def config_file(temp_data_dir, test_config):
    """Write test_config to a capdesk.yaml in a temporary directory."""
    path = Path(temp_data_dir) / "capdesk.yaml"
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(test_config, f)
    return str(path)
