"""Abstract base class for recording backends."""

from abc import ABC, abstractmethod
from typing import Any, Dict
import logging

from ..models.backend import StartOptions, BackendResult

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """Raised when the recording backend rejects or cannot serve a request."""


class AbstractRecorderBackend(ABC):
    """Out-of-process recording engine reached through async RPC calls."""

    @abstractmethod
    async def start(self, options: StartOptions) -> BackendResult:
        """Begin a capture.

        Args:
            options: Output hint, background flag and duration hint

        Returns:
            BackendResult with status "started"/"running" for a capture still
            in progress, or a terminal status (e.g. "done") with the file

        Raises:
            BackendError: If the backend could not begin capture
        """
        pass

    @abstractmethod
    async def stop(self) -> BackendResult:
        """Stop the running capture.

        Raises:
            BackendError: If the backend did not acknowledge the stop
        """
        pass

    @abstractmethod
    async def status(self) -> Dict[str, Any]:
        """Return the backend-defined status blob."""
        pass

    @abstractmethod
    async def list_devices(self) -> Any:
        """Return the backend-defined capture device listing."""
        pass
