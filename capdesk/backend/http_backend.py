"""HTTP/JSON client for the out-of-process recording backend."""

import asyncio
import logging
from typing import Any, Dict, Optional

import aiohttp

from ..models.backend import StartOptions, BackendResult
from .base import AbstractRecorderBackend, BackendError

logger = logging.getLogger(__name__)


class HttpRecorderBackend(AbstractRecorderBackend):
    """Recorder backend reached by POSTing JSON to ``{base_url}/{command}``."""

    START_COMMAND = "start_recording"
    STOP_COMMAND = "stop_recording"
    STATUS_COMMAND = "status"
    DEVICES_COMMAND = "list_audio_devices"

    def __init__(self, base_url: str, request_timeout: float = 10.0):
        """Initialize HTTP backend.

        Args:
            base_url: Root URL of the recorder service
            request_timeout: Total timeout in seconds for status and device
                queries. Start and stop only bound the connection time, since
                a foreground start lasts as long as the capture.
        """
        self.base_url = base_url.rstrip("/")
        self.request_timeout = request_timeout

        logger.info(f"HttpRecorderBackend initialized with base_url: {self.base_url}")

    async def _invoke(self, command: str, payload: Optional[Dict[str, Any]] = None,
                      bounded: bool = True) -> Any:
        """POST a command and return the decoded JSON response.

        Raises:
            BackendError: On non-2xx responses, transport errors or timeouts
        """
        url = f"{self.base_url}/{command}"
        if bounded:
            timeout = aiohttp.ClientTimeout(total=self.request_timeout)
        else:
            timeout = aiohttp.ClientTimeout(total=None, sock_connect=self.request_timeout)

        logger.debug(f"Invoking backend command {command}: {payload}")
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, json=payload or {}) as response:
                    if response.status >= 300:
                        error_text = await response.text()
                        raise BackendError(f"{command} failed: {response.status} - {error_text}")

                    return await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise BackendError(f"{command} failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise BackendError(f"{command} timed out after {self.request_timeout}s") from e
        except ValueError as e:
            raise BackendError(f"{command} returned invalid JSON: {e}") from e

    async def start(self, options: StartOptions) -> BackendResult:
        data = await self._invoke(self.START_COMMAND, options.to_payload(), bounded=False)
        result = BackendResult.from_response(data)
        logger.info(f"Backend start: status={result.status} file={result.file} pid={result.pid}")
        return result

    async def stop(self) -> BackendResult:
        data = await self._invoke(self.STOP_COMMAND, bounded=False)
        result = BackendResult.from_response(data)
        logger.info(f"Backend stop: status={result.status} file={result.file} pid={result.pid}")
        return result

    async def status(self) -> Dict[str, Any]:
        data = await self._invoke(self.STATUS_COMMAND)
        if not isinstance(data, dict):
            data = {"status": str(data)}
        return data

    async def list_devices(self) -> Any:
        return await self._invoke(self.DEVICES_COMMAND)
