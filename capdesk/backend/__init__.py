"""Recording backend boundary."""

from .base import AbstractRecorderBackend, BackendError
from .http_backend import HttpRecorderBackend

__all__ = [
    "AbstractRecorderBackend",
    "BackendError",
    "HttpRecorderBackend",
]
