"""
Base interfaces for remote execution backends.

All concrete backends should inherit from :class:`ExecutionBackend` and
implement :meth:`map_language`, :meth:`classify_error` and
:meth:`execute`.  A backend does not sandbox anything itself; it sends
the source to a remote service and returns that service's response
model unchanged.  Turning the response into an
:class:`~execrelay.outcome.Outcome` is the normalizer's job.

Backends share one long-lived :class:`httpx.AsyncClient`, which is safe
for concurrent use.  They hold no other state.
"""

from __future__ import annotations

import abc
import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel

from ..outcome import ErrorClass

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """Base class for errors raised by a backend client."""

    def __init__(self, message: str = "", status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ExecutionBackend(abc.ABC):
    """
    Abstract base class for remote execution backends.

    Subclasses set :attr:`name` and provide the language mapping, the
    error classifier and the request itself.
    """

    name: str = "backend"

    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        """
        Parameters
        ----------
        client: httpx.AsyncClient
            Shared HTTP client.  Owned by the caller, never closed here.
        base_url: str
            Root URL of the remote service, without a trailing slash.
        """
        self.client = client
        self.base_url = base_url.rstrip("/")

    @abc.abstractmethod
    def map_language(self, tag: str) -> Optional[str]:
        """Return the backend language id for ``tag``, or ``None`` if unsupported."""
        raise NotImplementedError

    @abc.abstractmethod
    async def execute(self, language_id: str, source: str) -> BaseModel:
        """Run ``source`` remotely and return the backend's response model.

        Raises
        ------
        BackendError
            Or any transport error from ``httpx``; callers pass whatever
            is raised through :meth:`classify_error`.
        """
        raise NotImplementedError

    def classify_error(self, exc: BaseException) -> ErrorClass:
        """Map an exception raised by :meth:`execute` to an :class:`ErrorClass`.

        The base implementation only recognises cancellation: a transport
        timeout or an expired deadline.  Subclasses extend it with their
        own error types.
        """
        if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
            return ErrorClass.CANCELLED
        return ErrorClass.UNCLASSIFIED

    async def _post_json(self, path: str, payload: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> httpx.Response:
        """
        Helper to POST a JSON payload to the backend.

        Transport errors propagate unchanged.  Status handling is left to
        the caller because each service reports failures differently.
        """
        url = f"{self.base_url}{path}"
        logger.debug("POST %s (%s)", url, self.name)
        return await self.client.post(url, json=payload, headers=headers)


def error_message(response: httpx.Response) -> str:
    """Best-effort extraction of an error message from a JSON error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip()
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return response.text.strip()
