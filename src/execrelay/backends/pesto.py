"""
Client for the Pesto execution API (primary backend).

Pesto is a quota-limited service with a curated language list.  Its
expected operational failures (rate limiting, monthly quota, missing
runtime, generic API errors) are all classified as
``KNOWN_LIMITATION`` so the dispatcher can quietly fall back to Piston.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..models import PestoCodeResponse
from ..outcome import ErrorClass
from ..resolver import resolve_pesto
from .base import BackendError, ExecutionBackend, error_message

logger = logging.getLogger(__name__)


class PestoError(BackendError):
    """Base class for Pesto failures."""


class PestoAPIError(PestoError):
    pass


class PestoMonthlyLimitExceededError(PestoError):
    pass


class PestoRuntimeNotFoundError(PestoError):
    pass


class PestoServerRateLimitedError(PestoError):
    pass


class PestoBackend(ExecutionBackend):
    """Execute code through Pesto.

    A backend constructed without a token is disabled: every language
    resolves to ``None`` and the dispatcher never contacts it.
    """

    name = "pesto"

    def __init__(self, client: httpx.AsyncClient, base_url: str, token: str) -> None:
        super().__init__(client, base_url)
        self.token = token

    def map_language(self, tag: str) -> Optional[str]:
        if not self.token:
            return None
        return resolve_pesto(tag)

    async def execute(self, language_id: str, source: str) -> PestoCodeResponse:
        response = await self._post_json(
            "/api/execute",
            {"language": language_id, "version": "latest", "code": source},
            headers={"X-Pesto-Token": self.token},
        )
        if response.status_code >= 400:
            error = _error_for(response)
            logger.warning("Pesto returned HTTP %s (%s): %s", response.status_code, type(error).__name__, error.message)
            raise error
        try:
            result = PestoCodeResponse.model_validate(response.json())
        except ValueError as exc:
            # Malformed success bodies count as generic API errors.
            raise PestoAPIError(f"Invalid response from Pesto: {exc}", response.status_code) from exc
        # A failed compile is the only answer allowed to omit the runtime phase.
        compile_failed = result.compile is not None and result.compile.exit_code != 0
        if result.runtime is None and not compile_failed:
            raise PestoAPIError("Pesto response has no runtime result", response.status_code)
        return result

    def classify_error(self, exc: BaseException) -> ErrorClass:
        if isinstance(exc, PestoError):
            return ErrorClass.KNOWN_LIMITATION
        return super().classify_error(exc)


def _error_for(response: httpx.Response) -> PestoError:
    status = response.status_code
    message = error_message(response)
    lowered = message.lower()
    if status == 429:
        return PestoServerRateLimitedError(message or "Server rate limited", status)
    if status == 402 or "monthly limit" in lowered:
        return PestoMonthlyLimitExceededError(message or "Monthly limit exceeded", status)
    if status in (400, 404) and "runtime not found" in lowered:
        return PestoRuntimeNotFoundError(message, status)
    return PestoAPIError(message or f"HTTP {status}", status)
