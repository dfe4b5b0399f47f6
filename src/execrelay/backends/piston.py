"""
Client for the Piston execution API (secondary backend).

Piston supports a broad language list and is used whenever Pesto cannot
run a request.  Language slugs are passed through without validation;
Piston rejects unknown ones with an error message, which surfaces here
as :class:`PistonEngineFault`.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

import httpx

from ..models import PistonExecuteResult
from ..outcome import ErrorClass
from ..resolver import resolve_piston
from .base import BackendError, ExecutionBackend, error_message

logger = logging.getLogger(__name__)


class PistonError(BackendError):
    """Base class for Piston failures."""


class PistonEngineFault(PistonError):
    """Piston reported a failure of its own (unknown runtime, internal error)."""


class PistonBackend(ExecutionBackend):
    """Execute code through Piston."""

    name = "piston"

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        aliases: Optional[Dict[str, str]] = None,
    ) -> None:
        super().__init__(client, base_url)
        self.aliases = aliases

    def map_language(self, tag: str) -> Optional[str]:
        return resolve_piston(tag, self.aliases)

    async def execute(self, language_id: str, source: str) -> PistonExecuteResult:
        response = await self._post_json(
            "/api/v2/piston/execute",
            {"language": language_id, "version": "*", "files": [{"content": source}]},
        )
        if response.status_code >= 400:
            message = error_message(response)
            logger.warning("Piston returned HTTP %s: %s", response.status_code, message)
            raise PistonEngineFault(message, response.status_code)
        try:
            body = response.json()
        except ValueError as exc:
            raise PistonEngineFault(f"Invalid response from Piston: {exc}", response.status_code) from exc
        if isinstance(body, dict) and "run" not in body and body.get("message"):
            raise PistonEngineFault(str(body["message"]), response.status_code)
        try:
            result = PistonExecuteResult.model_validate(body)
        except ValueError as exc:
            raise PistonEngineFault(f"Invalid response from Piston: {exc}", response.status_code) from exc
        # Piston omits the run phase when compilation fails.
        compile_failed = result.compile is not None and result.compile.code != 0
        if result.run is None and not compile_failed:
            raise PistonEngineFault("Piston response has no run result", response.status_code)
        return result

    def classify_error(self, exc: BaseException) -> ErrorClass:
        if isinstance(exc, PistonEngineFault):
            return ErrorClass.ENGINE_FAULT
        return super().classify_error(exc)
