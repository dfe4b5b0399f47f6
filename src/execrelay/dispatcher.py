"""Execution dispatcher.

Drives at most two sequential backend attempts for one request:

* The primary backend is tried only when it resolves the language.  A
  response ends the request.  An error its classifier reports as
  ``KNOWN_LIMITATION`` is suppressed and the secondary backend is tried.
  Any other error, cancellation included, is re-raised and no reply is
  produced.
* The secondary backend is always tried when reached.  ``ENGINE_FAULT``
  and ``CANCELLED`` errors become user-visible outcomes; anything else is
  re-raised.

The optional ``deadline`` is an absolute ``loop.time()`` value supplied by
the caller and shared by both attempts.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .backends import ExecutionBackend
from .formatter import render, usage_reply
from .normalizer import DEFAULT_OUTPUT_LIMIT, normalize
from .outcome import EngineFault, ErrorClass, ExecRequest, Outcome, Reply, TimedOut

logger = logging.getLogger(__name__)


class ExecDispatcher:
    """Relay a request to the primary backend, falling back to the secondary."""

    def __init__(
        self,
        primary: ExecutionBackend,
        secondary: ExecutionBackend,
        output_limit: int = DEFAULT_OUTPUT_LIMIT,
    ) -> None:
        self.primary = primary
        self.secondary = secondary
        self.output_limit = output_limit

    async def dispatch(self, request: ExecRequest, deadline: Optional[float] = None) -> Reply:
        """Run ``request`` and return the reply to send.

        Returns the usage help when the request carries no source.  Errors
        that are neither expected primary limitations nor reportable
        secondary failures propagate to the caller.
        """
        source = request.source
        if source is None:
            return usage_reply(request)

        outcome = await self._attempt_primary(request.language_tag, source, deadline)
        if outcome is None:
            outcome = await self._attempt_secondary(request.language_tag, source, deadline)
        return render(outcome, request)

    async def _attempt_primary(self, tag: str, source: str, deadline: Optional[float]) -> Optional[Outcome]:
        language_id = self.primary.map_language(tag)
        if language_id is None:
            logger.debug("%s does not support %r; skipping", self.primary.name, tag)
            return None

        logger.info("Executing %s code on %s", language_id, self.primary.name)
        try:
            response = await _call(self.primary, language_id, source, deadline)
        except Exception as exc:
            error_class = self.primary.classify_error(exc)
            if error_class is not ErrorClass.KNOWN_LIMITATION:
                raise
            logger.warning(
                "%s failed with a known limitation (%s); falling back to %s",
                self.primary.name,
                exc,
                self.secondary.name,
            )
            return None
        return normalize(response, self.output_limit)

    async def _attempt_secondary(self, tag: str, source: str, deadline: Optional[float]) -> Outcome:
        language_id = self.secondary.map_language(tag)
        if language_id is None:
            # Secondary backends never refuse a tag themselves.
            raise ValueError(f"{self.secondary.name} could not map language {tag!r}")

        logger.info("Executing %s code on %s", language_id, self.secondary.name)
        try:
            response = await _call(self.secondary, language_id, source, deadline)
        except Exception as exc:
            error_class = self.secondary.classify_error(exc)
            if error_class is ErrorClass.ENGINE_FAULT:
                logger.info("%s reported an engine fault: %s", self.secondary.name, exc)
                return EngineFault(getattr(exc, "message", None) or str(exc) or None)
            if error_class is ErrorClass.CANCELLED:
                logger.info("%s call cancelled: %r", self.secondary.name, exc)
                return TimedOut()
            raise
        return normalize(response, self.output_limit)


async def _call(backend: ExecutionBackend, language_id: str, source: str, deadline: Optional[float]):
    if deadline is None:
        return await backend.execute(language_id, source)
    async with asyncio.timeout_at(deadline):
        return await backend.execute(language_id, source)
