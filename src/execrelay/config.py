"""Configuration loader.

The relay reads its configuration from environment variables so that the
same container image can run as a Telegram webhook receiver or as a plain
HTTP execution relay.  Reasonable defaults are provided so that local
development works out of the box.

Environment variables:

``EXECRELAY_API_KEY``
    The shared secret used to authenticate incoming ``/exec`` requests.
    Clients must include this value in the ``x‑api‑key`` header.  Empty
    disables the check.

``EXECRELAY_PESTO_URL``
    Base URL of the Pesto execution API (primary backend).

``EXECRELAY_PESTO_TOKEN``
    Token sent in the ``X-Pesto-Token`` header.  When empty the primary
    backend is disabled and every request goes straight to Piston.

``EXECRELAY_PISTON_URL``
    Base URL of the Piston execution API (secondary backend).

``EXECRELAY_HTTP_TIMEOUT_SECONDS``
    Transport timeout for a single backend HTTP request.  Default is 30.

``EXECRELAY_DEADLINE_SECONDS``
    Deadline attached to each dispatched request, shared by the primary
    and secondary attempts.  Default is 60.

``EXECRELAY_OUTPUT_LIMIT``
    Maximum stdout length echoed back to the chat.  Default is 1000.

``TELEGRAM_BOT_TOKEN``
    Bot API token used to send replies and look up the bot identity.

``TELEGRAM_WEBHOOK_SECRET``
    If set, webhook calls must carry a matching
    ``X-Telegram-Bot-Api-Secret-Token`` header.

``PORT``
    The port on which the API server listens.  Defaults to 8080.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


def _int_var(name: str, default: int) -> int:
    val = os.getenv(name)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"Invalid integer for {name}: {val}")


def _float_var(name: str, default: float) -> float:
    val = os.getenv(name)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        raise ValueError(f"Invalid number for {name}: {val}")


@dataclass(frozen=True)
class Config:
    """Centralised configuration object."""

    api_key: str
    pesto_url: str
    pesto_token: str
    piston_url: str
    http_timeout_seconds: float
    deadline_seconds: float
    output_limit: int
    telegram_bot_token: str
    telegram_webhook_secret: str
    port: int

    @property
    def pesto_enabled(self) -> bool:
        return bool(self.pesto_token)

    @classmethod
    def load(cls) -> "Config":
        # API key may be empty in local development but should be set in production.
        api_key = os.getenv("EXECRELAY_API_KEY", "")

        pesto_url = os.getenv("EXECRELAY_PESTO_URL", "https://api.pesto.teknologiumum.com").rstrip("/")
        pesto_token = os.getenv("EXECRELAY_PESTO_TOKEN", "")
        piston_url = os.getenv("EXECRELAY_PISTON_URL", "https://emkc.org").rstrip("/")

        http_timeout_seconds = _float_var("EXECRELAY_HTTP_TIMEOUT_SECONDS", 30.0)
        deadline_seconds = _float_var("EXECRELAY_DEADLINE_SECONDS", 60.0)
        if http_timeout_seconds <= 0 or deadline_seconds <= 0:
            raise ValueError("Timeouts must be positive")

        output_limit = _int_var("EXECRELAY_OUTPUT_LIMIT", 1000)
        if output_limit < 0:
            raise ValueError(f"Invalid EXECRELAY_OUTPUT_LIMIT: {output_limit}")

        return cls(
            api_key=api_key,
            pesto_url=pesto_url,
            pesto_token=pesto_token,
            piston_url=piston_url,
            http_timeout_seconds=http_timeout_seconds,
            deadline_seconds=deadline_seconds,
            output_limit=output_limit,
            telegram_bot_token=os.getenv("TELEGRAM_BOT_TOKEN", ""),
            telegram_webhook_secret=os.getenv("TELEGRAM_WEBHOOK_SECRET", ""),
            port=_int_var("PORT", 8080),
        )

    @classmethod
    def from_env(cls) -> "Config":
        """
        Alternate constructor used by the API to load configuration.

        This wrapper calls :meth:`load` to construct the configuration.
        It exists to provide a more intuitive name when consumed in
        application code.
        """
        return cls.load()
