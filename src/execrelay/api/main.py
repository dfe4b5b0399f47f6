"""
FastAPI application for the execution relay.

This module configures the FastAPI application, wires the backend
clients into a dispatcher on startup, and registers the routes:

* ``GET /health`` – liveness check.
* ``POST /exec`` – run code and return the reply that would be sent to
  the chat.  Protected by the ``x-api-key`` header.
* ``POST /webhook/telegram`` – Telegram webhook; recognised exec
  commands are dispatched and the reply is sent back to the chat.

Requests that abort (an unexpected backend failure) are logged and
produce no chat reply.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional

import httpx
from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse

from ..backends import PestoBackend, PistonBackend
from ..commands import command_token, parse_exec_command
from ..config import Config
from ..dispatcher import ExecDispatcher
from ..models import ExecBody, ExecReplyBody, TelegramUpdate
from ..outcome import ExecRequest
from ..telegram import TelegramAPIError, TelegramSender


logger = logging.getLogger("execrelay")

if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter("[execrelay] %(levelname)s - %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)

logger.setLevel(logging.INFO)


config = Config.from_env()

logger.info(
    "Loaded config: pesto_enabled=%s, pesto_url=%s, piston_url=%s, deadline=%ss, output_limit=%s",
    config.pesto_enabled,
    config.pesto_url,
    config.piston_url,
    config.deadline_seconds,
    config.output_limit,
)


def build_dispatcher(cfg: Config, client: httpx.AsyncClient) -> ExecDispatcher:
    """Create the dispatcher with Pesto as primary and Piston as fallback."""
    return ExecDispatcher(
        primary=PestoBackend(client, cfg.pesto_url, cfg.pesto_token),
        secondary=PistonBackend(client, cfg.piston_url),
        output_limit=cfg.output_limit,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with httpx.AsyncClient(timeout=config.http_timeout_seconds) as client:
        app.state.dispatcher = build_dispatcher(config, client)
        app.state.sender = TelegramSender(client, config.telegram_bot_token) if config.telegram_bot_token else None
        yield


app = FastAPI(title="Execution Relay", version="0.1.0", lifespan=lifespan)


def _deadline() -> float:
    return asyncio.get_running_loop().time() + config.deadline_seconds


@app.middleware("http")
async def authenticate(request, call_next):
    """Middleware to enforce API key authentication on ``/exec``."""
    path = request.url.path
    method = request.method
    client = getattr(request.client, "host", "unknown")

    logger.info("Incoming request: %s %s from %s", method, path, client)

    if path.startswith("/exec") and config.api_key:
        provided_key = request.headers.get("x-api-key")
        if provided_key != config.api_key:
            logger.warning("Invalid API key for %s %s from %s", method, path, client)
            return JSONResponse(status_code=401, content={"detail": "Invalid API key"})

    response = await call_next(request)
    logger.info("Response: %s %s -> %s", method, path, response.status_code)
    return response


@app.get("/health")
async def health() -> Dict[str, str]:
    """Return a simple health check response."""
    return {"status": "ok"}


@app.post("/exec", response_model=ExecReplyBody)
async def exec_code(body: ExecBody, request: Request) -> ExecReplyBody:
    """Dispatch code to the execution backends and return the rendered reply."""
    exec_request = ExecRequest(
        language_tag=body.language,
        trigger_message_id=body.trigger_message_id,
        source_override=body.code,
        replied_source=body.replied_code,
        reply_anchor_message_id=body.reply_to_message_id,
        command_token=body.command or f"/{body.language.lower()}",
    )
    dispatcher: ExecDispatcher = request.app.state.dispatcher
    try:
        reply = await dispatcher.dispatch(exec_request, deadline=_deadline())
    except Exception as exc:
        logger.exception("[/exec] Execution aborted: %s", exc)
        raise HTTPException(status_code=502, detail="Execution aborted")
    return ExecReplyBody(text=reply.text, parse_mode=reply.parse_mode, reply_to_message_id=reply.anchor_message_id)


@app.post("/webhook/telegram")
async def telegram_webhook(
    update: TelegramUpdate,
    request: Request,
    x_telegram_bot_api_secret_token: Optional[str] = Header(default=None),
) -> Dict[str, str]:
    """Receive Telegram updates and answer exec commands.

    Always acknowledges the update so that Telegram does not redeliver it.
    """
    if config.telegram_webhook_secret and x_telegram_bot_api_secret_token != config.telegram_webhook_secret:
        raise HTTPException(status_code=401, detail="Invalid secret token")

    sender: Optional[TelegramSender] = request.app.state.sender
    if sender is None:
        raise HTTPException(status_code=503, detail="Telegram bot token not configured")

    message = update.message
    if message is None or not message.text:
        return {"status": "ok"}

    token = command_token(message)
    if token is None:
        return {"status": "ok"}
    bot_username = None
    if "@" in token:
        try:
            bot_username = await sender.username()
        except (TelegramAPIError, httpx.HTTPError) as exc:
            logger.exception("Bot identity lookup failed for update %s: %s", update.update_id, exc)
            return {"status": "ok"}

    exec_request = parse_exec_command(message, bot_username)
    if exec_request is None:
        return {"status": "ok"}

    dispatcher: ExecDispatcher = request.app.state.dispatcher
    try:
        reply = await dispatcher.dispatch(exec_request, deadline=_deadline())
    except Exception as exc:
        logger.exception("Execution aborted for update %s: %s", update.update_id, exc)
        return {"status": "ok"}

    try:
        await sender.send(reply)
    except (TelegramAPIError, httpx.HTTPError) as exc:
        logger.exception("Sending reply failed for update %s: %s", update.update_id, exc)
    return {"status": "ok"}
