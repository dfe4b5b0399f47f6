"""Render outcomes as Telegram HTML messages.

User code and backend output are always entity-escaped before being
embedded in a ``<code>`` block; the messages are sent with
``parse_mode=HTML``.
"""

from __future__ import annotations

import html

from .outcome import (
    CompileError,
    EngineFault,
    ExecRequest,
    Outcome,
    Reply,
    RuntimeFailure,
    Success,
    TimedOut,
    TooLong,
)

TOO_LONG_TEXT = "Output is too long."
TIMEOUT_TEXT = "Timeout exceeded."
UNKNOWN_ERROR_TEXT = "Unknown error"
USAGE_TEMPLATE = "Untuk mengeksekusi program, silakan ketik {command} diikuti code."


def code_block(text: str) -> str:
    return f"<code>{html.escape(text)}</code>"


def render_text(outcome: Outcome, source: str) -> str:
    """Return the message body for ``outcome``."""
    if isinstance(outcome, (CompileError, RuntimeFailure)):
        return code_block(outcome.stderr)
    if isinstance(outcome, TooLong):
        return TOO_LONG_TEXT
    if isinstance(outcome, Success):
        return f"Code:\n{code_block(source)}\n\nOutput:\n{code_block(outcome.stdout)}"
    if isinstance(outcome, EngineFault):
        return code_block(outcome.message or UNKNOWN_ERROR_TEXT)
    if isinstance(outcome, TimedOut):
        return TIMEOUT_TEXT
    raise TypeError(f"Unknown outcome: {outcome!r}")


def anchor_for(outcome: Outcome, request: ExecRequest) -> int:
    """Pick the message id the reply is threaded under.

    Code taken from a replied-to message anchors successful runs and
    engine faults at that message.  Every other outcome, including
    timeouts, stays on the triggering command.
    """
    if (
        request.from_reply
        and request.reply_anchor_message_id is not None
        and isinstance(outcome, (Success, EngineFault))
    ):
        return request.reply_anchor_message_id
    return request.trigger_message_id


def render(outcome: Outcome, request: ExecRequest) -> Reply:
    source = request.source or ""
    return Reply(
        text=render_text(outcome, source),
        anchor_message_id=anchor_for(outcome, request),
        chat_id=request.chat_id,
    )


def usage_reply(request: ExecRequest) -> Reply:
    """Reply sent when the command carries no code and replies to nothing."""
    return Reply(
        text=USAGE_TEMPLATE.format(command=html.escape(request.command_token)),
        anchor_message_id=request.trigger_message_id,
        chat_id=request.chat_id,
    )
