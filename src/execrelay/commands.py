"""Translate Telegram command messages into :class:`ExecRequest` values.

Only messages that start with a ``bot_command`` entity naming one of the
execution commands are recognised.  ``/cmd@name`` is accepted when
``name`` is this bot's username.
"""

from __future__ import annotations

from typing import Dict, Optional

from .models import TelegramMessage
from .outcome import ExecRequest

_SAME_NAME = (
    "c",
    "clojure",
    "crystal",
    "dart",
    "elixir",
    "go",
    "java",
    "kotlin",
    "lua",
    "pascal",
    "php",
    "python",
    "ruby",
    "rust",
    "scala",
    "swift",
    "julia",
)

COMMAND_LANGUAGES: Dict[str, str] = {f"/{name}": name for name in _SAME_NAME}
COMMAND_LANGUAGES.update(
    {
        "/sqlite3": "SQLite3",
        "/commonlisp": "CommonLisp",
        "/cpp": "C++",
        "/cs": "csharp.net",
        "/fs": "fsharp.net",
        "/js": "JavaScript",
        "/ts": "TypeScript",
        "/vb": "basic.net",
    }
)


def command_token(message: TelegramMessage) -> Optional[str]:
    """Return the leading bot command as typed, or ``None``."""
    if not message.text or not message.entities:
        return None
    entity = message.entities[0]
    if entity.type != "bot_command" or entity.offset != 0:
        return None
    return message.text[: entity.length]


def parse_exec_command(message: TelegramMessage, bot_username: Optional[str]) -> Optional[ExecRequest]:
    """Return the request for ``message``, or ``None`` if it is not an exec command."""
    token = command_token(message)
    if token is None:
        return None

    command = token
    if "@" in command:
        command, _, target = command.partition("@")
        if bot_username is None or target.lower() != bot_username.lower():
            return None

    language = COMMAND_LANGUAGES.get(command.lower())
    if language is None:
        return None

    replied = message.reply_to_message
    return ExecRequest(
        language_tag=language,
        trigger_message_id=message.message_id,
        source_override=message.text[len(token) :].strip(),
        replied_source=replied.text if replied is not None else None,
        reply_anchor_message_id=replied.message_id if replied is not None else None,
        chat_id=message.chat.id,
        command_token=token.strip(),
    )
