"""Pydantic models for request and response bodies.

Three groups of schemas live here:

* the relay's own HTTP API (``/exec``),
* the wire shapes of the two remote execution backends (Pesto and Piston),
* the subset of the Telegram Bot API update object the webhook consumes.

Backend schemas mirror the JSON the services return.  Unknown fields are
ignored so that additive upstream changes do not break parsing.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ExecBody(BaseModel):
    """Request body for ``POST /exec``."""

    language: str = Field(..., min_length=1, description="Language tag, case-insensitive.")
    code: Optional[str] = Field(default=None, description="Inline code argument.")
    replied_code: Optional[str] = Field(
        default=None, description="Text of the replied-to message, used when ``code`` is empty."
    )
    trigger_message_id: int = 0
    reply_to_message_id: Optional[int] = None
    command: Optional[str] = Field(
        default=None, description="Command token as typed, echoed in the usage help."
    )


class ExecReplyBody(BaseModel):
    """Response body for ``POST /exec``."""

    text: str
    parse_mode: str = "HTML"
    reply_to_message_id: int


# Pesto


class PestoPhase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    stdout: str = ""
    stderr: str = ""
    output: str = ""
    exit_code: int = Field(default=0, alias="exitCode")


class PestoCodeResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    language: str = ""
    version: str = ""
    compile: Optional[PestoPhase] = None
    runtime: Optional[PestoPhase] = None


# Piston


class PistonPhase(BaseModel):
    model_config = ConfigDict(extra="ignore")

    stdout: str = ""
    stderr: str = ""
    output: str = ""
    code: Optional[int] = None
    signal: Optional[str] = None


class PistonExecuteResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    language: str = ""
    version: str = ""
    compile: Optional[PistonPhase] = None
    run: Optional[PistonPhase] = None


# Telegram


class TelegramUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    is_bot: bool = False
    first_name: str = ""
    username: Optional[str] = None


class TelegramChat(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    type: str = "private"


class TelegramEntity(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str
    offset: int
    length: int


class TelegramMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    message_id: int
    date: int = 0
    chat: TelegramChat
    from_: Optional[TelegramUser] = Field(default=None, alias="from")
    text: Optional[str] = None
    entities: List[TelegramEntity] = Field(default_factory=list)
    reply_to_message: Optional["TelegramMessage"] = None


class TelegramUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    update_id: int
    message: Optional[TelegramMessage] = None


TelegramMessage.model_rebuild()
