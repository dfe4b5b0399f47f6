"""Value types shared by the dispatcher and its collaborators.

A dispatched request produces at most one :class:`Outcome`.  Outcomes are
plain frozen dataclasses; the formatter switches on their concrete class.
Errors raised by a backend are reduced to an :class:`ErrorClass` by that
backend's own classifier before the dispatcher looks at them.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Union


class ErrorClass(enum.Enum):
    """Classification of an error raised by a backend call."""

    KNOWN_LIMITATION = "known_limitation"
    ENGINE_FAULT = "engine_fault"
    CANCELLED = "cancelled"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class ExecRequest:
    """Immutable request handed over by the chat-command layer.

    Attributes
    ----------
    language_tag: str
        Free-form, case-insensitive language name.
    source_override: str, optional
        Code supplied as the command argument.
    replied_source: str, optional
        Text of the message the command replied to.
    trigger_message_id: int
        Id of the message carrying the command.
    reply_anchor_message_id: int, optional
        Id of the replied-to message, when there is one.
    chat_id: int, optional
        Chat the reply is sent to.
    command_token: str
        The command exactly as typed, echoed in the usage help.
    """

    language_tag: str
    trigger_message_id: int
    source_override: Optional[str] = None
    replied_source: Optional[str] = None
    reply_anchor_message_id: Optional[int] = None
    chat_id: Optional[int] = None
    command_token: str = ""

    @property
    def source(self) -> Optional[str]:
        if self._override:
            return self._override
        if self.replied_source is not None:
            return self.replied_source
        return None

    @property
    def from_reply(self) -> bool:
        return not self._override and self.replied_source is not None

    @property
    def _override(self) -> str:
        # Whitespace-only arguments count as no argument.
        return (self.source_override or "").strip()


@dataclass(frozen=True)
class Reply:
    """A single outgoing chat message."""

    text: str
    anchor_message_id: int
    chat_id: Optional[int] = None
    parse_mode: str = "HTML"


@dataclass(frozen=True)
class CompileError:
    stderr: str


@dataclass(frozen=True)
class RuntimeFailure:
    stderr: str


@dataclass(frozen=True)
class Success:
    stdout: str


@dataclass(frozen=True)
class TooLong:
    pass


@dataclass(frozen=True)
class EngineFault:
    message: Optional[str] = None


@dataclass(frozen=True)
class TimedOut:
    pass


Outcome = Union[CompileError, RuntimeFailure, Success, TooLong, EngineFault, TimedOut]
