"""Reduce backend responses to a single :class:`~execrelay.outcome.Outcome`.

Both backends report an optional compile phase and a run phase, each
with captured output and an exit code.  Normalization is a strict
priority chain:

1. compile phase present with a non-zero exit code -> ``CompileError``
   (the run phase may be absent in that case; absent otherwise -> ``EngineFault``)
2. run phase with a non-zero exit code -> ``RuntimeFailure``
3. stdout longer than the limit -> ``TooLong``
4. otherwise -> ``Success``

Lengths are counted in UTF-16 code units, which is what both services
and the Telegram API measure text in.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import singledispatch
from typing import Optional

from .models import PestoCodeResponse, PistonExecuteResult
from .outcome import CompileError, EngineFault, Outcome, RuntimeFailure, Success, TooLong

DEFAULT_OUTPUT_LIMIT = 1000
MISSING_RUN_MESSAGE = "No run result"


@dataclass(frozen=True)
class Phase:
    stdout: str
    stderr: str
    exit_code: int


def utf16_length(text: str) -> int:
    return len(text.encode("utf-16-le")) // 2


@singledispatch
def phases(response) -> tuple[Optional[Phase], Optional[Phase]]:
    raise TypeError(f"Unsupported backend response: {type(response).__name__}")


@phases.register
def _(response: PestoCodeResponse) -> tuple[Optional[Phase], Optional[Phase]]:
    compile_phase = None
    if response.compile is not None:
        compile_phase = Phase(response.compile.stdout, response.compile.stderr, response.compile.exit_code)
    run = response.runtime
    if run is None:
        return compile_phase, None
    return compile_phase, Phase(run.stdout, run.stderr, run.exit_code)


def _piston_code(code: Optional[int]) -> int:
    # Piston reports a null code when the process was killed by a signal.
    return -1 if code is None else code


@phases.register
def _(response: PistonExecuteResult) -> tuple[Optional[Phase], Optional[Phase]]:
    compile_phase = None
    if response.compile is not None:
        compile_phase = Phase(response.compile.stdout, response.compile.stderr, _piston_code(response.compile.code))
    run = response.run
    if run is None:
        return compile_phase, None
    return compile_phase, Phase(run.stdout, run.stderr, _piston_code(run.code))


def normalize(response, output_limit: int = DEFAULT_OUTPUT_LIMIT) -> Outcome:
    """Return the outcome for a Pesto or Piston response."""
    compile_phase, run = phases(response)
    if compile_phase is not None and compile_phase.exit_code != 0:
        return CompileError(compile_phase.stderr)
    if run is None:
        return EngineFault(MISSING_RUN_MESSAGE)
    if run.exit_code != 0:
        return RuntimeFailure(run.stderr)
    if utf16_length(run.stdout) > output_limit:
        return TooLong()
    return Success(run.stdout)
