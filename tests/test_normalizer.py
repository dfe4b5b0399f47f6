"""Normalization and rendering tests."""

from __future__ import annotations

import pytest

from execrelay.formatter import anchor_for, render_text, usage_reply
from execrelay.models import PestoCodeResponse, PistonExecuteResult
from execrelay.normalizer import normalize, utf16_length
from execrelay.outcome import (
    CompileError,
    EngineFault,
    ExecRequest,
    RuntimeFailure,
    Success,
    TimedOut,
    TooLong,
)


def pesto(runtime, compile=None):
    body = {"language": "Go", "version": "1.20", "runtime": runtime}
    if compile is not None:
        body["compile"] = compile
    return PestoCodeResponse.model_validate(body)


def piston(run, compile=None):
    body = {"language": "go", "version": "1.16.2", "run": run}
    if compile is not None:
        body["compile"] = compile
    return PistonExecuteResult.model_validate(body)


def test_compile_error_takes_priority_over_runtime_error():
    response = pesto(
        {"stdout": "", "stderr": "panic", "output": "", "exitCode": 2},
        compile={"stdout": "", "stderr": "syntax error", "output": "", "exitCode": 1},
    )
    assert normalize(response) == CompileError("syntax error")


def test_successful_compile_then_runtime_error():
    response = piston(
        {"stdout": "", "stderr": "panic", "output": "panic", "code": 2},
        compile={"stdout": "", "stderr": "", "output": "", "code": 0},
    )
    assert normalize(response) == RuntimeFailure("panic")


def test_killed_process_counts_as_runtime_error():
    response = piston({"stdout": "", "stderr": "", "output": "", "code": None, "signal": "SIGKILL"})
    assert normalize(response) == RuntimeFailure("")


def test_runtime_error_takes_priority_over_length():
    response = pesto({"stdout": "x" * 5000, "stderr": "oops", "output": "", "exitCode": 1})
    assert normalize(response) == RuntimeFailure("oops")


@pytest.mark.parametrize("length,expected", [(1000, False), (1001, True)])
def test_length_cap(length, expected):
    outcome = normalize(pesto({"stdout": "a" * length, "stderr": "", "output": "", "exitCode": 0}))
    assert isinstance(outcome, TooLong) is expected


def test_length_counted_in_utf16_units():
    # Each emoji is a surrogate pair.
    stdout = "\U0001F600" * 501
    assert len(stdout) == 501
    assert utf16_length(stdout) == 1002
    assert normalize(piston({"stdout": stdout, "stderr": "", "output": "", "code": 0})) == TooLong()


def test_custom_limit():
    response = piston({"stdout": "hello", "stderr": "", "output": "", "code": 0})
    assert normalize(response, output_limit=4) == TooLong()
    assert normalize(response, output_limit=5) == Success("hello")


def test_unknown_response_type():
    with pytest.raises(TypeError):
        normalize({"run": {}})


def test_render_escapes_html():
    assert render_text(RuntimeFailure("a < b && c > d"), "") == "<code>a &lt; b &amp;&amp; c &gt; d</code>"
    assert render_text(Success("<b>"), "print('<b>')") == (
        "Code:\n<code>print(&#x27;&lt;b&gt;&#x27;)</code>\n\nOutput:\n<code>&lt;b&gt;</code>"
    )


def test_render_fixed_texts():
    assert render_text(TooLong(), "x") == "Output is too long."
    assert render_text(TimedOut(), "x") == "Timeout exceeded."
    assert render_text(EngineFault(None), "x") == "<code>Unknown error</code>"
    assert render_text(EngineFault("boom"), "x") == "<code>boom</code>"


def test_anchor_for_argument_source_is_trigger():
    request = ExecRequest(language_tag="go", trigger_message_id=5, source_override="x", replied_source="y", reply_anchor_message_id=3)
    for outcome in (Success("1"), EngineFault("e"), TimedOut(), TooLong(), CompileError("c")):
        assert anchor_for(outcome, request) == 5


def test_anchor_for_replied_source():
    request = ExecRequest(language_tag="go", trigger_message_id=5, source_override="", replied_source="y", reply_anchor_message_id=3)
    assert anchor_for(Success("1"), request) == 3
    assert anchor_for(EngineFault("e"), request) == 3
    assert anchor_for(TimedOut(), request) == 5
    assert anchor_for(TooLong(), request) == 5
    assert anchor_for(RuntimeFailure("r"), request) == 5


def test_usage_reply_echoes_command():
    request = ExecRequest(language_tag="go", trigger_message_id=5, command_token="/go")
    reply = usage_reply(request)
    assert reply.text == "Untuk mengeksekusi program, silakan ketik /go diikuti code."
    assert reply.anchor_message_id == 5


def test_compile_error_without_run_phase():
    response = piston(None, compile={"stdout": "", "stderr": "main.c:1: error", "output": "", "code": 1})
    assert normalize(response) == CompileError("main.c:1: error")


def test_missing_run_phase_after_clean_compile():
    response = pesto(None, compile={"stdout": "", "stderr": "", "output": "", "exitCode": 0})
    assert normalize(response) == EngineFault("No run result")


def test_whitespace_override_is_not_source():
    assert ExecRequest(language_tag="go", trigger_message_id=1, source_override=" \t").source is None
    request = ExecRequest(language_tag="go", trigger_message_id=1, source_override="  x = 1 ", replied_source="y")
    assert request.source == "x = 1"
    assert not request.from_reply
