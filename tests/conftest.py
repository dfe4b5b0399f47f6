"""Shared fixtures.

The remote services are replaced by an ``httpx.MockTransport`` whose
handler is a :class:`FakeServices` instance.  Tests script the Pesto and
Piston answers and inspect the requests that were made.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional, Union

import httpx
import pytest
import pytest_asyncio

from execrelay.backends import PestoBackend, PistonBackend
from execrelay.dispatcher import ExecDispatcher

PESTO_URL = "https://pesto.test"
PISTON_URL = "https://piston.test"
TELEGRAM_URL = "https://telegram.test"

Answer = Union[httpx.Response, BaseException, Callable[[httpx.Request], Any]]


def pesto_ok(stdout: str = "", stderr: str = "", exit_code: int = 0, compile: Optional[Dict[str, Any]] = None) -> httpx.Response:
    body: Dict[str, Any] = {
        "language": "Python",
        "version": "3.10",
        "runtime": {"stdout": stdout, "stderr": stderr, "output": stdout + stderr, "exitCode": exit_code},
    }
    if compile is not None:
        body["compile"] = compile
    return httpx.Response(200, json=body)


def piston_ok(stdout: str = "", stderr: str = "", code: Optional[int] = 0, compile: Optional[Dict[str, Any]] = None) -> httpx.Response:
    body: Dict[str, Any] = {
        "language": "python",
        "version": "3.10.0",
        "run": {"stdout": stdout, "stderr": stderr, "output": stdout + stderr, "code": code, "signal": None},
    }
    if compile is not None:
        body["compile"] = compile
    return httpx.Response(200, json=body)


class FakeServices:
    """Request handler standing in for Pesto, Piston and the Bot API."""

    def __init__(self) -> None:
        self.pesto: Optional[Answer] = None
        self.piston: Optional[Answer] = None
        self.telegram: Dict[str, Any] = {}
        self.requests: List[httpx.Request] = []

    def calls(self, host: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]

    def bodies(self, host: str) -> List[Dict[str, Any]]:
        return [json.loads(r.content) for r in self.calls(host)]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        if host == "pesto.test":
            answer = self.pesto
        elif host == "piston.test":
            answer = self.piston
        elif host == "telegram.test":
            method = request.url.path.rsplit("/", 1)[-1]
            result = self.telegram.get(method, True)
            if isinstance(result, httpx.Response):
                return result
            return httpx.Response(200, json={"ok": True, "result": result})
        else:
            raise AssertionError(f"Unexpected request to {request.url}")
        if answer is None:
            raise AssertionError(f"No scripted answer for {host}")
        if isinstance(answer, BaseException):
            raise answer
        if callable(answer):
            answer = await answer(request)
        return answer


@pytest.fixture
def services() -> FakeServices:
    return FakeServices()


@pytest_asyncio.fixture
async def http_client(services):
    async with httpx.AsyncClient(transport=httpx.MockTransport(services)) as client:
        yield client


@pytest.fixture
def dispatcher(http_client) -> ExecDispatcher:
    return ExecDispatcher(
        primary=PestoBackend(http_client, PESTO_URL, "secret"),
        secondary=PistonBackend(http_client, PISTON_URL),
    )
