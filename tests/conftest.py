"""
tests/conftest.py
=================
Shared fixtures: a fake range endpoint on httpx.MockTransport and
scriptable oracles. Nothing here touches the network.
"""
import asyncio
import hashlib
from typing import Dict, List, Optional

import httpx
import pytest

from pwcheck.pwned import NOT_FOUND


def split_sha1(password: str):
    sha = hashlib.sha1(password.encode("utf-8")).hexdigest().upper()
    return sha[:5], sha[5:]


class RangeServer:
    """Answers /range/{prefix} from a dict and records every request."""

    def __init__(self):
        self.bodies: Dict[str, str] = {}
        self.status = 200
        self.error: Optional[Exception] = None
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        prefix = request.url.path.rsplit("/", 1)[-1].upper()
        return httpx.Response(self.status, text=self.bodies.get(prefix, ""))

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    split = staticmethod(split_sha1)

    def add(self, password: str, count: int = 1) -> None:
        prefix, suffix = split_sha1(password)
        rows = self.bodies.get(prefix, "")
        self.bodies[prefix] = rows + f"{suffix}:{count}\r\n"


class InstantOracle:
    """Resolves immediately; verdicts looked up by password."""

    def __init__(self, verdicts=None):
        self.verdicts = verdicts or {}
        self.calls: List[str] = []

    async def is_compromised(self, password):
        self.calls.append(password)
        return self.verdicts.get(password, NOT_FOUND)


class GatedOracle(InstantOracle):
    """Each lookup blocks until the test releases that password."""

    def __init__(self, verdicts=None):
        super().__init__(verdicts)
        self._gates: Dict[str, asyncio.Event] = {}

    def _gate(self, password: str) -> asyncio.Event:
        return self._gates.setdefault(password, asyncio.Event())

    def release(self, password: str) -> None:
        self._gate(password).set()

    async def is_compromised(self, password):
        self.calls.append(password)
        await self._gate(password).wait()
        return self.verdicts.get(password, NOT_FOUND)


@pytest.fixture
def range_server():
    return RangeServer()


@pytest.fixture
def instant_oracle():
    return InstantOracle()


@pytest.fixture
def gated_oracle():
    return GatedOracle()
