"""
Shared fixtures: an in-process stand-in for the tdjson native library.
"""

import json
import time
from collections import deque

import pytest


class FakeTdJsonLibrary:
    """
    Loopback implementation of the TdJsonLibrary interface.

    Every sent request is queued back unchanged for receive(), and execute()
    answers only the request types listed in sync_types.
    """

    path = "fake-tdjson"

    def __init__(self, sync_types=("getTextEntities", "setLogVerbosityLevel")):
        self.sync_types = set(sync_types)
        self.created = []
        self.destroyed = []
        self.sent = []
        self.log_levels = []
        self.inbox = deque()

    def _check(self, handle):
        assert handle in self.created, "unknown handle"
        assert handle not in self.destroyed, "handle used after destroy"

    def create_client(self):
        handle = 0x1000 + len(self.created)
        self.created.append(handle)
        return handle

    def send(self, handle, data):
        self._check(handle)
        assert isinstance(data, bytes)
        self.sent.append(data)
        self.inbox.append(data)

    def receive(self, handle, timeout):
        self._check(handle)
        if self.inbox:
            return self.inbox.popleft()
        time.sleep(min(timeout, 0.01))
        return None

    def execute(self, handle, data):
        if handle is not None:
            self._check(handle)
        request = json.loads(data.decode("utf-8"))
        if request.get("@type") not in self.sync_types:
            return None
        response = {"@type": "ok"}
        if "@extra" in request:
            response["@extra"] = request["@extra"]
        return json.dumps(response).encode("utf-8")

    def destroy(self, handle):
        self._check(handle)
        self.destroyed.append(handle)

    def set_log_verbosity_level(self, level):
        self.log_levels.append(level)

    def push_raw(self, data: bytes):
        """Queue raw native output for the next receive()."""
        self.inbox.append(data)


@pytest.fixture
def fake_library():
    return FakeTdJsonLibrary()


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_library_env(monkeypatch):
    monkeypatch.delenv("TDJSON_LIBRARY_PATH", raising=False)
