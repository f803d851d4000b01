"""
Library discovery and loading tests.

Covers the platform filename table, path resolution order, and the ctypes
function table, without requiring a real libtdjson.
"""

import ctypes
import json
import types

import pytest

from tdjson import library as tdlib
from tdjson.errors import LibraryLoadError, UnsupportedPlatform
from tdjson.library import (
    Platform,
    TdJsonLibrary,
    current_platform,
    default_library_filename,
    find_tdjson_libraries,
    load_library,
    resolve_library_path,
)


class FakeFunction:
    """Callable standing in for a ctypes foreign function."""

    def __init__(self, result=None):
        self.result = result
        self.calls = []

    def __call__(self, *args):
        self.calls.append(args)
        return self.result


def make_cdll(with_verbosity=True):
    funcs = {
        "td_json_client_create": FakeFunction(0x42),
        "td_json_client_send": FakeFunction(),
        "td_json_client_receive": FakeFunction(b'{"@type":"updateOption"}'),
        "td_json_client_execute": FakeFunction(),
        "td_json_client_destroy": FakeFunction(),
    }
    if with_verbosity:
        funcs["td_set_log_verbosity_level"] = FakeFunction()
    return types.SimpleNamespace(**funcs)


@pytest.mark.parametrize("system, filename", [
    ("Darwin", "libtdjson.dylib"),
    ("Windows", "tdjson.dll"),
    ("Linux", "libtdjson.so"),
])
def test_default_filename_per_platform(system, filename):
    assert default_library_filename(system) == filename


@pytest.mark.parametrize("system", ["FreeBSD", "SunOS", "Java", ""])
def test_unsupported_platform_raises(system):
    assert current_platform(system) is Platform.UNSUPPORTED
    with pytest.raises(UnsupportedPlatform):
        default_library_filename(system)


def test_current_platform_uses_platform_module(monkeypatch):
    monkeypatch.setattr(tdlib.platform, "system", lambda: "Darwin")
    assert current_platform() is Platform.DARWIN
    assert default_library_filename() == "libtdjson.dylib"


def test_resolve_prefers_explicit_path(monkeypatch):
    monkeypatch.setenv("TDJSON_LIBRARY_PATH", "/env/libtdjson.so")
    assert resolve_library_path("/opt/td/libtdjson.so") == "/opt/td/libtdjson.so"


def test_resolve_uses_environment_before_default(monkeypatch):
    monkeypatch.setenv("TDJSON_LIBRARY_PATH", "/env/libtdjson.so")
    assert resolve_library_path() == "/env/libtdjson.so"


def test_resolve_falls_back_to_platform_default(monkeypatch):
    monkeypatch.setattr(tdlib.platform, "system", lambda: "Windows")
    assert resolve_library_path() == "tdjson.dll"


def test_resolve_unsupported_platform_without_path(monkeypatch):
    monkeypatch.setattr(tdlib.platform, "system", lambda: "SunOS")
    with pytest.raises(UnsupportedPlatform):
        resolve_library_path()


def test_find_libraries_orders_and_dedupes(monkeypatch):
    monkeypatch.setattr(tdlib.platform, "system", lambda: "Linux")
    monkeypatch.setenv("TDJSON_LIBRARY_PATH", "libtdjson.so")
    monkeypatch.setattr(tdlib.ctypes.util, "find_library", lambda name: "libtdjson.so.1.8")
    assert find_tdjson_libraries() == ["libtdjson.so", "libtdjson.so.1.8"]


def test_find_libraries_on_unsupported_platform(monkeypatch):
    monkeypatch.setattr(tdlib.platform, "system", lambda: "SunOS")
    monkeypatch.setattr(tdlib.ctypes.util, "find_library", lambda name: None)
    assert find_tdjson_libraries() == []


def test_load_missing_library_raises():
    with pytest.raises(LibraryLoadError) as excinfo:
        load_library("/nonexistent/libtdjson.so")
    assert isinstance(excinfo.value.__cause__, OSError)


def test_load_library_declares_function_table(monkeypatch):
    cdll = make_cdll()
    loaded = []

    def fake_cdll(path):
        loaded.append(path)
        return cdll

    monkeypatch.setattr(tdlib.ctypes, "CDLL", fake_cdll)
    lib = load_library("/opt/td/libtdjson.so")

    assert loaded == ["/opt/td/libtdjson.so"]
    assert lib.path == "/opt/td/libtdjson.so"
    assert cdll.td_json_client_create.restype is ctypes.c_void_p
    assert cdll.td_json_client_send.argtypes == [ctypes.c_void_p, ctypes.c_char_p]
    assert cdll.td_json_client_receive.argtypes == [ctypes.c_void_p, ctypes.c_double]
    assert cdll.td_json_client_receive.restype is ctypes.c_char_p
    assert cdll.td_json_client_execute.restype is ctypes.c_char_p
    assert cdll.td_json_client_destroy.restype is None
    assert cdll.td_set_log_verbosity_level.argtypes == [ctypes.c_int]


def test_missing_symbol_is_link_error():
    cdll = make_cdll()
    del cdll.td_json_client_receive
    with pytest.raises(LibraryLoadError):
        TdJsonLibrary(cdll, "broken")


def test_function_table_forwards_calls():
    cdll = make_cdll()
    lib = TdJsonLibrary(cdll, "fake")

    assert lib.create_client() == 0x42
    lib.send(0x42, b"{}")
    assert lib.receive(0x42, 1) == b'{"@type":"updateOption"}'
    lib.destroy(0x42)

    assert cdll.td_json_client_send.calls == [(0x42, b"{}")]
    assert cdll.td_json_client_receive.calls == [(0x42, 1.0)]
    assert cdll.td_json_client_destroy.calls == [(0x42,)]


def test_verbosity_uses_native_setter():
    cdll = make_cdll()
    TdJsonLibrary(cdll, "fake").set_log_verbosity_level(3)
    assert cdll.td_set_log_verbosity_level.calls == [(3,)]
    assert cdll.td_json_client_execute.calls == []


def test_verbosity_falls_back_to_execute():
    cdll = make_cdll(with_verbosity=False)
    TdJsonLibrary(cdll, "fake").set_log_verbosity_level(2)

    [(handle, data)] = cdll.td_json_client_execute.calls
    assert handle is None
    assert json.loads(data) == {"@type": "setLogVerbosityLevel", "new_verbosity_level": 2}
