from __future__ import annotations

import json
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Callable, Union

import pytest

from lld_webscenarios.errors import AuthenticationError, ZabbixApiError

Failure = Union[str, Callable[[dict[str, Any]], Union[str, None]]]


class RecordingLogger:
    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict[str, Any]]] = []

    def _record(self, level: str, event: str, **kw: Any) -> None:
        self.events.append((level, event, kw))

    def debug(self, event: str, **kw: Any) -> None:
        self._record("debug", event, **kw)

    def info(self, event: str, **kw: Any) -> None:
        self._record("info", event, **kw)

    def warning(self, event: str, **kw: Any) -> None:
        self._record("warning", event, **kw)

    def error(self, event: str, **kw: Any) -> None:
        self._record("error", event, **kw)

    def at(self, level: str) -> list[str]:
        return [event for lvl, event, _kw in self.events if lvl == level]


class FakeZabbixApi:
    """In-memory stand-in for ZabbixApi that keeps created scenarios as server state."""

    def __init__(
        self,
        *,
        items: list[dict[str, Any]] | None = None,
        web_scenarios: list[dict[str, Any]] | None = None,
        hosts: list[dict[str, Any]] | None = None,
        fail: dict[str, Failure] | None = None,
        login_error: str | None = None,
    ) -> None:
        self.items = list(items or [])
        self.web_scenarios = list(web_scenarios or [])
        self.hosts = list(hosts or [])
        self.fail = dict(fail or {})
        self.login_error = login_error
        self.calls: list[tuple[str, Any]] = []

    def login(self, username: str, password: str) -> str:
        self.calls.append(("user.login", {"username": username}))
        if self.login_error:
            raise AuthenticationError("user.login", self.login_error)
        return "token"

    def call(self, method: str, params: Any) -> Any:
        self.calls.append((method, params))
        failure = self.fail.get(method)
        if callable(failure):
            failure = failure(params)
        if failure:
            raise ZabbixApiError(method, failure)

        if method == "item.get":
            return [dict(i) for i in self.items]
        if method == "httptest.get":
            return [dict(s) for s in self.web_scenarios]
        if method == "host.get":
            wanted = set(params["hostids"])
            return [dict(h) for h in self.hosts if h["hostid"] in wanted]
        if method == "httptest.create":
            self.web_scenarios.append({"name": params["name"]})
            return {"httptestids": [str(len(self.web_scenarios))]}
        if method == "trigger.create":
            return {"triggerids": ["1"]}
        raise AssertionError(f"unexpected method {method}")

    def calls_to(self, method: str) -> list[Any]:
        return [params for m, params in self.calls if m == method]

    @property
    def write_calls(self) -> list[tuple[str, Any]]:
        return [(m, p) for m, p in self.calls if m.endswith(".create")]


@pytest.fixture
def make_api() -> Callable[..., FakeZabbixApi]:
    return FakeZabbixApi


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


class _FakeZabbixHandler(BaseHTTPRequestHandler):
    username = "admin"
    password = "secret"
    token = "0424bd59b807674191e7d77572075f33"

    # Replaced per test by the fixture.
    state: dict[str, Any] = {}

    def log_message(self, format: str, *args) -> None:  # noqa: A002
        return

    def _send_json(self, status: int, obj: Any) -> None:
        body = json.dumps(obj, ensure_ascii=False).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _error(self, req_id: Any, message: str, data: str) -> None:
        self._send_json(200, {"jsonrpc": "2.0", "error": {"code": -32602, "message": message, "data": data}, "id": req_id})

    def do_POST(self) -> None:  # noqa: N802
        if self.path != "/api_jsonrpc.php":
            self.send_error(404)
            return
        n = int(self.headers.get("Content-Length") or "0")
        raw = self.rfile.read(n) if n > 0 else b"{}"
        payload = json.loads(raw.decode("utf-8"))
        state = type(self).state
        state["requests"].append(payload)
        state["authorization"].append(self.headers.get("Authorization"))

        method = payload.get("method")
        params = payload.get("params") or {}
        req_id = payload.get("id")

        if method in state.get("http_errors", {}):
            self.send_error(state["http_errors"][method])
            return

        if method == "user.login":
            if params.get("username") == self.username and params.get("password") == self.password:
                self._send_json(200, {"jsonrpc": "2.0", "result": self.token, "id": req_id})
            else:
                self._error(req_id, "Invalid params.", "Incorrect user name or password or account is temporarily blocked.")
            return

        if "auth" in payload:
            self._error(req_id, "Invalid parameter \"/\": unexpected parameter \"auth\".", "auth member is not supported")
            return
        if self.headers.get("Authorization") != f"Bearer {self.token}":
            self._error(req_id, "Invalid params.", "Session terminated, re-login, please.")
            return

        if method in state.get("api_errors", {}):
            self._error(req_id, "Invalid params.", state["api_errors"][method])
            return

        if method == "item.get":
            result: Any = state["items"]
        elif method == "httptest.get":
            result = state["web_scenarios"]
        elif method == "host.get":
            wanted = set(params.get("hostids") or [])
            result = [h for h in state["hosts"] if h["hostid"] in wanted]
        elif method == "httptest.create":
            state["web_scenarios"].append({"name": params["name"]})
            result = {"httptestids": [str(len(state["web_scenarios"]))]}
        elif method == "trigger.create":
            result = {"triggerids": ["13491"]}
        else:
            self._send_json(200, {"jsonrpc": "2.0", "error": {"code": -32601, "message": "Method not found.", "data": "Incorrect API \"{0}\".".format(method)}, "id": req_id})
            return
        self._send_json(200, {"jsonrpc": "2.0", "result": result, "id": req_id})


@pytest.fixture
def fake_zabbix() -> dict[str, Any]:
    """Runs a fake Zabbix frontend; the returned dict is its mutable state plus `url`."""
    state: dict[str, Any] = {
        "requests": [],
        "authorization": [],
        "items": [],
        "web_scenarios": [],
        "hosts": [],
        "api_errors": {},
        "http_errors": {},
    }
    _FakeZabbixHandler.state = state
    httpd = HTTPServer(("127.0.0.1", 0), _FakeZabbixHandler)
    host, port = httpd.server_address
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    state["url"] = f"http://{host}:{port}/api_jsonrpc.php"
    state["username"] = _FakeZabbixHandler.username
    state["password"] = _FakeZabbixHandler.password
    state["token"] = _FakeZabbixHandler.token
    try:
        yield state
    finally:
        httpd.shutdown()
        thread.join(timeout=5)
        httpd.server_close()
