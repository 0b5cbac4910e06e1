"""Minimal JSON-RPC client for the Zabbix API."""

from __future__ import annotations

import itertools
from typing import Any

import httpx
import structlog

from .errors import AuthenticationError, ZabbixApiError

JSONRPC_VERSION = "2.0"
LOGIN_METHOD = "user.login"


def build_request(method: str, params: Any, *, request_id: int) -> dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "method": method,
        "params": params,
        "id": request_id,
    }


def build_headers(method: str, auth: str | None) -> dict[str, str]:
    """Bearer auth (Zabbix 6.4+); the login call itself goes out unauthenticated."""
    headers = {"Content-Type": "application/json-rpc"}
    if auth is not None and method != LOGIN_METHOD:
        headers["Authorization"] = f"Bearer {auth}"
    return headers


def parse_response(method: str, data: Any) -> Any:
    """
    Returns the `result` of a decoded JSON-RPC response, raising ZabbixApiError for `error` replies.
    """
    if not isinstance(data, dict):
        raise ZabbixApiError(method, "unexpected response (not a JSON object)")
    error = data.get("error")
    if error is not None:
        if isinstance(error, dict):
            message = str(error.get("message") or "API error")
            details = error.get("data")
            if details:
                message = f"{message} {details}"
            raise ZabbixApiError(method, message, code=error.get("code"), data=details)
        raise ZabbixApiError(method, f"API error {error!r}")
    if "result" not in data:
        raise ZabbixApiError(method, "response has neither result nor error")
    return data["result"]


def redact_token(token: str | None) -> str:
    s = token or ""
    if len(s) <= 8:
        return "<redacted>"
    return f"{s[:4]}...{s[-4:]}"


class ZabbixApi:
    """One authenticated JSON-RPC session against a Zabbix frontend."""

    def __init__(
        self,
        client: httpx.Client,
        api_endpoint: str,
        *,
        timeout: float = 30.0,
        logger: Any = None,
    ):
        self.client = client
        self.api_endpoint = api_endpoint
        self.timeout = timeout
        self.auth_token: str | None = None
        self.log = logger if logger is not None else structlog.get_logger(__name__)
        self._ids = itertools.count(1)

    def call(self, method: str, params: Any) -> Any:
        payload = build_request(method, params, request_id=next(self._ids))
        self.log.debug("zabbix api call", method=method)
        try:
            resp = self.client.post(
                self.api_endpoint,
                json=payload,
                headers=build_headers(method, self.auth_token),
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            raise ZabbixApiError(method, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ZabbixApiError(method, f"{type(e).__name__}: {e}") from e
        except httpx.InvalidURL as e:
            raise ZabbixApiError(method, f"invalid endpoint: {e}") from e
        except ValueError as e:
            raise ZabbixApiError(method, "response is not valid JSON") from e
        return parse_response(method, data)

    def login(self, username: str, password: str) -> str:
        try:
            token = self.call(LOGIN_METHOD, {"username": username, "password": password})
        except ZabbixApiError as e:
            raise AuthenticationError(LOGIN_METHOD, e.message, code=e.code, data=e.data) from e
        if not isinstance(token, str) or not token:
            raise AuthenticationError(LOGIN_METHOD, "no auth token in response")
        self.auth_token = token
        self.log.debug("login success", token=redact_token(token))
        return token
