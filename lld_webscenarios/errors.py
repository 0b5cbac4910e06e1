"""Exception types raised while syncing web scenarios."""

from __future__ import annotations

from typing import Any


class WebScenarioSyncError(Exception):
    """Base class for every failure raised by this package."""


class ConfigError(WebScenarioSyncError):
    """Configuration file is missing, unreadable or invalid."""


class ZabbixApiError(WebScenarioSyncError):
    """A JSON-RPC call failed at the transport or the API level."""

    def __init__(self, method: str, message: str, *, code: int | None = None, data: Any = None):
        super().__init__(f"{method}: {message}")
        self.method = method
        self.message = message
        self.code = code
        self.data = data


class AuthenticationError(ZabbixApiError):
    """`user.login` was rejected or returned no token."""


class FetchError(WebScenarioSyncError):
    """One of the snapshot collections could not be retrieved."""

    def __init__(self, collection: str, cause: Exception):
        super().__init__(f"unable to get zabbix {collection}: {cause}")
        self.collection = collection
        self.cause = cause
