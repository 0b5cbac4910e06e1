"""Snapshot retrieval: items, web scenarios and hosts for one pass."""

from __future__ import annotations

from typing import Any, Callable, Protocol, TypeVar

import structlog

from .errors import FetchError, ZabbixApiError
from .models import Host, MonitoringItem, ReconciliationSnapshot, WebScenario
from .naming import ITEM_KEY_SEARCH, SCENARIO_NAME_PREFIX

T = TypeVar("T")


class ApiCaller(Protocol):
    def call(self, method: str, params: Any) -> Any: ...


def _decode_list(method: str, result: Any, decode: Callable[[dict[str, Any]], T]) -> list[T]:
    if not isinstance(result, list):
        raise ZabbixApiError(method, "unexpected result (not a list)")
    out: list[T] = []
    for raw in result:
        if not isinstance(raw, dict):
            raise ZabbixApiError(method, f"unexpected entry {raw!r}")
        try:
            out.append(decode(raw))
        except ValueError as e:
            raise ZabbixApiError(method, str(e)) from e
    return out


def find_items(api: ApiCaller) -> list[MonitoringItem]:
    params = {
        "output": ["hostid", "key_", "name"],
        "search": {"key_": ITEM_KEY_SEARCH},
        "startSearch": True,
    }
    return _decode_list("item.get", api.call("item.get", params), MonitoringItem.from_api)


def find_web_scenarios(api: ApiCaller) -> list[WebScenario]:
    params = {
        "output": ["name"],
        "search": {"name": SCENARIO_NAME_PREFIX},
        "startSearch": True,
    }
    return _decode_list("httptest.get", api.call("httptest.get", params), WebScenario.from_api)


def find_hosts(api: ApiCaller, host_ids: list[str]) -> list[Host]:
    if not host_ids:
        return []
    params = {
        "output": ["hostid", "host"],
        "hostids": list(host_ids),
    }
    return _decode_list("host.get", api.call("host.get", params), Host.from_api)


class ObjectFetcher:
    """Fetches the three collections a reconciliation pass works on."""

    def __init__(self, api: ApiCaller, logger: Any = None):
        self.api = api
        self.log = logger if logger is not None else structlog.get_logger(__name__)

    def fetch_snapshot(self) -> ReconciliationSnapshot:
        """
        Items first, then web scenarios, then the hosts referenced by the items.

        Raises FetchError for the first collection that cannot be retrieved.
        """
        try:
            items = find_items(self.api)
        except ZabbixApiError as e:
            raise FetchError("items", e) from e
        self.log.debug("items have been obtained", count=len(items))

        try:
            web_scenarios = find_web_scenarios(self.api)
        except ZabbixApiError as e:
            raise FetchError("web scenarios", e) from e
        self.log.debug("web scenarios have been obtained", count=len(web_scenarios))

        host_ids = list(dict.fromkeys(item.hostid for item in items))
        try:
            hosts = find_hosts(self.api, host_ids)
        except ZabbixApiError as e:
            raise FetchError("hosts", e) from e
        self.log.debug("hosts have been obtained", requested=len(host_ids), count=len(hosts))

        return ReconciliationSnapshot(items=tuple(items), web_scenarios=tuple(web_scenarios), hosts=tuple(hosts))
