"""Snapshot entities read from the Zabbix API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .naming import extract_url, scenario_name, trigger_description


def _require_str(raw: dict[str, Any], key: str, kind: str) -> str:
    value = raw.get(key)
    if value is None:
        raise ValueError(f"{kind} object is missing {key!r}: {raw!r}")
    return str(value)


@dataclass(frozen=True)
class MonitoringItem:
    hostid: str
    key: str
    name: str = ""

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "MonitoringItem":
        return cls(
            hostid=_require_str(raw, "hostid", "item"),
            key=_require_str(raw, "key_", "item"),
            name=str(raw.get("name") or ""),
        )


@dataclass(frozen=True)
class WebScenario:
    name: str

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "WebScenario":
        return cls(name=_require_str(raw, "name", "web scenario"))


@dataclass(frozen=True)
class Host:
    hostid: str
    host: str

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "Host":
        return cls(hostid=_require_str(raw, "hostid", "host"), host=_require_str(raw, "host", "host"))


@dataclass(frozen=True)
class ReconciliationSnapshot:
    """Items, web scenarios and hosts fetched once for a single pass."""

    items: tuple[MonitoringItem, ...] = ()
    web_scenarios: tuple[WebScenario, ...] = ()
    hosts: tuple[Host, ...] = ()
    _scenario_names: frozenset[str] = field(init=False, repr=False, compare=False)
    _hosts_by_id: dict[str, Host] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_scenario_names", frozenset(s.name for s in self.web_scenarios))
        hosts_by_id: dict[str, Host] = {}
        for host in self.hosts:
            hosts_by_id.setdefault(host.hostid, host)
        object.__setattr__(self, "_hosts_by_id", hosts_by_id)

    def has_scenario(self, name: str) -> bool:
        return name in self._scenario_names

    def find_host(self, hostid: str) -> Host | None:
        return self._hosts_by_id.get(hostid)


@dataclass(frozen=True)
class DerivedTarget:
    url: str
    scenario_name: str
    trigger_description: str

    @classmethod
    def for_item(cls, item: MonitoringItem) -> "DerivedTarget | None":
        url = extract_url(item.key)
        if url is None:
            return None
        return cls(url=url, scenario_name=scenario_name(url), trigger_description=trigger_description(url))
