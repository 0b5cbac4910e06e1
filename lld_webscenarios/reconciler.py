"""Per-item reconciliation of web scenarios and their triggers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

import structlog

from .errors import ZabbixApiError
from .fetcher import ApiCaller
from .models import DerivedTarget, Host, MonitoringItem, ReconciliationSnapshot
from .naming import SCENARIO_EXPECTED_STATUS, SCENARIO_STEP_NAME, trigger_expression


class ItemStatus(str, Enum):
    CREATED = "created"
    SKIPPED = "skipped"
    UNSUPPORTED_ITEM_FORMAT = "unsupported_item_format"
    HOST_NOT_FOUND = "host_not_found"
    SCENARIO_CREATE_FAILED = "scenario_create_failed"
    TRIGGER_CREATE_FAILED = "trigger_create_failed"

    @property
    def is_error(self) -> bool:
        return self not in {ItemStatus.CREATED, ItemStatus.SKIPPED}


@dataclass(frozen=True)
class ItemResult:
    item: MonitoringItem
    status: ItemStatus
    target: DerivedTarget | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return not self.status.is_error


def create_web_scenario(api: ApiCaller, target: DerivedTarget, host: Host) -> Any:
    params = {
        "name": target.scenario_name,
        "hostid": host.hostid,
        "steps": [
            {
                "name": SCENARIO_STEP_NAME,
                "url": target.url,
                "status_codes": SCENARIO_EXPECTED_STATUS,
                "no": 1,
            }
        ],
    }
    return api.call("httptest.create", params)


def create_trigger(api: ApiCaller, target: DerivedTarget, host: Host) -> Any:
    params = {
        "description": target.trigger_description,
        "expression": trigger_expression(host.host, target.url),
    }
    return api.call("trigger.create", params)


def has_errors(results: Iterable[ItemResult]) -> bool:
    return any(not r.ok for r in results)


class Reconciler:
    """Creates the missing web scenario and trigger for every convention item in a snapshot."""

    def __init__(self, api: ApiCaller, logger: Any = None):
        self.api = api
        self.log = logger if logger is not None else structlog.get_logger(__name__)

    def reconcile(self, snapshot: ReconciliationSnapshot) -> list[ItemResult]:
        return [self.reconcile_item(snapshot, item) for item in snapshot.items]

    def reconcile_item(self, snapshot: ReconciliationSnapshot, item: MonitoringItem) -> ItemResult:
        self.log.debug("processing item", item=item.name, key=item.key)

        target = DerivedTarget.for_item(item)
        if target is None:
            self.log.error("unsupported item format", key=item.key, hostid=item.hostid)
            return ItemResult(item, ItemStatus.UNSUPPORTED_ITEM_FORMAT, error="unsupported item format")

        if snapshot.has_scenario(target.scenario_name):
            self.log.debug("web scenario has been found, skip", url=target.url)
            return ItemResult(item, ItemStatus.SKIPPED, target)

        self.log.debug("web scenario wasn't found, creating", url=target.url)
        host = snapshot.find_host(item.hostid)
        if host is None:
            self.log.error("host wasn't found", hostid=item.hostid, url=target.url)
            return ItemResult(item, ItemStatus.HOST_NOT_FOUND, target, error=f"host not found: {item.hostid}")

        try:
            create_web_scenario(self.api, target, host)
        except ZabbixApiError as e:
            self.log.error("unable to create web scenario", url=target.url, host=host.host, error=str(e))
            return ItemResult(item, ItemStatus.SCENARIO_CREATE_FAILED, target, error=str(e))
        self.log.info("web scenario has been created", url=target.url, host=host.host)

        try:
            create_trigger(self.api, target, host)
        except ZabbixApiError as e:
            # The scenario stays; the next pass skips this item by scenario name.
            self.log.error("unable to create trigger", url=target.url, host=host.host, error=str(e))
            return ItemResult(item, ItemStatus.TRIGGER_CREATE_FAILED, target, error=str(e))
        self.log.info("trigger has been created", url=target.url, host=host.host)

        return ItemResult(item, ItemStatus.CREATED, target)
