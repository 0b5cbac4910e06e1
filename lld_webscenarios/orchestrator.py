"""Drives one pass: login, fetch the snapshot, reconcile, aggregate."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

import httpx
import structlog

from .api import ZabbixApi
from .config import ZabbixConfig
from .errors import AuthenticationError, FetchError
from .fetcher import ObjectFetcher
from .reconciler import ItemResult, Reconciler, has_errors

SUCCESS_EXIT_CODE = 0
ERROR_EXIT_CODE = 1


class RunOutcome(str, Enum):
    SUCCESS = "success"
    CONFIG_FAILED = "config_failed"
    AUTH_FAILED = "auth_failed"
    FETCH_FAILED = "fetch_failed"
    ITEM_ERRORS = "item_errors"

    @property
    def exit_code(self) -> int:
        return SUCCESS_EXIT_CODE if self is RunOutcome.SUCCESS else ERROR_EXIT_CODE


@dataclass(frozen=True)
class RunReport:
    outcome: RunOutcome
    results: tuple[ItemResult, ...] = ()

    @property
    def exit_code(self) -> int:
        return self.outcome.exit_code


class SessionApi(Protocol):
    def login(self, username: str, password: str) -> str: ...

    def call(self, method: str, params: Any) -> Any: ...


class Orchestrator:
    def __init__(self, api: SessionApi, username: str, password: str, logger: Any = None):
        self.api = api
        self.username = username
        self.password = password
        self.log = logger if logger is not None else structlog.get_logger(__name__)

    def run(self) -> RunReport:
        try:
            self.api.login(self.username, self.password)
        except AuthenticationError as e:
            self.log.error("unable to login", error=str(e))
            return RunReport(RunOutcome.AUTH_FAILED)

        try:
            snapshot = ObjectFetcher(self.api, logger=self.log).fetch_snapshot()
        except FetchError as e:
            self.log.error("unable to get zabbix objects", collection=e.collection, error=str(e.cause))
            return RunReport(RunOutcome.FETCH_FAILED)

        results = tuple(Reconciler(self.api, logger=self.log).reconcile(snapshot))
        if has_errors(results):
            failed = sum(1 for r in results if not r.ok)
            self.log.error("some items could not be reconciled", failed=failed, total=len(results))
            return RunReport(RunOutcome.ITEM_ERRORS, results)

        self.log.info("web scenarios and triggers have been created", total=len(results))
        return RunReport(RunOutcome.SUCCESS, results)


def run_pass(
    config: ZabbixConfig,
    *,
    transport: httpx.BaseTransport | None = None,
    logger: Any = None,
) -> RunReport:
    """Run a full pass against the configured endpoint with a fresh HTTP client."""
    with httpx.Client(transport=transport) as client:
        api = ZabbixApi(
            client,
            config.api_endpoint,
            timeout=config.request_timeout_seconds,
            logger=logger,
        )
        return Orchestrator(api, config.username, config.password, logger=logger).run()
