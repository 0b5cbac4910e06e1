from __future__ import annotations

import re

ITEM_KEY_PREFIX = "vhost.item["
ITEM_KEY_SUFFIX = "]"

SCENARIO_NAME_PREFIX = "Check index page '"
SCENARIO_NAME_SUFFIX = "'"

SCENARIO_STEP_NAME = "Get page"
SCENARIO_EXPECTED_STATUS = "200"

# Server-side search term for item.get; matches are re-checked by extract_url.
ITEM_KEY_SEARCH = ITEM_KEY_PREFIX[:-1]

_ITEM_KEY_RE = re.compile(re.escape(ITEM_KEY_PREFIX) + r"(.*)" + re.escape(ITEM_KEY_SUFFIX))


def extract_url(key: str) -> str | None:
    """
    Returns the url captured by `vhost.item[<url>]`, or None when the key does not follow it.

    The capture is greedy and verbatim: `vhost.item[a][b]` yields `a][b`.
    """
    m = _ITEM_KEY_RE.fullmatch(key or "")
    if m is None:
        return None
    return m.group(1)


def scenario_name(url: str) -> str:
    return f"{SCENARIO_NAME_PREFIX}{url}{SCENARIO_NAME_SUFFIX}"


def trigger_description(url: str) -> str:
    return f"Site '{url}' is unavailable"


def quote_key_param(value: str) -> str:
    """
    Quotes an item key parameter the way Zabbix expects when it would otherwise be split or misread.
    """
    if any(c in value for c in ',]"') or value.startswith((" ", "[")):
        return '"' + value.replace('"', '\\"') + '"'
    return value


def trigger_expression(host: str, url: str) -> str:
    return f"last(/{host}/web.test.fail[{quote_key_param(scenario_name(url))}])<>0"
