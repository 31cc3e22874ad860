"""
HTTP headers projection for Arena Proxy.
"""

import re
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from typing import Iterable, Mapping, Union

from arena_proxy.base_types import HeaderRule

# Browser-realistic request headers, needed to pass the upstream bot checks
BROWSER_REQUEST_HEADERS: tuple[HeaderRule, ...] = (
    "content-type",
    "authorization",
    "accept",
    "user-agent",
    "accept-language",
    "referer",
    "cookie",
    "sec-ch-ua",
    "sec-ch-ua-mobile",
    "sec-ch-ua-platform",
    "sec-fetch-site",
    "sec-fetch-mode",
    "sec-fetch-dest",
    "upgrade-insecure-requests",
    "openai-*",
    "x-openai-*",
)

MINIMAL_REQUEST_HEADERS: tuple[HeaderRule, ...] = (
    "content-type",
    "authorization",
    "accept",
    "openai-*",
    "x-openai-*",
)

# Upstream -> client
RESPONSE_HEADERS: tuple[HeaderRule, ...] = (
    "content-type",
    "x-ratelimit-*",
    "openai-*",
)

HeadersLike = Union[Mapping[str, str], Iterable[tuple[str, str]]]


def rule_matches(rule: HeaderRule, name: str) -> bool:
    """Test a single allow-list rule against a header name."""
    name = name.lower()
    if isinstance(rule, re.Pattern):
        return rule.search(name) is not None
    rule = rule.lower()
    if "*" in rule or "?" in rule:
        return fnmatchcase(name, rule)
    return rule == name


def _iter_items(headers: HeadersLike) -> Iterable[tuple[str, str]]:
    # starlette / httpx header containers keep repeated headers in multi_items()
    if hasattr(headers, "multi_items"):
        return headers.multi_items()
    if isinstance(headers, Mapping):
        return headers.items()
    return headers


def project_headers(headers: HeadersLike, rules: Iterable[HeaderRule]) -> list[tuple[str, str]]:
    """
    Keep only the headers whose name matches at least one of the rules.
    Values and order are preserved; repeated headers stay separate entries.
    """
    rules = tuple(rules)
    return [
        (name, value)
        for name, value in _iter_items(headers)
        if any(rule_matches(rule, name) for rule in rules)
    ]


@dataclass
class HTTPHeadersProjector:
    """
    Fixed allow-list of header rules applied to one direction of the proxy.
    """

    rules: tuple[HeaderRule, ...] = field(default=BROWSER_REQUEST_HEADERS)

    def __call__(self, headers: HeadersLike) -> list[tuple[str, str]]:
        return project_headers(headers, self.rules)
