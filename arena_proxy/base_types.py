"""Base types used in Arena Proxy."""

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

import httpx
from starlette.requests import Request

HeaderRule = Union[str, re.Pattern]
"""
Header allow-list rule: exact header name, shell-style wildcard ("openai-*")
or compiled regular expression. Names are always compared in lower case.
"""


@dataclass
class RequestContext:  # pylint: disable=too-many-instance-attributes
    """
    Stores information about a single forwarded request/response cycle.
    """

    id: Optional[str] = field(default_factory=lambda: str(uuid.uuid4()))
    http_request: Optional[Request] = field(default=None)
    method: Optional[str] = field(default=None)
    target_url: Optional[str] = field(default=None)
    response: Optional[httpx.Response] = field(default=None)
    error: Optional[Exception] = field(default=None)
    created_at: Optional[datetime] = field(default_factory=datetime.now)
    duration: Optional[float] = field(default=None)

    def to_dict(self) -> dict:
        """Export as dictionary."""
        data = self.__dict__.copy()
        del data["http_request"]
        data["response"] = self.response.status_code if self.response is not None else None
        data["error"] = repr(self.error) if self.error is not None else None
        return data
