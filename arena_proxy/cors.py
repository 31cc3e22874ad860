"""
CORS policy: preflight replies and decoration of outbound responses.
"""

from typing import Iterable

from pydantic import BaseModel, ConfigDict
from starlette.requests import Request
from starlette.responses import Response


class CorsPolicy(BaseModel):
    """
    Fixed set of CORS response headers attached to every reply.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    allow_origin: str = "*"
    allow_methods: str = "GET, POST, PUT, DELETE, OPTIONS"
    allow_headers: str = (
        "Content-Type, Authorization, Accept, X-Requested-With, "
        "OpenAI-Organization, OpenAI-Project"
    )
    expose_headers: str = (
        "content-type, x-ratelimit-limit, x-ratelimit-remaining, x-ratelimit-reset, "
        "openai-model, openai-processing-ms"
    )
    max_age: int | None = 86400
    # Mirror Access-Control-Request-* of the preflight into the reply
    echo_request_headers: bool = True

    def headers(self) -> dict[str, str]:
        headers = {
            "access-control-allow-origin": self.allow_origin,
            "access-control-allow-methods": self.allow_methods,
            "access-control-allow-headers": self.allow_headers,
            "access-control-expose-headers": self.expose_headers,
        }
        if self.max_age is not None:
            headers["access-control-max-age"] = str(self.max_age)
        return headers


def is_preflight(request: Request) -> bool:
    return request.method.upper() == "OPTIONS"


def preflight_response(request: Request, policy: CorsPolicy) -> Response:
    """
    Empty 204 reply to a CORS preflight.
    When enabled, the requested method / headers are echoed back so the browser
    permits exactly the follow-up request it announced.
    """
    headers = policy.headers()
    if policy.echo_request_headers:
        if req_method := request.headers.get("access-control-request-method"):
            headers["access-control-allow-methods"] = req_method
        if req_headers := request.headers.get("access-control-request-headers"):
            headers["access-control-allow-headers"] = req_headers
    return Response(status_code=204, headers=headers)


def decorate(headers: Iterable[tuple[str, str]], policy: CorsPolicy) -> list[tuple[str, str]]:
    """Merge the policy headers into outbound headers; policy values win on name clashes."""
    cors = policy.headers()
    return [(k, v) for k, v in headers if k.lower() not in cors] + list(cors.items())
