"""
Core request forwarding logic of Arena Proxy.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field

import httpx
from starlette.background import BackgroundTask
from starlette.requests import Request
from starlette.responses import Response, StreamingResponse

from .base_types import RequestContext
from .config import Config
from .cors import decorate, is_preflight, preflight_response
from .errors import UpstreamError, UpstreamTimeout
from .handlers import ChallengeDetector, HTTPHeadersProjector

logger = logging.getLogger(__name__)

# Methods that must never carry a request body upstream
BODYLESS_METHODS = ("GET", "HEAD")


def build_target_url(path: str, query: str, origin: str, prefix: str = "") -> str:
    """
    Map an inbound path (percent-encoded, as sent by the client) and query string
    onto the upstream origin. Existing escapes are kept as they are.
    The routing prefix is stripped when present, an empty remainder becomes "/".
    Only path and query come from the request; scheme and host are always the origin's.
    """
    if prefix and path.startswith(prefix):
        path = path[len(prefix):] or "/"
    if not path.startswith("/"):
        path = "/" + path
    url = str(httpx.URL(origin).copy_with(path=path))
    if query:
        url = f"{url}?{query}"
    # Raises httpx.InvalidURL for anything that cannot be sent
    return str(httpx.URL(url))


def raw_request_path(request: Request) -> str:
    """
    Path exactly as the client sent it, still percent-encoded.
    Falls back to the decoded path when the server does not provide raw_path.
    """
    raw_path = request.scope.get("raw_path")
    if raw_path:
        return raw_path.decode("latin-1")
    return request.url.path


def has_request_body(request: Request) -> bool:
    if "transfer-encoding" in request.headers:
        return True
    try:
        return int(request.headers.get("content-length") or 0) > 0
    except ValueError:
        return False


@dataclass
class Forwarder:
    """
    Forwards a single inbound request to the configured upstream origin and
    builds the reply for the client:
    CORS preflight reply, relayed upstream response, 307 redirect when the
    upstream answered with its challenge page, or a 502 JSON error.
    Never raises to the caller.
    """

    config: Config
    client: httpx.AsyncClient
    request_headers: HTTPHeadersProjector = field(init=False)
    response_headers: HTTPHeadersProjector = field(init=False)
    detect_challenge: ChallengeDetector = field(init=False)

    def __post_init__(self):
        self.request_headers = HTTPHeadersProjector(self.config.request_header_rules)
        self.response_headers = HTTPHeadersProjector(tuple(self.config.response_headers))
        self.detect_challenge = ChallengeDetector(tuple(self.config.challenge_markers or ()))

    async def __call__(self, request: Request) -> Response:
        cors = self.config.cors
        if is_preflight(request):
            return preflight_response(request, cors)

        ctx = RequestContext(http_request=request, method=request.method.upper())
        path = raw_request_path(request)
        started = time.monotonic()
        try:
            ctx.target_url = build_target_url(
                path,
                request.scope.get("query_string", b"").decode("latin-1"),
                self.config.upstream_origin,
                self.config.routing_prefix,
            )
            logger.debug(f"Forwarding {ctx.method} {path} -> {ctx.target_url}")
            is_challenge = await self._with_timeout(self._forward_and_inspect(ctx))
        except Exception as e:  # pylint: disable=broad-exception-caught
            ctx.error = e
            logger.error(
                f"Upstream request {ctx.method} {ctx.target_url or path} failed: {e!r}"
            )
            error = e if isinstance(e, UpstreamError) else UpstreamError(str(e))
            return error.to_response(cors.headers())
        finally:
            ctx.duration = time.monotonic() - started

        upstream = ctx.response
        if is_challenge:
            logger.warning(f"Upstream challenge page detected, redirecting to {ctx.target_url}")
            await upstream.aclose()
            return Response(
                status_code=307,
                headers={**cors.headers(), "location": ctx.target_url},
            )

        if upstream.is_stream_consumed:
            # Body was already read during inspection, reuse the buffered copy
            relay = Response(content=upstream.content, status_code=upstream.status_code)
        else:
            relay = StreamingResponse(
                upstream.aiter_bytes(),
                status_code=upstream.status_code,
                background=BackgroundTask(upstream.aclose),
            )
        for name, value in decorate(self.response_headers(upstream.headers), cors):
            relay.headers.append(name, value)
        logger.debug(f"Relaying upstream response: {ctx.to_dict()}")
        return relay

    async def _with_timeout(self, coro):
        if self.config.timeout is None:
            return await coro
        try:
            return await asyncio.wait_for(coro, timeout=self.config.timeout)
        except asyncio.TimeoutError as e:
            raise UpstreamTimeout(
                f"No upstream response within {self.config.timeout} seconds"
            ) from e

    async def _forward_and_inspect(self, ctx: RequestContext) -> bool:
        """
        Send the request upstream and report whether the response is a challenge page.
        The upstream response is left open in ctx.response unless an error occurs.
        """
        request = ctx.http_request
        upstream_request = self.client.build_request(
            ctx.method,
            ctx.target_url,
            headers=self.request_headers(request.headers),
            content=(
                request.stream()
                if ctx.method not in BODYLESS_METHODS and has_request_body(request)
                else None
            ),
        )
        ctx.response = await self.client.send(upstream_request, stream=True)
        try:
            if self.detect_challenge and self.detect_challenge.is_html(
                ctx.response.headers.get("content-type")
            ):
                await ctx.response.aread()
                return self.detect_challenge(ctx.response.text)
            return False
        except BaseException:
            await ctx.response.aclose()
            raise

    async def aclose(self) -> None:
        await self.client.aclose()
