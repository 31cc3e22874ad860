import signal
import subprocess
import sys
from typing import Callable, Iterable, Mapping, Union
from urllib.parse import unquote

import httpx
import pytest
import requests
from requests.adapters import HTTPAdapter
from starlette.requests import Request
from starlette.responses import Response, StreamingResponse
from urllib3.util.retry import Retry

from arena_proxy.config import Config
from arena_proxy.core import Forwarder


def wait_for_server(url, timeout=10):
    session = requests.Session()
    session.mount("http://", HTTPAdapter(max_retries=Retry(total=20, backoff_factor=0.05)))
    # Preflights are answered locally, so this does not depend on the upstream
    session.options(url, timeout=timeout)


def start_proxy(config_path: str, port: int):
    proc = subprocess.Popen([sys.executable, "-m", "arena_proxy", "--config", config_path])
    wait_for_server(f"http://127.0.0.1:{port}/")
    return proc


def stop_proxy(proc):
    proc.send_signal(signal.SIGTERM)
    proc.wait()


def make_request(
    method: str = "GET",
    path: str = "/",
    query: str = "",
    headers: Union[Mapping[str, str], Iterable[tuple[str, str]], None] = None,
    body: bytes = b"",
) -> Request:
    """Build a starlette Request as the ASGI server would hand it to the forwarder."""
    if isinstance(headers, Mapping):
        headers = headers.items()
    raw_headers = [
        (name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in headers or []
    ]
    if body and not any(name in (b"content-length", b"transfer-encoding") for name, _ in raw_headers):
        raw_headers.append((b"content-length", str(len(body)).encode()))

    async def receive():
        return {"type": "http.request", "body": body, "more_body": False}

    scope = {
        "type": "http",
        "method": method,
        "scheme": "http",
        "server": ("testserver", 80),
        "root_path": "",
        # Like uvicorn: "path" is percent-decoded, "raw_path" is what the client sent
        "path": unquote(path),
        "raw_path": path.encode(),
        "query_string": query.encode(),
        "headers": raw_headers,
    }
    return Request(scope, receive)


async def read_body(response: Response) -> bytes:
    if isinstance(response, StreamingResponse):
        return b"".join([chunk async for chunk in response.body_iterator])
    return response.body


class UpstreamRecorder:
    """httpx.MockTransport handler that records the requests it receives."""

    def __init__(self, respond: Callable):
        self.respond = respond
        self.requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request):
        self.requests.append(request)
        response = self.respond(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def make_forwarder():
    """Build a forwarder whose upstream is answered by `respond(request)`."""

    def _make(respond: Callable, **config) -> tuple[Forwarder, UpstreamRecorder]:
        upstream = UpstreamRecorder(respond)
        client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))
        return Forwarder(config=Config(**config), client=client), upstream

    return _make


def json_response(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"ok": True})
