"""FastAPI application exposing the forwarder on every path and method."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.responses import Response

from .bootstrap import env

METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@asynccontextmanager
async def lifespan(_app: FastAPI):
    yield
    if env.forwarder:
        await env.forwarder.aclose()


def create_app() -> FastAPI:
    """Create the application; bootstrap() must be called first."""
    if env.forwarder is None:
        raise RuntimeError("Arena Proxy is not bootstrapped: call bootstrap() before create_app()")
    app = FastAPI(
        title="Arena Proxy",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.api_route("/{path:path}", methods=METHODS, include_in_schema=False)
    async def forward(request: Request) -> Response:
        return await env.forwarder(request)

    return app
