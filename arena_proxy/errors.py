from starlette.responses import JSONResponse


class UpstreamError(Exception):
    """
    Failure while building, sending or inspecting the upstream request.
    """

    # The reason is logged but never exposed: every upstream failure
    # renders as the same response body.

    def __init__(
        self,
        message: str = "",
        status_code: int = 502,
        code: str = "upstream_error",
        headers: dict[str, str] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.headers = headers or {}

    def to_response(self, headers: dict[str, str] | None = None) -> JSONResponse:
        """Render as the JSON error response, with extra headers (e.g. CORS) attached."""
        return JSONResponse(
            status_code=self.status_code,
            headers={**self.headers, **(headers or {})},
            content={"error": self.code},
        )


class UpstreamTimeout(UpstreamError):
    """Upstream did not answer within the configured timeout."""
