"""
Configuration of Arena Proxy.
Loaded once at startup and shared read-only by every request.
"""

import importlib.util
import json
import tomllib
from enum import Enum
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field

from .base_types import HeaderRule
from .cors import CorsPolicy
from .handlers.challenge import DEFAULT_CHALLENGE_MARKERS
from .handlers.forward_http_headers import (
    BROWSER_REQUEST_HEADERS,
    MINIMAL_REQUEST_HEADERS,
    RESPONSE_HEADERS,
)
from .utils import replace_env_strings_recursive


class HeaderPreset(str, Enum):
    BROWSER = "browser"
    """Forward cookies, user agent and sec-fetch-* headers (browser-realistic)."""
    MINIMAL = "minimal"
    """Forward only content-type, authorization, accept and OpenAI headers."""


HEADER_PRESETS: dict[HeaderPreset, tuple[HeaderRule, ...]] = {
    HeaderPreset.BROWSER: BROWSER_REQUEST_HEADERS,
    HeaderPreset.MINIMAL: MINIMAL_REQUEST_HEADERS,
}


class Config(BaseModel):
    """Arena Proxy configuration."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    upstream_origin: str = "https://lmarena.ai"
    routing_prefix: str = "/api/proxy"

    header_preset: HeaderPreset = HeaderPreset.BROWSER
    request_headers: Optional[list[HeaderRule]] = Field(default=None)
    """Explicit request allow-list; overrides header_preset when set."""
    response_headers: list[HeaderRule] = Field(
        default_factory=lambda: list(RESPONSE_HEADERS)
    )

    cors: CorsPolicy = Field(default_factory=CorsPolicy)

    timeout: Optional[float] = 30.0
    """Seconds to wait for the upstream; None relies on the hosting platform."""
    challenge_markers: Optional[list[str]] = Field(
        default_factory=lambda: list(DEFAULT_CHALLENGE_MARKERS)
    )
    """Phrases identifying the upstream challenge page; empty or None disables detection."""

    @property
    def request_header_rules(self) -> tuple[HeaderRule, ...]:
        if self.request_headers is not None:
            return tuple(self.request_headers)
        return HEADER_PRESETS[self.header_preset]

    @staticmethod
    def _load_python(path: Path) -> "Config":
        spec = importlib.util.spec_from_file_location("arena_proxy_config", path)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        config = getattr(module, "config", None)
        if not isinstance(config, Config):
            raise ValueError(f"{path} must define a 'config' variable of type Config")
        return config

    @staticmethod
    def load(path: Union[str, Path]) -> "Config":
        """
        Load configuration from a .toml, .json, .yml / .yaml or .py file.
        Python configs must define a module-level `config` variable.
        """
        path = Path(path)
        match path.suffix.lower():
            case ".py":
                return Config._load_python(path)
            case ".toml":
                data = tomllib.loads(path.read_text(encoding="utf-8"))
            case ".json":
                data = json.loads(path.read_text(encoding="utf-8"))
            case ".yml" | ".yaml":
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
            case _:
                raise ValueError(f"Unsupported configuration file format: {path.suffix}")
        return Config(**replace_env_strings_recursive(data))
