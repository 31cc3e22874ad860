"""Initialization of the Arena Proxy runtime environment."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import httpx

from .config import Config
from .core import Forwarder


@dataclass
class Env:
    config: Optional[Config] = None
    forwarder: Optional[Forwarder] = None


env = Env()


def bootstrap(
    config: Union[Config, str, Path] = "config.toml",
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Env:
    """
    Load the configuration and build the forwarder with its shared HTTP client.
    A custom transport may be passed to route upstream calls elsewhere (tests).
    """
    if not isinstance(config, Config):
        config = Config.load(config)
    env.config = config
    # Timeouts are enforced by the forwarder itself; redirects are relayed to the client
    client = httpx.AsyncClient(transport=transport, timeout=None, follow_redirects=False)
    env.forwarder = Forwarder(config=config, client=client)
    logging.debug(
        f"Bootstrapped: upstream={config.upstream_origin}, prefix={config.routing_prefix}, "
        f"timeout={config.timeout}"
    )
    return env
