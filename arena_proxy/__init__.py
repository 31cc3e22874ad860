"""Arena Proxy: forwards HTTP requests to a fixed upstream origin with CORS support."""

from .config import Config
from .core import Forwarder, build_target_url

__all__ = ["Config", "Forwarder", "build_target_url"]
