"""
# Minimal forwarding configuration

Permissive variant: forwards only content-type, authorization, accept and
OpenAI headers, imposes no timeout of its own and does not look for the
upstream challenge page.

Run with:
```bash
arena-proxy --config examples/minimal_config.py
```
"""

import os
import re

from dotenv import load_dotenv

from arena_proxy.config import Config, HeaderPreset

load_dotenv(".env")

config = Config(
    port=int(os.getenv("ARENA_PROXY_PORT", "8000")),
    header_preset=HeaderPreset.MINIMAL,
    response_headers=["content-type", re.compile(r"^x-ratelimit-"), re.compile(r"^openai-")],
    timeout=None,
    challenge_markers=[],
)
