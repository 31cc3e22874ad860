"""Common usage utility functions."""

import logging
import os
from typing import Any

ENV_PREFIX = "env:"


def replace_env_strings_recursive(data: Any) -> Any:
    """
    Replace "env:VAR_NAME" strings with environment variable values,
    walking nested dicts and lists.
    Missing variables resolve to an empty string.
    """
    if isinstance(data, dict):
        return {k: replace_env_strings_recursive(v) for k, v in data.items()}
    if isinstance(data, list):
        return [replace_env_strings_recursive(i) for i in data]
    if isinstance(data, str) and data.startswith(ENV_PREFIX):
        env_var_name = data[len(ENV_PREFIX):]
        value = os.environ.get(env_var_name)
        if value is None:
            logging.warning(f"Environment variable '{env_var_name}' not found")
            return ""
        return value
    return data
