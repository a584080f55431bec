"""
Utility functions for the gitolite bridge
"""
import os
import re
import yaml
from typing import Any, Dict, Iterable, Tuple


def load_config(config_path: str = "config.yaml") -> Dict[str, Any]:
    """
    Load configuration from YAML file with environment variable substitution

    Supports ${VAR_NAME} syntax for environment variables
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        config_str = f.read()

    # Replace environment variables
    def replace_env(match):
        var_name = match.group(1)
        value = os.getenv(var_name)
        if value is None:
            raise ValueError(f"Environment variable {var_name} is not set")
        return value

    config_str = re.sub(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}', replace_env, config_str)

    config = yaml.safe_load(config_str)
    return config or {}


def parse_option(text: str) -> Tuple[str, Any]:
    """Parse a ``key=value`` CLI option; the value is read as YAML scalar."""
    key, sep, raw = str(text).partition('=')
    key = key.strip()
    if not sep or not key:
        raise ValueError(f"Invalid option (expected key=value): {text}")
    return key, yaml.safe_load(raw) if raw.strip() else ""


def parse_options(items: Iterable[str]) -> Dict[str, Any]:
    options: Dict[str, Any] = {}
    for item in items or []:
        key, value = parse_option(item)
        options[key] = value
    return options
