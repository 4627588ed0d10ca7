"""Configuration management"""
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from nim_proxy.models.config import AppConfig

load_dotenv()

# Built-in configuration, used as-is when no config file exists and as the
# base that a config file is merged onto.
DEFAULT_CONFIG: dict = {
    'backend': {
        'api_base': '${NIM_API_BASE:-https://integrate.api.nvidia.com/v1}',
        'api_key': '${NIM_API_KEY:-}',
        'request_timeout_secs': '${REQUEST_TIMEOUT_SECS:-300}',
    },
    'server': {
        'host': '${HOST:-0.0.0.0}',
        'port': '${PORT:-3000}',
    },
    'reasoning': {
        'show_reasoning': '${SHOW_REASONING:-true}',
        'enable_thinking_mode': '${ENABLE_THINKING_MODE:-true}',
    },
    'verify_ssl': '${VERIFY_SSL:-true}',
}


def expand_env_vars(value: str) -> str:
    """Expand environment variables in string. Supports ${VAR} and ${VAR:-default}"""
    if not isinstance(value, str):
        return value

    pattern = r'\$\{([^}:]+)(?::?-([^}]*))?\}'
    return re.sub(pattern, lambda m: os.environ.get(m.group(1), m.group(2) or ''), value)


def expand_config_env_vars(config: Any) -> Any:
    """Recursively expand environment variables in config"""
    if isinstance(config, dict):
        return {k: expand_config_env_vars(v) for k, v in config.items()}
    elif isinstance(config, list):
        return [expand_config_env_vars(item) for item in config]
    elif isinstance(config, str):
        return expand_env_vars(config)
    return config


def merge_config(base: dict, override: dict) -> dict:
    """Recursively merge ``override`` onto ``base`` without mutating either"""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def str_to_bool(value: Any) -> bool:
    """Convert string representation of boolean to actual boolean"""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() in ('true', '1', 'yes', 'on')
    return bool(value)


def load_config(config_path: str = 'config.yaml') -> AppConfig:
    """Load and parse configuration from YAML file

    A missing file is not an error: the built-in defaults (driven by
    environment variables) are used instead.
    """
    raw_config: dict = {}
    if Path(config_path).is_file():
        with open(config_path, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

    expanded_config = expand_config_env_vars(merge_config(DEFAULT_CONFIG, raw_config))
    expanded_config['verify_ssl'] = str_to_bool(expanded_config.get('verify_ssl', True))

    reasoning = expanded_config['reasoning']
    for key in ('show_reasoning', 'enable_thinking_mode'):
        reasoning[key] = str_to_bool(reasoning.get(key, True))

    if not expanded_config['backend'].get('api_key'):
        expanded_config['backend']['api_key'] = None

    return AppConfig(**expanded_config)


@lru_cache
def get_config() -> AppConfig:
    """Get cached configuration instance"""
    config_path = os.environ.get('CONFIG_PATH', 'config.yaml')
    return load_config(config_path)
