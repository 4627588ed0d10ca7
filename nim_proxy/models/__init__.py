"""Data models"""
from .config import (
    AppConfig,
    BackendConfig,
    ReasoningConfig,
    RequestDefaults,
    ServerConfig,
)

__all__ = [
    "AppConfig",
    "BackendConfig",
    "ReasoningConfig",
    "RequestDefaults",
    "ServerConfig",
]
