"""Core functionality"""
from .config import load_config, get_config
from .exceptions import ProxyError, ModelNotFoundError

__all__ = ["load_config", "get_config", "ProxyError", "ModelNotFoundError"]
