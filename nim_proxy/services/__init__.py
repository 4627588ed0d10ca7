"""Services for the NIM proxy"""
from .model_service import ModelService, get_model_service
from .translator import build_backend_request, translate_completion

__all__ = [
    "ModelService",
    "get_model_service",
    "build_backend_request",
    "translate_completion",
]
