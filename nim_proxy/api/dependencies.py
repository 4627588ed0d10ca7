"""API dependencies"""
from nim_proxy.services.model_service import get_model_service, ModelService


def get_model_svc() -> ModelService:
    """Get model service dependency"""
    return get_model_service()
