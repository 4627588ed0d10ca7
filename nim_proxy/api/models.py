"""Models API endpoints"""
import time

from fastapi import APIRouter, Depends

from nim_proxy.api.dependencies import get_model_svc
from nim_proxy.services.model_service import ModelService

router = APIRouter()


@router.get('/models')
async def list_models(model_svc: ModelService = Depends(get_model_svc)):
    """List all available models (OpenAI compatible)"""
    created = int(time.time())

    models_list = [
        {
            'id': model,
            'object': 'model',
            'created': created,
            'owned_by': 'nvidia-nim-proxy'
        }
        for model in model_svc.get_all_models()
    ]

    return {'object': 'list', 'data': models_list}
