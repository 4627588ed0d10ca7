"""Health check endpoint"""
from fastapi import APIRouter

from nim_proxy.core.config import get_config

router = APIRouter()


@router.get('/health')
async def health():
    """Basic health check endpoint"""
    config = get_config()

    return {
        'status': 'ok',
        'service': 'OpenAI to NVIDIA NIM Proxy',
        'reasoning_display': config.reasoning.show_reasoning,
        'thinking_mode': config.reasoning.enable_thinking_mode,
    }
