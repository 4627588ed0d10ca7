"""Chat completions API endpoint"""
import json
from typing import Any, Dict, Optional

import httpx
from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse

from nim_proxy.api.dependencies import get_model_svc
from nim_proxy.core.config import get_config
from nim_proxy.core.exceptions import ProxyError
from nim_proxy.core.logging import get_logger, set_model_context, clear_model_context
from nim_proxy.models.config import AppConfig
from nim_proxy.services.model_service import ModelService
from nim_proxy.services.translator import build_backend_request, translate_completion
from nim_proxy.utils.streaming import StreamTranscoder, create_streaming_response, record_usage

router = APIRouter()
logger = get_logger()


def backend_error(status_code: int, body: bytes) -> ProxyError:
    """Build a ProxyError from a backend error response body"""
    try:
        error_data: Any = json.loads(body.decode('utf-8'))
    except ValueError:
        error_data = body.decode('utf-8', errors='replace') or None

    message: Optional[str] = None
    if isinstance(error_data, dict):
        error_field = error_data.get('error')
        message = error_data.get('detail')
        if not message and isinstance(error_field, dict):
            message = error_field.get('message')
        elif not message and isinstance(error_field, str):
            message = error_field
    elif isinstance(error_data, str):
        message = error_data

    logger.error(f"Backend returned HTTP {status_code}: {error_data}")
    return ProxyError(status_code, str(message or f"Backend returned HTTP {status_code}"), error_data)


def _backend_headers(config: AppConfig) -> Dict[str, str]:
    return {
        'Authorization': f"Bearer {config.backend.api_key or ''}",
        'Content-Type': 'application/json',
    }


def _new_client(config: AppConfig) -> httpx.AsyncClient:
    return httpx.AsyncClient(verify=config.verify_ssl, timeout=config.backend.request_timeout_secs)


async def _stream_completion(
    request: Request,
    url: str,
    payload: Dict[str, Any],
    original_model: str,
    config: AppConfig,
):
    client = _new_client(config)
    try:
        backend_request = client.build_request('POST', url, json=payload, headers=_backend_headers(config))
        response = await client.send(backend_request, stream=True)
    except httpx.TimeoutException as e:
        await client.aclose()
        logger.error(f"Timeout opening stream to backend: {e}")
        raise ProxyError(504, 'Gateway timeout')
    except httpx.HTTPError as e:
        await client.aclose()
        logger.error(f"Failed to connect to backend: {e}")
        raise ProxyError(502, f"Backend connection failed: {e}")

    if response.status_code >= 400:
        try:
            body = await response.aread()
        except httpx.TimeoutException as e:
            logger.error(f"Timeout reading backend error response: {e}")
            raise ProxyError(504, 'Gateway timeout')
        except httpx.HTTPError as e:
            logger.error(f"Failed to read backend error response: {e}")
            raise ProxyError(502, f"Backend connection failed: {e}")
        finally:
            await response.aclose()
            await client.aclose()
        raise backend_error(response.status_code, body)

    transcoder = StreamTranscoder(
        show_reasoning=config.reasoning.show_reasoning,
        model_alias=original_model,
    )
    return create_streaming_response(response, transcoder, request.is_disconnected, client)


async def _complete(url: str, payload: Dict[str, Any], original_model: str, config: AppConfig):
    async with _new_client(config) as client:
        try:
            response = await client.post(url, json=payload, headers=_backend_headers(config))
        except httpx.TimeoutException as e:
            logger.error(f"Timeout waiting for backend: {e}")
            raise ProxyError(504, 'Gateway timeout')
        except httpx.HTTPError as e:
            logger.error(f"Failed to connect to backend: {e}")
            raise ProxyError(502, f"Backend connection failed: {e}")

    if response.status_code >= 400:
        raise backend_error(response.status_code, response.content)

    try:
        response_data = response.json()
    except ValueError:
        raise ProxyError(502, 'Backend returned a non-JSON response', response.text[:500])
    if not isinstance(response_data, dict):
        raise ProxyError(502, 'Backend returned an unexpected JSON response', response_data)

    if isinstance(response_data.get('usage'), dict):
        record_usage(response_data['usage'], original_model)

    return JSONResponse(
        content=translate_completion(response_data, original_model, config.reasoning.show_reasoning)
    )


async def proxy_chat_completion(request: Request, model_svc: ModelService):
    """Translate an OpenAI chat completion request and forward it to the backend"""
    try:
        data = await request.json()
    except ValueError as e:
        logger.warning(f"Invalid JSON in request body: {e}")
        raise ProxyError(400, f"Invalid JSON in request body: {e}")
    if not isinstance(data, dict):
        raise ProxyError(400, 'Request body must be a JSON object')

    original_model = data.get('model')
    if original_model is not None and not isinstance(original_model, str):
        raise ProxyError(400, "'model' must be a string")
    backend_model = model_svc.resolve_model(original_model)
    request.state.model = original_model
    set_model_context(original_model)

    config = get_config()
    payload = build_backend_request(data, backend_model, config.reasoning, config.defaults)
    url = f"{config.backend.api_base.rstrip('/')}/chat/completions"

    logger.info(
        f"Sending to NVIDIA: model={backend_model} "
        f"has_thinking={'chat_template_kwargs' in payload} stream={payload['stream']}"
    )

    if payload['stream']:
        return await _stream_completion(request, url, payload, original_model, config)
    return await _complete(url, payload, original_model, config)


@router.post('/chat/completions')
async def chat_completions(
    request: Request,
    model_svc: ModelService = Depends(get_model_svc)
):
    """Proxy chat completions requests to the NIM backend"""
    try:
        return await proxy_chat_completion(request, model_svc)
    except ProxyError:
        raise
    except Exception:
        logger.exception("Unexpected error while proxying chat completion")
        raise ProxyError(500, 'Internal server error')
    finally:
        clear_model_context()
