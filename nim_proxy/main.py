"""Main application entry point"""
import urllib3
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from nim_proxy.api.router import api_router, health_router, metrics_router
from nim_proxy.services.model_service import get_model_service
from nim_proxy.core.config import get_config
from nim_proxy.core.exceptions import ProxyError
from nim_proxy.core.middleware import MetricsMiddleware
from nim_proxy.core.metrics import APP_INFO
from nim_proxy.core.logging import setup_logging, get_logger

urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

logger = get_logger()


async def proxy_error_handler(request: Request, exc: ProxyError) -> JSONResponse:
    """Render a ProxyError as an OpenAI error body"""
    logger.warning(f"{request.method} {request.url.path} - {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render routing errors in OpenAI error shape; unknown endpoints are 404"""
    if exc.status_code in (404, 405):
        return JSONResponse(
            status_code=404,
            content={
                'error': {
                    'message': f"Endpoint {request.url.path} not found",
                    'type': 'invalid_request_error',
                    'code': 404
                }
            }
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            'error': {
                'message': str(exc.detail),
                'type': 'invalid_request_error',
                'code': exc.status_code
            }
        }
    )


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="NIM Proxy",
        description="OpenAI-compatible proxy for NVIDIA NIM with reasoning stream transcoding",
        version="1.0.0"
    )

    app.add_middleware(MetricsMiddleware)

    app.add_exception_handler(ProxyError, proxy_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

    app.include_router(api_router)
    app.include_router(health_router)
    app.include_router(metrics_router)

    @app.on_event("startup")
    async def startup_event():
        """Initialize services on startup"""
        setup_logging(log_level="INFO")
        config = get_config()

        APP_INFO.info({
            'version': '1.0.0',
            'title': 'NIM Proxy'
        })

        model_svc = get_model_service()
        model_svc.initialize()

        logger.info(f"Starting NIM Proxy for backend {config.backend.api_base}")
        logger.info(f"Serving {len(model_svc.get_all_models())} models")
        logger.info(f"Reasoning display: {'ENABLED' if config.reasoning.show_reasoning else 'DISABLED'}")
        logger.info(f"Thinking mode: {'ENABLED' if config.reasoning.enable_thinking_mode else 'DISABLED'}")
        if not config.backend.api_key:
            logger.warning("NIM_API_KEY is not set; backend requests will be unauthenticated")

    return app


app = create_app()
