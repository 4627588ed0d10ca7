"""Middleware for metrics collection"""
import time
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from nim_proxy.core.metrics import REQUEST_COUNT, REQUEST_DURATION, ACTIVE_REQUESTS
from nim_proxy.core.logging import get_logger

logger = get_logger()


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect request metrics"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and collect metrics"""
        endpoint = request.url.path
        method = request.method

        # Skip metrics endpoint itself
        if endpoint == '/metrics':
            return await call_next(request)

        ACTIVE_REQUESTS.labels(endpoint=endpoint).inc()
        start_time = time.time()

        try:
            response = await call_next(request)
            duration = time.time() - start_time

            # Set by the completions handler once the model is known
            model = getattr(request.state, 'model', 'unknown')
            status_code = response.status_code

            REQUEST_COUNT.labels(
                method=method,
                endpoint=endpoint,
                model=model,
                status_code=status_code
            ).inc()

            REQUEST_DURATION.labels(
                method=method,
                endpoint=endpoint,
                model=model
            ).observe(duration)

            logger.info(
                f"{method} {endpoint} - model={model} "
                f"status={status_code} duration={duration:.3f}s"
            )

            return response

        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                f"{method} {endpoint} - Error: {type(e).__name__}: {str(e)} "
                f"duration={duration:.3f}s"
            )
            raise

        finally:
            ACTIVE_REQUESTS.labels(endpoint=endpoint).dec()
