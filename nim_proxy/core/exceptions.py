"""Custom exceptions for the application"""
from typing import Any, Optional


class ProxyError(Exception):
    """Raised when a request cannot be served; rendered as an OpenAI error body"""

    error_type = 'invalid_request_error'

    def __init__(self, status_code: int, message: str, backend_error: Optional[Any] = None):
        self.status_code = status_code
        self.message = message
        self.backend_error = backend_error
        super().__init__(message)

    def to_dict(self) -> dict:
        body = {
            'message': self.message,
            'type': self.error_type,
            'code': self.status_code,
        }
        if self.backend_error is not None:
            body['nvidia_error'] = self.backend_error
        return {'error': body}


class ModelNotFoundError(ProxyError):
    """Raised when a requested model is neither aliased nor allow-listed"""

    def __init__(self, model: Optional[str]):
        self.model = model
        super().__init__(404, f"The model '{model}' does not exist or is not served by this proxy")

    def to_dict(self) -> dict:
        body = super().to_dict()
        body['error']['code'] = 'model_not_found'
        return body
