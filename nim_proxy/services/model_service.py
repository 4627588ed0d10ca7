"""Model name resolution service"""
from typing import Dict, List, Optional

from nim_proxy.core.config import get_config
from nim_proxy.core.exceptions import ModelNotFoundError


class ModelService:
    """Maps client-facing model names onto backend model IDs

    A name resolves if it is a configured alias or appears in the
    pass-through allow-list of backend-native IDs. Anything else is
    rejected instead of being guessed.
    """

    def __init__(self):
        self._model_mapping: Dict[str, str] = {}
        self._passthrough: List[str] = []
        self._initialized = False

    def initialize(self) -> None:
        """Initialize model tables from configuration"""
        if self._initialized:
            return

        config = get_config()
        self._model_mapping = dict(config.model_mapping)
        self._passthrough = list(config.passthrough_models)
        self._initialized = True

    def resolve_model(self, model: Optional[str]) -> str:
        """Return the backend model ID for a client-facing name

        Raises:
            ModelNotFoundError: if the name is neither aliased nor allow-listed
        """
        if not self._initialized:
            self.initialize()
        if not isinstance(model, str):
            raise ModelNotFoundError(model)
        if model in self._model_mapping:
            return self._model_mapping[model]
        if model in self._passthrough:
            return model
        raise ModelNotFoundError(model)

    def get_all_models(self) -> List[str]:
        """Get all model names clients may request, aliases first"""
        if not self._initialized:
            self.initialize()
        models = list(self._model_mapping)
        models.extend(m for m in self._passthrough if m not in self._model_mapping)
        return models


_model_service: Optional[ModelService] = None


def get_model_service() -> ModelService:
    """Get singleton model service instance"""
    global _model_service
    if _model_service is None:
        _model_service = ModelService()
    return _model_service
