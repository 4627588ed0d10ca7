"""Configuration models"""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


DEFAULT_MODEL_MAPPING: Dict[str, str] = {
    'gpt-3.5-turbo': 'nvidia/llama-3.1-nemotron-ultra-253b-v1',
    'gpt-4': 'qwen/qwen3-coder-480b-a35b-instruct',
    'gpt-4-turbo': 'moonshotai/kimi-k2-instruct-0905',
    'gpt-4o': 'deepseek-ai/deepseek-v3.1',
    'deepseek-r1': 'deepseek-ai/deepseek-r1-0528',
    'deepseek-v3.2': 'deepseek-ai/deepseek-v3.2',
    'claude-3-opus': 'openai/gpt-oss-120b',
    'claude-3-sonnet': 'openai/gpt-oss-20b',
    'gemini-pro': 'qwen/qwen3-next-80b-a3b-thinking',
}


class BackendConfig(BaseModel):
    """NVIDIA NIM backend configuration"""
    api_base: str = 'https://integrate.api.nvidia.com/v1'
    api_key: Optional[str] = None
    request_timeout_secs: float = Field(default=300.0, gt=0)


class ReasoningConfig(BaseModel):
    """Reasoning display and thinking mode defaults applied to every request"""
    show_reasoning: bool = True
    enable_thinking_mode: bool = True


class RequestDefaults(BaseModel):
    """Sampling defaults used when the client leaves a field unset"""
    temperature: float = 1.0
    top_p: float = 0.95
    max_tokens: int = Field(default=8192, ge=1)


class ServerConfig(BaseModel):
    """Server configuration"""
    host: str = "0.0.0.0"
    port: int = 3000


class AppConfig(BaseModel):
    """Application configuration"""
    backend: BackendConfig = Field(default_factory=BackendConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    reasoning: ReasoningConfig = Field(default_factory=ReasoningConfig)
    defaults: RequestDefaults = Field(default_factory=RequestDefaults)
    model_mapping: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_MODEL_MAPPING))
    passthrough_models: List[str] = Field(default_factory=list)
    verify_ssl: bool = True
