"""Shared test fixtures and configuration"""
from typing import Callable, List

import pytest
import yaml
from fastapi.testclient import TestClient

from nim_proxy.models.config import AppConfig

BACKEND_URL = 'https://nim.test/v1/chat/completions'


@pytest.fixture
def test_config_dict() -> dict:
    """Sample configuration dictionary for testing"""
    return {
        'backend': {
            'api_base': 'https://nim.test/v1',
            'api_key': 'test-nim-key',
            'request_timeout_secs': 5,
        },
        'server': {
            'host': '127.0.0.1',
            'port': 3000,
        },
        'reasoning': {
            'show_reasoning': True,
            'enable_thinking_mode': True,
        },
        'model_mapping': {
            'gpt-4': 'qwen/qwen3-coder-480b-a35b-instruct',
            'deepseek-r1': 'deepseek-ai/deepseek-r1-0528',
        },
        'passthrough_models': ['meta/llama-3.1-8b-instruct'],
        'verify_ssl': True,
    }


@pytest.fixture
def test_config(test_config_dict: dict) -> AppConfig:
    """Sample AppConfig instance for testing"""
    return AppConfig(**test_config_dict)


@pytest.fixture
def write_config(tmp_path, monkeypatch) -> Callable[[dict], str]:
    """Write a config dict to a YAML file and point CONFIG_PATH at it"""
    def _write(config_dict: dict) -> str:
        config_path = tmp_path / 'config.yaml'
        config_path.write_text(yaml.dump(config_dict, sort_keys=False))
        monkeypatch.setenv('CONFIG_PATH', str(config_path))

        from nim_proxy.core.config import get_config
        get_config.cache_clear()
        return str(config_path)

    return _write


@pytest.fixture
def app_client(test_config_dict: dict, write_config) -> TestClient:
    """FastAPI test client backed by the test configuration"""
    write_config(test_config_dict)

    from nim_proxy.main import app
    return TestClient(app)


@pytest.fixture
def hidden_reasoning_client(test_config_dict: dict, write_config) -> TestClient:
    """Test client with reasoning display and thinking mode turned off"""
    test_config_dict['reasoning'] = {'show_reasoning': False, 'enable_thinking_mode': False}
    write_config(test_config_dict)

    from nim_proxy.main import app
    return TestClient(app)


@pytest.fixture(autouse=True)
def clear_config_cache(monkeypatch):
    """Clear the config cache and model service singleton around each test"""
    for var in ('NIM_API_BASE', 'NIM_API_KEY', 'SHOW_REASONING', 'ENABLE_THINKING_MODE',
                'VERIFY_SSL', 'HOST', 'PORT', 'REQUEST_TIMEOUT_SECS'):
        monkeypatch.delenv(var, raising=False)

    from nim_proxy.core.config import get_config
    from nim_proxy.services import model_service as ms_module
    get_config.cache_clear()
    ms_module._model_service = None

    yield

    get_config.cache_clear()
    ms_module._model_service = None


@pytest.fixture
def sample_chat_request() -> dict:
    """Sample chat completion request"""
    return {
        'model': 'gpt-4',
        'messages': [
            {'role': 'system', 'content': 'You are a helpful assistant.'},
            {'role': 'user', 'content': 'Hello!'}
        ],
        'temperature': 0.7,
        'max_tokens': 100
    }


@pytest.fixture
def sample_streaming_request() -> dict:
    """Sample streaming request"""
    return {
        'model': 'deepseek-r1',
        'messages': [{'role': 'user', 'content': 'Think about it'}],
        'stream': True,
    }


def sse(*payloads: str) -> bytes:
    """Build a backend SSE body from raw payload strings"""
    return ''.join(f'data: {p}\n\n' for p in payloads).encode('utf-8')


def parse_frames(body: str) -> List[str]:
    """Split an outbound SSE body into its ``data:`` payloads"""
    return [
        event[len('data: '):]
        for event in body.split('\n\n')
        if event.startswith('data: ')
    ]
