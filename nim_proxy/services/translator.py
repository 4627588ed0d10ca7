"""Request and non-streaming response translation between OpenAI and NIM shapes"""
import time
from typing import Any, Dict

from nim_proxy.models.config import ReasoningConfig, RequestDefaults

# Optional OpenAI request fields forwarded to the backend when present
PASSTHROUGH_FIELDS = (
    'stop',
    'seed',
    'presence_penalty',
    'frequency_penalty',
    'tools',
    'tool_choice',
    'response_format',
)


def build_backend_request(
    data: Dict[str, Any],
    backend_model: str,
    reasoning: ReasoningConfig,
    defaults: RequestDefaults,
) -> Dict[str, Any]:
    """Build the NIM chat completion payload for an OpenAI request"""
    payload = {
        'model': backend_model,
        'messages': data.get('messages', []),
        'temperature': data.get('temperature') or defaults.temperature,
        'top_p': data.get('top_p') or defaults.top_p,
        'max_tokens': data.get('max_tokens') or defaults.max_tokens,
        'stream': bool(data.get('stream', False)),
    }

    for field in PASSTHROUGH_FIELDS:
        if data.get(field) is not None:
            payload[field] = data[field]

    # Top level, not under extra_body
    if reasoning.enable_thinking_mode:
        payload['chat_template_kwargs'] = {'thinking': True}

    return payload


def _translate_choice(choice: Dict[str, Any], show_reasoning: bool) -> Dict[str, Any]:
    message = choice.get('message') or {}
    content = message.get('content') or ''
    reasoning = message.get('reasoning_content')

    if show_reasoning and reasoning:
        content = f'<think>\n{reasoning}\n</think>\n\n{content}'

    translated = {
        'role': message.get('role', 'assistant'),
        'content': content,
    }
    if message.get('tool_calls'):
        translated['tool_calls'] = message['tool_calls']

    return {
        'index': choice.get('index', 0),
        'message': translated,
        'finish_reason': choice.get('finish_reason'),
    }


def translate_completion(
    response_data: Dict[str, Any],
    model: str,
    show_reasoning: bool,
) -> Dict[str, Any]:
    """Reshape a NIM chat completion into the OpenAI shape

    The client's own model name is reported back, and any reasoning is
    folded into the content inside ``<think>`` markers when shown.
    """
    now = time.time()
    return {
        'id': f'chatcmpl-{int(now * 1000)}',
        'object': 'chat.completion',
        'created': int(now),
        'model': model,
        'choices': [
            _translate_choice(choice, show_reasoning)
            for choice in response_data.get('choices') or []
        ],
        'usage': response_data.get('usage') or {
            'prompt_tokens': 0,
            'completion_tokens': 0,
            'total_tokens': 0,
        },
    }
