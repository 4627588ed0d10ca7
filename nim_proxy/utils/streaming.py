"""Streaming response utilities

The backend streams OpenAI-shaped chunks whose delta may carry a separate
``reasoning_content`` channel. Clients get a single ``content`` channel, with
each contiguous run of reasoning wrapped in ``<think>`` markers.
"""
import json
from typing import AsyncIterator, Awaitable, Callable, List, Optional, Tuple

import httpx
from fastapi.responses import StreamingResponse

from nim_proxy.core.logging import get_logger, set_model_context, clear_model_context
from nim_proxy.core.metrics import (
    CLIENT_DISCONNECTS,
    MALFORMED_FRAMES,
    STREAM_ERRORS,
    TOKEN_USAGE,
)
from nim_proxy.utils.sse import (
    DONE_EVENT,
    ParsedEvent,
    Terminate,
    Unparseable,
    classify_line,
    format_event,
    LineFramer,
)

logger = get_logger()

THINK_OPEN = '<think>\n'
THINK_CLOSE = '\n</think>\n\n'

SSE_HEADERS = {
    'Cache-Control': 'no-cache',
    'Connection': 'keep-alive',
    'X-Accel-Buffering': 'no',
}


def _dumps(obj) -> str:
    return json.dumps(obj, ensure_ascii=False, separators=(',', ':'))


CLOSE_REASONING_EVENT = format_event(_dumps({'choices': [{'delta': {'content': '\n</think>'}}]}))


def combine_delta(
    reasoning: Optional[str],
    content: Optional[str],
    reasoning_open: bool,
    show_reasoning: bool = True,
) -> Tuple[Optional[str], bool]:
    """Merge one delta's reasoning and content into a single text fragment

    Returns the outbound text and the new reasoning-open flag. A text of None
    means the delta's content should be left as it is. Empty strings count
    as absent.
    """
    if not show_reasoning:
        return content or '', reasoning_open

    text = ''
    if reasoning:
        text = reasoning if reasoning_open else THINK_OPEN + reasoning
        reasoning_open = True

    if content:
        if reasoning_open:
            text += THINK_CLOSE + content
            reasoning_open = False
        else:
            text += content

    return (text or None), reasoning_open


def record_usage(usage: dict, model: str) -> None:
    """Record backend-reported token usage"""
    for token_type, key in (('prompt', 'prompt_tokens'),
                            ('completion', 'completion_tokens'),
                            ('total', 'total_tokens')):
        value = usage.get(key)
        if isinstance(value, int) and value >= 0:
            TOKEN_USAGE.labels(model=model, token_type=token_type).inc(value)

    logger.debug(
        f"Token usage - model={model} "
        f"prompt={usage.get('prompt_tokens', 0)} "
        f"completion={usage.get('completion_tokens', 0)} "
        f"total={usage.get('total_tokens', 0)}"
    )


def _first_delta(payload: dict) -> Optional[dict]:
    choices = payload.get('choices')
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    delta = choices[0].get('delta')
    return delta if isinstance(delta, dict) else None


class StreamTranscoder:
    """Per-request transcoder from backend SSE bytes to client SSE frames

    Holds the line buffer and the reasoning-open flag for exactly one
    response. ``feed`` is called for every chunk in delivery order, then
    exactly one of ``finish`` or ``fail``. Every method returns the
    outbound frames to write, already framed as ``data: ...\\n\\n``.
    """

    def __init__(self, show_reasoning: bool = True, model_alias: Optional[str] = None):
        self.show_reasoning = show_reasoning
        self.model_alias = model_alias
        self.reasoning_open = False
        # The [DONE] sentinel has gone out; nothing else may follow it
        self.terminated = False
        self.finalized = False
        self._framer = LineFramer()

    @property
    def _model_label(self) -> str:
        return self.model_alias or 'unknown'

    def feed(self, chunk: bytes) -> List[str]:
        """Consume one backend chunk"""
        if self.finalized:
            logger.warning("Chunk received after stream was finalized, dropping")
            return []

        frames: List[str] = []
        for line in self._framer.feed(chunk):
            frames.extend(self._process_line(line))
        return frames

    def finish(self) -> List[str]:
        """Finalize after the backend stream ended normally"""
        if self.finalized:
            return []

        frames: List[str] = []
        remainder = self._framer.flush()
        if remainder is not None:
            frames.extend(self._process_line(remainder))

        self.finalized = True
        if not self.terminated:
            frames.extend(self._close_reasoning())
            frames.append(DONE_EVENT)
            self.terminated = True
        return frames

    def fail(self, message: str) -> List[str]:
        """Finalize after the backend stream errored"""
        if self.finalized:
            return []

        self.finalized = True
        if self.terminated:
            logger.warning(f"Backend error after stream completion, not reported to client: {message}")
            return []

        frames = self._close_reasoning()
        frames.append(format_event(_dumps({'error': message})))
        frames.append(DONE_EVENT)
        self.terminated = True
        return frames

    def _close_reasoning(self) -> List[str]:
        if not self.reasoning_open:
            return []
        self.reasoning_open = False
        return [CLOSE_REASONING_EVENT]

    def _process_line(self, line: str) -> List[str]:
        try:
            frame = classify_line(line)
            if frame is None:
                return []

            if self.terminated:
                logger.debug(f"Dropping line received after [DONE]: {line[:100]}")
                return []

            if isinstance(frame, Terminate):
                frames = self._close_reasoning()
                frames.append(DONE_EVENT)
                self.terminated = True
                return frames

            if isinstance(frame, Unparseable):
                MALFORMED_FRAMES.labels(model=self._model_label).inc()
                logger.warning(f"Forwarding unparseable event unchanged: {frame.raw_line[:200]}")
                return [frame.raw_line + '\n\n']

            return [format_event(self._transform(frame))]
        except Exception:
            logger.exception(f"Failed to process stream line: {line[:200]}")
            return []

    def _transform(self, frame: ParsedEvent) -> str:
        payload = frame.payload
        if not isinstance(payload, dict):
            return _dumps(payload)

        if self.model_alias and 'model' in payload:
            payload['model'] = self.model_alias

        usage = payload.get('usage')
        if isinstance(usage, dict):
            record_usage(usage, self._model_label)

        reasoning_open = self.reasoning_open
        delta = _first_delta(payload)
        if delta is not None:
            text, reasoning_open = combine_delta(
                delta.get('reasoning_content'),
                delta.get('content'),
                self.reasoning_open,
                self.show_reasoning,
            )
            if text is not None:
                delta['content'] = text
            delta.pop('reasoning_content', None)

        serialized = _dumps(payload)
        self.reasoning_open = reasoning_open
        return serialized


async def stream_response(
    response: httpx.Response,
    transcoder: StreamTranscoder,
    disconnect_check: Optional[Callable[[], Awaitable[bool]]] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> AsyncIterator[bytes]:
    """Pump a backend streaming response through a transcoder

    Args:
        response: Open streaming response from the backend
        transcoder: Transcoder owned by this request
        disconnect_check: Optional async callable returning True once the client is gone
        client: HTTP client to close together with the response
    """
    model = transcoder.model_alias or 'unknown'
    set_model_context(model)

    try:
        async for chunk in response.aiter_bytes():
            if disconnect_check is not None:
                try:
                    if await disconnect_check():
                        logger.info(f"Client disconnected, stopping stream for model={model}")
                        CLIENT_DISCONNECTS.labels(model=model).inc()
                        return
                except Exception as e:
                    logger.debug(f"Error checking client disconnect: {e}")

            for frame in transcoder.feed(chunk):
                yield frame.encode('utf-8')

        final_frames = transcoder.finish()
    except Exception as e:
        message = str(e) or type(e).__name__
        logger.error(f"Stream error for model={model}: {type(e).__name__}: {message}")
        STREAM_ERRORS.labels(model=model).inc()
        final_frames = transcoder.fail(message)
    finally:
        await response.aclose()
        if client is not None:
            await client.aclose()
        clear_model_context()

    for frame in final_frames:
        yield frame.encode('utf-8')


def create_streaming_response(
    response: httpx.Response,
    transcoder: StreamTranscoder,
    disconnect_check: Optional[Callable[[], Awaitable[bool]]] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> StreamingResponse:
    """Create the client-facing event stream for an open backend response"""
    return StreamingResponse(
        stream_response(response, transcoder, disconnect_check, client),
        media_type='text/event-stream',
        headers=SSE_HEADERS,
    )
