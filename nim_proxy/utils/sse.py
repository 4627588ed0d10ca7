"""SSE line framing and event classification"""
import json
from dataclasses import dataclass
from typing import Any, List, Optional, Union

DATA_PREFIX = 'data: '
DONE_TOKEN = '[DONE]'
DONE_EVENT = f'{DATA_PREFIX}{DONE_TOKEN}\n\n'


@dataclass(frozen=True)
class Terminate:
    """The backend's ``data: [DONE]`` sentinel"""


@dataclass(frozen=True)
class ParsedEvent:
    """A ``data:`` line whose payload decoded as JSON"""
    payload: Any


@dataclass(frozen=True)
class Unparseable:
    """A ``data:`` line whose payload is not valid JSON"""
    raw_line: str


Frame = Union[Terminate, ParsedEvent, Unparseable]


class LineFramer:
    """Turns arbitrarily split byte chunks into complete lines

    Bytes are buffered rather than text so that a multi-byte UTF-8 sequence
    split across two chunks still decodes correctly.
    """

    def __init__(self):
        self._buffer = b''

    @property
    def remainder(self) -> bytes:
        """Bytes received after the last newline"""
        return self._buffer

    def feed(self, chunk: bytes) -> List[str]:
        """Append a chunk and return every line it completes"""
        if not chunk:
            return []
        self._buffer += chunk
        *complete, self._buffer = self._buffer.split(b'\n')
        return [line.decode('utf-8', errors='replace') for line in complete]

    def flush(self) -> Optional[str]:
        """Return and clear the trailing partial line, if any"""
        if not self._buffer:
            return None
        line = self._buffer.decode('utf-8', errors='replace')
        self._buffer = b''
        return line


def classify_line(line: str) -> Optional[Frame]:
    """Classify one complete line from the backend stream

    Returns None for lines that carry no event: blank lines, SSE comments
    and any field other than ``data``. An unparseable line keeps any
    trailing carriage return so it can be forwarded byte for byte.
    """
    text = line.rstrip('\r')
    if not text.strip() or not text.startswith(DATA_PREFIX):
        return None

    payload = text[len(DATA_PREFIX):]
    if payload.strip() == DONE_TOKEN:
        return Terminate()

    try:
        return ParsedEvent(json.loads(payload))
    except ValueError:
        return Unparseable(line)


def format_event(payload: str) -> str:
    """Frame a payload as one outbound SSE event"""
    return f'{DATA_PREFIX}{payload}\n\n'
