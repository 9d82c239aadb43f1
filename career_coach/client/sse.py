"""
Incremental decoder for the chat completion SSE stream.

Network reads can end anywhere: in the middle of a line, a JSON object, or a
multi-byte UTF-8 sequence. The decoder buffers text across reads and only acts
on complete lines. A data line whose JSON does not parse yet is put back in
front of the buffer and retried once more bytes arrive; on the final drain,
after the transport closed, such lines are dropped.
"""
import codecs
import json
from enum import Enum
from typing import AsyncIterable, AsyncIterator, List, Optional

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


class DecoderState(str, Enum):
    ACCUMULATING = "accumulating"
    HAVE_LINE = "have_line"
    TERMINAL = "terminal"


class _Incomplete:
    """Marker for a data payload that is not valid JSON (yet)."""


_INCOMPLETE = _Incomplete()


def _extract_content(payload: str):
    """
    Parse one data payload.

    Returns the delta text, ``None`` when the chunk carries no text, or
    ``_INCOMPLETE`` when the payload is not valid JSON.
    """
    try:
        chunk = json.loads(payload)
    except ValueError:
        return _INCOMPLETE

    try:
        content = chunk["choices"][0]["delta"].get("content")
    except (KeyError, IndexError, TypeError, AttributeError):
        return None
    return content if isinstance(content, str) else None


class SSEDeltaDecoder:
    """Turns SSE bytes into ``delta.content`` fragments, in arrival order."""

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self.state = DecoderState.ACCUMULATING

    @property
    def done(self) -> bool:
        """True once the ``[DONE]`` sentinel was seen."""
        return self.state is DecoderState.TERMINAL

    def feed(self, data: bytes) -> List[str]:
        """Add bytes from one read and return the fragments they completed."""
        if self.done:
            return []
        self._buffer += self._decoder.decode(data)
        return self._drain(final=False)

    def close(self) -> List[str]:
        """
        Final pass once the transport has ended.

        Whatever is left in the buffer is processed line by line; payloads that
        still fail to parse are discarded since no more data will arrive.
        """
        if self.done:
            return []
        self._buffer += self._decoder.decode(b"", final=True)
        if self._buffer and not self._buffer.endswith("\n"):
            self._buffer += "\n"
        fragments = self._drain(final=True)
        self._buffer = ""
        return fragments

    def _next_line(self) -> Optional[str]:
        newline = self._buffer.find("\n")
        if newline == -1:
            return None
        line = self._buffer[:newline]
        self._buffer = self._buffer[newline + 1:]
        if line.endswith("\r"):
            line = line[:-1]
        return line

    def _drain(self, final: bool) -> List[str]:
        fragments = []
        while not self.done:
            line = self._next_line()
            if line is None:
                self.state = DecoderState.ACCUMULATING
                break
            self.state = DecoderState.HAVE_LINE

            if not line.strip() or line.startswith(":"):
                continue
            if not line.startswith(DATA_PREFIX):
                continue

            payload = line[len(DATA_PREFIX):].strip()
            if payload == DONE_SENTINEL:
                self.state = DecoderState.TERMINAL
                break

            content = _extract_content(payload)
            if content is _INCOMPLETE:
                if final:
                    continue
                # Wait for the rest of this line's JSON
                self._buffer = f"{line}\n{self._buffer}"
                self.state = DecoderState.ACCUMULATING
                break
            if content:
                fragments.append(content)
        return fragments


async def iter_deltas(byte_stream: AsyncIterable[bytes]) -> AsyncIterator[str]:
    """
    Yield ``delta.content`` fragments from an SSE byte stream.

    Stops reading as soon as ``[DONE]`` arrives.
    """
    decoder = SSEDeltaDecoder()
    async for data in byte_stream:
        for fragment in decoder.feed(data):
            yield fragment
        if decoder.done:
            return
    for fragment in decoder.close():
        yield fragment
