"""Visible conversation transcript and the stream consumer that updates it."""

from typing import AsyncIterable, AsyncIterator, List, Optional

from career_coach.api.models.chat import ChatMessage
from career_coach.client.sse import iter_deltas


class Transcript:
    """Ordered chat messages as shown to the user."""

    def __init__(self, messages: Optional[List[ChatMessage]] = None):
        self._messages: List[ChatMessage] = list(messages or [])

    @property
    def messages(self) -> List[ChatMessage]:
        return list(self._messages)

    @property
    def last(self) -> Optional[ChatMessage]:
        return self._messages[-1] if self._messages else None

    def append(self, message: ChatMessage) -> ChatMessage:
        self._messages.append(message)
        return message

    def remove(self, message: ChatMessage) -> bool:
        """Remove this exact message object (not an equal one)."""
        for index, existing in enumerate(self._messages):
            if existing is message:
                del self._messages[index]
                return True
        return False

    def upsert_assistant(self, content: str) -> ChatMessage:
        """
        Show ``content`` as the in-progress assistant message.

        Replaces the last message when it already is the assistant's, appends
        a new one otherwise.
        """
        message = ChatMessage.model_construct(role="assistant", content=content)
        if self._messages and self._messages[-1].role == "assistant":
            self._messages[-1] = message
        else:
            self._messages.append(message)
        return message

    def clear(self) -> None:
        self._messages.clear()

    def to_payload(self) -> List[dict]:
        return [message.model_dump() for message in self._messages]

    def __len__(self) -> int:
        return len(self._messages)


async def consume_stream(
    byte_stream: AsyncIterable[bytes], transcript: Transcript
) -> AsyncIterator[str]:
    """
    Apply an SSE byte stream to the transcript as it arrives.

    Yields the full assistant text after every decoded fragment.
    """
    content = ""
    async for fragment in iter_deltas(byte_stream):
        content += fragment
        transcript.upsert_assistant(content)
        yield content
