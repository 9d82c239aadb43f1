"""
Client-side chat session against the career coach gateway.

Sends the conversation with the user's profile context, streams the reply into
the transcript and surfaces failures as short user-facing notices.
"""
import asyncio
import logging
from typing import AsyncIterator, Awaitable, Callable, List, Optional, Set

import httpx
from pydantic import ValidationError

from career_coach.api.models.chat import ChatMessage
from career_coach.client.job_title import extract_job_title
from career_coach.client.profile_store import SupabaseProfileStore, UserProfile
from career_coach.client.transcript import Transcript, consume_stream

logger = logging.getLogger(__name__)

SIGN_IN_NOTICE = "Please sign in to continue"
HIGH_DEMAND_NOTICE = "High demand - please wait a moment and try again"
UNAVAILABLE_NOTICE = "Service temporarily unavailable"
GENERIC_NOTICE = "Something went wrong. Please try again."
CONNECT_FAILED_NOTICE = "Failed to connect. Please try again."
START_FAILED_NOTICE = "Failed to start conversation. Please try again."
INTERRUPTED_NOTICE = "The response was interrupted. Please try again."
INVALID_MESSAGE_NOTICE = "Please enter a message of up to 10,000 characters."

TokenProvider = Callable[[], Awaitable[Optional[str]]]
Notifier = Callable[[str], None]


class SessionBusyError(RuntimeError):
    """Raised when a turn is started while another one is still streaming."""


def _log_notice(message: str) -> None:
    logger.warning(f"Notice: {message}")


class CoachSession:
    """
    One user's conversation with the coach.

    Only one turn can be in flight at a time; there is no queueing and no
    cancellation of a running stream.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        endpoint_url: str,
        token_provider: TokenProvider,
        profile_store: Optional[SupabaseProfileStore] = None,
        notify: Notifier = _log_notice,
    ):
        self.http_client = http_client
        self.endpoint_url = endpoint_url
        self.token_provider = token_provider
        self.profile_store = profile_store
        self.notify = notify
        self.transcript = Transcript()
        self.in_flight = False
        self._background: Set[asyncio.Task] = set()

    @property
    def profile(self) -> UserProfile:
        if self.profile_store is None:
            return UserProfile()
        return self.profile_store.profile

    @property
    def messages(self) -> List[ChatMessage]:
        return self.transcript.messages

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def send_turn(self, text: str) -> Optional[str]:
        """Send a user message; returns the final assistant text (None on failure)."""
        content = None
        async for content in self.stream_turn(text):
            pass
        return content

    async def stream_turn(self, text: str) -> AsyncIterator[str]:
        """
        Send a user message and yield the assistant text after every token.

        The user message shows up in the transcript right away and is removed
        again if the gateway refuses the request. Once the stream has started
        nothing is rolled back, even if it breaks off.
        """
        self._begin()
        try:
            try:
                user_message = ChatMessage(role="user", content=text)
            except ValidationError:
                self.notify(INVALID_MESSAGE_NOTICE)
                return

            history = self.transcript.to_payload()
            self.transcript.append(user_message)
            self._capture_job_title(text)

            async for content in self._run_turn(
                [*history, user_message.model_dump()],
                rollback=user_message,
                failure_notice=CONNECT_FAILED_NOTICE,
            ):
                yield content
        finally:
            self.in_flight = False

    async def start_conversation(self) -> Optional[str]:
        """Ask the coach to open the conversation (empty history)."""
        self._begin()
        content = None
        try:
            async for content in self._run_turn(
                [],
                replace_transcript=True,
                failure_notice=START_FAILED_NOTICE,
                status_notice=START_FAILED_NOTICE,
            ):
                pass
        finally:
            self.in_flight = False
        return content

    def reset(self) -> None:
        """Forget the visible conversation."""
        self.transcript.clear()

    async def save_profile_details(self, **changes) -> bool:
        """Persist profile details learned during the conversation."""
        if self.profile_store is None:
            return False
        return await self.profile_store.update(**changes)

    async def aclose(self) -> None:
        """Wait for pending background profile updates."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _begin(self) -> None:
        if self.in_flight:
            raise SessionBusyError("A reply is still streaming")
        self.in_flight = True

    def _capture_job_title(self, text: str) -> None:
        if self.profile_store is None or self.profile.job_title:
            return
        title = extract_job_title(text)
        if not title:
            return
        task = asyncio.create_task(self._save_job_title(title))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _save_job_title(self, title: str) -> None:
        try:
            await self.profile_store.update(job_title=title)
        except Exception as e:
            logger.warning(f"Could not save detected job title: {type(e).__name__}: {e}")

    async def _run_turn(
        self,
        messages: List[dict],
        rollback: Optional[ChatMessage] = None,
        replace_transcript: bool = False,
        failure_notice: str = GENERIC_NOTICE,
        status_notice: Optional[str] = None,
    ) -> AsyncIterator[str]:
        token = await self.token_provider()
        if not token:
            self.notify(SIGN_IN_NOTICE)
            self._rollback(rollback)
            return

        try:
            profile_context = self.profile.to_context().model_dump()
        except ValidationError as e:
            logger.warning(f"Profile context rejected: {e.error_count()} error(s)")
            self.notify(GENERIC_NOTICE)
            self._rollback(rollback)
            return

        payload = {"messages": messages, "userProfile": profile_context}
        headers = {"Authorization": f"Bearer {token}"}

        streaming = False
        try:
            async with self.http_client.stream(
                "POST", self.endpoint_url, json=payload, headers=headers
            ) as response:
                if not response.is_success:
                    await response.aread()
                    self.notify(status_notice or self._error_notice(response))
                    self._rollback(rollback)
                    return

                streaming = True
                if replace_transcript:
                    self.transcript.clear()
                async for content in consume_stream(response.aiter_bytes(), self.transcript):
                    yield content
        except httpx.HTTPError as e:
            logger.error(f"Chat error: {type(e).__name__}: {e}")
            if streaming:
                # Keep whatever was already rendered
                self.notify(INTERRUPTED_NOTICE)
            else:
                self.notify(failure_notice)
                self._rollback(rollback)

    def _rollback(self, message: Optional[ChatMessage]) -> None:
        if message is not None:
            self.transcript.remove(message)

    @staticmethod
    def _error_notice(response: httpx.Response) -> str:
        if response.status_code == 429:
            return HIGH_DEMAND_NOTICE
        if response.status_code in (402, 503):
            return UNAVAILABLE_NOTICE
        try:
            message = response.json().get("error")
        except (ValueError, AttributeError):
            message = None
        return message or GENERIC_NOTICE
