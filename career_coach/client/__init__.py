"""Client side of the career coach: SSE decoding, transcript and chat session."""

from .job_title import extract_job_title
from .profile_store import SupabaseProfileStore, TrialStatus, UserProfile
from .session import CoachSession, SessionBusyError
from .sse import SSEDeltaDecoder, iter_deltas
from .transcript import Transcript, consume_stream

__all__ = [
    "CoachSession",
    "SessionBusyError",
    "SSEDeltaDecoder",
    "SupabaseProfileStore",
    "Transcript",
    "TrialStatus",
    "UserProfile",
    "consume_stream",
    "extract_job_title",
    "iter_deltas",
]
