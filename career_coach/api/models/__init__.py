from .chat import ChatMessage, ChatRequest, UserProfileContext
from .error import ErrorResponse

__all__ = [
    "ErrorResponse",
    "ChatMessage",
    "ChatRequest",
    "UserProfileContext",
]
