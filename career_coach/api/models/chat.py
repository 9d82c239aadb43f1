"""
Request models for the career coach endpoint.

The schema is closed: unknown fields anywhere in the payload are rejected, and
types are validated strictly (no string/number/boolean coercion).
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, field_validator

MAX_MESSAGES = 100
MAX_MESSAGE_LENGTH = 10_000
MAX_JOB_TITLE_LENGTH = 100
MAX_GOAL_LENGTH = 500
MAX_SUMMARY_LENGTH = 1000


class ChatMessage(BaseModel):
    """A single conversation turn."""

    model_config = ConfigDict(extra="forbid")

    role: Literal["user", "assistant"]
    content: StrictStr = Field(max_length=MAX_MESSAGE_LENGTH)

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("content must not be blank")
        return value


class UserProfileContext(BaseModel):
    """Profile details the client passes along for the system prompt."""

    model_config = ConfigDict(extra="forbid")

    jobTitle: Optional[StrictStr] = Field(default=None, max_length=MAX_JOB_TITLE_LENGTH)
    currentGoal: Optional[StrictStr] = Field(default=None, max_length=MAX_GOAL_LENGTH)
    skillsAssessed: Optional[StrictBool] = None
    lastSessionSummary: Optional[StrictStr] = Field(default=None, max_length=MAX_SUMMARY_LENGTH)

    def has_context(self) -> bool:
        """True when at least one field carries something worth mentioning."""
        return bool(
            (self.jobTitle and self.jobTitle.strip())
            or (self.currentGoal and self.currentGoal.strip())
            or self.skillsAssessed
            or (self.lastSessionSummary and self.lastSessionSummary.strip())
        )


class ChatRequest(BaseModel):
    """Payload for the career coach endpoint.

    - messages: ordered conversation history, oldest first
    - userProfile: optional profile context for the system prompt
    """

    model_config = ConfigDict(extra="forbid")

    messages: List[ChatMessage] = Field(max_length=MAX_MESSAGES)
    userProfile: Optional[UserProfileContext] = None
