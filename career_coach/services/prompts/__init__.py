from .coach_prompts import (
    COACH_SYSTEM_PROMPT,
    build_system_prompt,
)

__all__ = [
    "COACH_SYSTEM_PROMPT",
    "build_system_prompt",
]
