"""Best-effort job title detection in free text."""

import re
from typing import Optional

_JOB_TITLE_PATTERNS = [
    re.compile(r"i(?:'m| am) (?:a |an |the )?(.+?)(?:\.|,|$| at | in | for | and )", re.IGNORECASE),
    re.compile(r"(?:work as|working as) (?:a |an |the )?(.+?)(?:\.|,|$| at | in )", re.IGNORECASE),
    re.compile(r"(?:my (?:job|role|position|title) is) (?:a |an |the )?(.+?)(?:\.|,|$)", re.IGNORECASE),
    re.compile(r"(?:currently|right now) (?:a |an |the )?(.+?)(?:\.|,|$| at | in )", re.IGNORECASE),
]

# Phrases that follow "I'm ..." but describe intent, not a role
_NON_TITLE_WORDS = ("looking", "want")


def extract_job_title(message: str) -> Optional[str]:
    """
    Guess a job title from a chat message, e.g. "I'm a shift supervisor".

    Misses are fine; returns None when nothing plausible is found.
    """
    for pattern in _JOB_TITLE_PATTERNS:
        match = pattern.search(message)
        if not match or not match.group(1):
            continue
        title = match.group(1).strip()
        if 2 < len(title) < 50 and not any(word in title for word in _NON_TITLE_WORDS):
            return title
    return None
