"""
Profile store backed by the Supabase ``profiles`` table.

Holds what the coach remembers about a user between sessions (job title,
goal, assessment status, last session notes) plus the subscription fields
used to compute the trial status.
"""
import logging
import math
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from postgrest import APIError as PostgrestError
from supabase import AsyncClient

from career_coach.api.models.chat import (
    MAX_GOAL_LENGTH,
    MAX_JOB_TITLE_LENGTH,
    MAX_SUMMARY_LENGTH,
    UserProfileContext,
)

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"

# UserProfile attributes share their names with the profiles columns
PROFILE_COLUMNS = ("job_title", "current_goal", "skills_assessed", "last_session_summary")

SECONDS_PER_DAY = 24 * 60 * 60


def _clip(value: Optional[str], limit: int) -> Optional[str]:
    if value is None:
        return None
    return str(value)[:limit]


@dataclass(frozen=True)
class UserProfile:
    """Client-side view of a user's coaching profile."""

    job_title: Optional[str] = None
    current_goal: Optional[str] = None
    skills_assessed: bool = False
    last_session_summary: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "UserProfile":
        return cls(
            job_title=row.get("job_title"),
            current_goal=row.get("current_goal"),
            skills_assessed=bool(row.get("skills_assessed") or False),
            last_session_summary=row.get("last_session_summary"),
        )

    def to_context(self) -> UserProfileContext:
        """
        Shape sent to the gateway as ``userProfile``.

        Stored values can be longer than the gateway accepts; they are cut to
        the request limits so the turn still goes out.
        """
        return UserProfileContext(
            jobTitle=_clip(self.job_title, MAX_JOB_TITLE_LENGTH),
            currentGoal=_clip(self.current_goal, MAX_GOAL_LENGTH),
            skillsAssessed=self.skills_assessed,
            lastSessionSummary=_clip(self.last_session_summary, MAX_SUMMARY_LENGTH),
        )


@dataclass(frozen=True)
class TrialStatus:
    """Subscription state derived from the profile row."""

    is_trialing: bool
    is_expired: bool
    is_active: bool
    days_remaining: int
    trial_end_date: Optional[datetime]
    subscription_status: Optional[str]

    @classmethod
    def from_row(cls, row: Dict[str, Any], now: Optional[datetime] = None) -> "TrialStatus":
        now = now or datetime.now(timezone.utc)
        subscription_status = row.get("subscription_status")
        trial_end_date = _parse_timestamp(row.get("trial_end_date"))

        days_remaining = 0
        if trial_end_date is not None:
            remaining = (trial_end_date - now).total_seconds() / SECONDS_PER_DAY
            days_remaining = max(0, math.ceil(remaining))

        trialing = subscription_status == "trialing"
        return cls(
            is_trialing=trialing and days_remaining > 0,
            is_expired=trialing and days_remaining <= 0,
            is_active=subscription_status == "active",
            days_remaining=days_remaining,
            trial_end_date=trial_end_date,
            subscription_status=subscription_status,
        )


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class SupabaseProfileStore:
    """Reads and updates one user's row in the profiles table."""

    def __init__(self, client: AsyncClient, user_id: str):
        self.client = client
        self.user_id = user_id
        self.profile = UserProfile()

    async def _fetch_row(self, columns: str) -> Optional[Dict[str, Any]]:
        response = await (
            self.client.table(PROFILES_TABLE)
            .select(columns)
            .eq("user_id", self.user_id)
            .single()
            .execute()
        )
        return response.data

    async def load(self) -> UserProfile:
        """Fetch the profile; keeps the current one when the fetch fails."""
        try:
            row = await self._fetch_row(", ".join(PROFILE_COLUMNS))
        except PostgrestError as e:
            logger.error(f"Error fetching profile: {e}")
            return self.profile

        if row:
            self.profile = UserProfile.from_row(row)
        return self.profile

    async def update(self, **changes: Any) -> bool:
        """
        Update profile fields, e.g. ``update(job_title="shift supervisor")``.

        Returns False (and logs) when the update fails; the cached profile is
        only changed after the database accepted the update.
        """
        unknown = set(changes) - set(PROFILE_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown profile fields: {', '.join(sorted(unknown))}")
        if not changes:
            return True

        try:
            await (
                self.client.table(PROFILES_TABLE)
                .update(dict(changes))
                .eq("user_id", self.user_id)
                .execute()
            )
        except PostgrestError as e:
            logger.error(f"Error updating profile: {e}")
            return False

        self.profile = replace(self.profile, **changes)
        return True

    async def trial_status(self, now: Optional[datetime] = None) -> Optional[TrialStatus]:
        """Current trial status, or None when the profile cannot be read."""
        try:
            row = await self._fetch_row("trial_end_date, subscription_status")
        except PostgrestError as e:
            logger.error(f"Error fetching trial status: {e}")
            return None
        if not row:
            return None
        return TrialStatus.from_row(row, now)

