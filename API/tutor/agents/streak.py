"""
Daily streak bookkeeping.

A streak counts consecutive calendar days with at least one completed topic.
Activity on the same day only bumps the day's topic counter; activity the day
after the last one extends the streak; any longer gap restarts it at 1.
"""
from datetime import date, datetime, timedelta, timezone

from tutor.agents.base import BaseAgent
from tutor.core.logging import DOMAIN_PROGRESS, get_domain_logger

logger = get_domain_logger(__name__, DOMAIN_PROGRESS)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class StreakAgent(BaseAgent):
    async def run(self, input_data: dict) -> dict:
        today = input_data.get("today") or utc_today()
        last_activity = input_data.get("last_activity_date")
        current = int(input_data.get("current_streak") or 0)
        longest = int(input_data.get("longest_streak") or 0)
        topics_today = int(input_data.get("topics_completed_today") or 0)

        if last_activity == today:
            return {
                "current_streak": current,
                "longest_streak": max(longest, current),
                "last_activity_date": today,
                "topics_completed_today": topics_today + 1,
                "continued": False,
                "already_active_today": True,
            }

        continued = last_activity == today - timedelta(days=1)
        new_streak = current + 1 if continued else 1
        if last_activity and not continued:
            logger.info("Streak reset | last_activity=%s today=%s previous=%s", last_activity, today, current)

        return {
            "current_streak": new_streak,
            "longest_streak": max(new_streak, longest),
            "last_activity_date": today,
            "topics_completed_today": 1,
            "continued": continued,
            "already_active_today": False,
        }
