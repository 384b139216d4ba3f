"""
Cache key generation and TTL calculation utilities.
Key Format: gacha:{resource}:{qualifier}
"""

from datetime import datetime
from typing import Optional
import pytz


def generate_leaderboard_cache_key(leaderboard_type: str, top_n: int) -> str:
    return f"gacha:leaderboard:{leaderboard_type}:{top_n}"


def generate_report_cache_key(report_id: str) -> str:
    return f"gacha:report:{report_id}"


def calculate_day_capped_ttl(
    ttl_seconds: int, tz_name: str = "UTC", now: Optional[datetime] = None
) -> int:
    """
    Cap a TTL so cached data never outlives the current calendar day.

    Daily report figures ("today") roll over at midnight in the dashboard
    timezone.

    Examples:
        23:59:00, ttl=300 → 60 seconds
        12:00:00, ttl=300 → 300 seconds

    Returns:
        TTL in seconds (1-ttl_seconds)
    """
    tz = pytz.timezone(tz_name)
    now_local = now.astimezone(tz) if now else datetime.now(tz)

    seconds_to_midnight = 86400 - (
        now_local.hour * 3600 + now_local.minute * 60 + now_local.second
    )
    return max(1, min(ttl_seconds, seconds_to_midnight))
