from datetime import datetime, timezone
from typing import Any, Optional
import logging

logger = logging.getLogger(__name__)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    API 타임스탬프를 timezone-aware datetime으로 변환

    Args:
        value: ISO 8601 문자열, datetime, epoch milliseconds 또는 None

    Returns:
        Optional[datetime]: 변환된 datetime (naive 값은 UTC로 간주) 또는 None

    Examples:
        >>> parse_timestamp("2024-01-01T00:00:00Z")
        datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)

        >>> parse_timestamp(None)
        None
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        try:
            parsed = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            logger.warning(f"Epoch 값 변환 실패: {value}")
            return None
    elif isinstance(value, str):
        if not value.strip():
            return None
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            logger.warning(f"타임스탬프 문자열 파싱 실패: {value}")
            return None
    else:
        logger.warning(f"지원하지 않는 타입: {type(value)} - {value}")
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_iso(value: datetime) -> str:
    """UTC ISO 8601 문자열 (밀리초, Z 접미사)"""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )
