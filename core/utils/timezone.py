"""
타임존 유틸리티

내부 저장: UTC ISO-8601 문자열 원칙 준수를 위한 헬퍼 함수
"""

from datetime import date, datetime, timezone


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)

    datetime.now(timezone.utc)의 축약형.

    Returns:
        현재 UTC 시간 (tzinfo=timezone.utc)
    """
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """datetime을 UTC로 변환

    Args:
        dt: datetime 객체 (naive면 UTC로 간주)

    Returns:
        UTC 타임존의 datetime
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """DB 저장용 타임스탬프 문자열

    마이크로초까지 항상 포함하여 문자열 정렬 = 시간 정렬이 되도록 함.

    Example:
        >>> format_timestamp(datetime(2024, 1, 1, tzinfo=timezone.utc))
        '2024-01-01T00:00:00.000000+00:00'
    """
    return to_utc(dt).isoformat(timespec="microseconds")


def parse_timestamp(value: str) -> datetime:
    """DB 타임스탬프 문자열 → UTC datetime"""
    return to_utc(datetime.fromisoformat(value))


def format_date(value: date) -> str:
    """DB 저장용 날짜 문자열 (YYYY-MM-DD)"""
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def parse_date(value: str) -> date:
    """DB 날짜 문자열 → date

    시간 성분이 포함된 값도 허용 (날짜만 사용).
    """
    if len(value) > 10:
        return datetime.fromisoformat(value).date()
    return date.fromisoformat(value)
