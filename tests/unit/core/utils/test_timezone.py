"""타임존/날짜 유틸리티 테스트"""

from datetime import date, datetime, timedelta, timezone

from core.utils.timezone import (
    format_date,
    format_timestamp,
    now_utc,
    parse_date,
    parse_timestamp,
    to_utc,
)


class TestTimestamps:
    """타임스탬프 변환"""

    def test_now_utc_is_aware(self) -> None:
        assert now_utc().tzinfo is timezone.utc

    def test_naive_treated_as_utc(self) -> None:
        assert to_utc(datetime(2024, 1, 1, 12)) == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)

    def test_offset_converted(self) -> None:
        kst = timezone(timedelta(hours=9))
        converted = to_utc(datetime(2024, 1, 1, 9, tzinfo=kst))

        assert converted == datetime(2024, 1, 1, 0, tzinfo=timezone.utc)
        assert converted.utcoffset() == timedelta(0)

    def test_format_always_has_microseconds(self) -> None:
        """문자열 정렬 = 시간 정렬"""
        whole = format_timestamp(datetime(2024, 1, 1, tzinfo=timezone.utc))
        fraction = format_timestamp(datetime(2024, 1, 1, 0, 0, 0, 1, tzinfo=timezone.utc))

        assert whole == "2024-01-01T00:00:00.000000+00:00"
        assert whole < fraction

    def test_parse(self) -> None:
        dt = datetime(2024, 3, 4, 5, 6, 7, 891011, tzinfo=timezone.utc)

        assert parse_timestamp(format_timestamp(dt)) == dt


class TestDates:
    """날짜 변환"""

    def test_format_date(self) -> None:
        assert format_date(date(2024, 1, 2)) == "2024-01-02"
        assert format_date(datetime(2024, 1, 2, 23, 59)) == "2024-01-02"

    def test_parse_date(self) -> None:
        assert parse_date("2024-01-02") == date(2024, 1, 2)
        assert parse_date("2024-01-02T10:00:00") == date(2024, 1, 2)
