"""
유틸리티 패키지

타임존/날짜 처리 등 공통 유틸리티
"""

from core.utils.timezone import (
    now_utc,
    to_utc,
    format_timestamp,
    parse_timestamp,
    format_date,
    parse_date,
)

__all__ = [
    "now_utc",
    "to_utc",
    "format_timestamp",
    "parse_timestamp",
    "format_date",
    "parse_date",
]
