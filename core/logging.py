"""
Ledger 로깅 설정

ledger.yaml의 log_level / log_dir을 그대로 따름.
- 콘솔: log_level
- 파일: log_dir/<프로세스명>.log, 매일 자정 교체, 최소 INFO까지 기록

사용법:
    from core.logging import setup_logging
    setup_logging("ledger_report")                 # Settings 싱글턴 설정 사용
    setup_logging("ledger_report", load_config(p))  # 명시적 설정
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.config.loader import LedgerConfig, get_settings


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_BACKUP_COUNT = 7

# 쿼리/이벤트 루프 단위로 로그를 남기는 라이브러리
QUIET_LOGGERS = ("aiosqlite", "asyncio")


def get_log_file_path(process_name: str, config: LedgerConfig) -> Path:
    """프로세스별 로그 파일 경로"""
    return config.log_dir / f"{process_name}.log"


def _console_handler(level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _file_handler(
    log_file: Path,
    level: int,
    formatter: logging.Formatter,
) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        filename=log_file,
        when="midnight",
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.suffix = "%Y-%m-%d"  # ledger_report.log.2024-01-31
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    process_name: str,
    config: LedgerConfig | None = None,
) -> logging.Logger:
    """루트 로거에 콘솔/파일 핸들러 설치

    다시 호출하면 기존 핸들러를 닫고 교체.

    Args:
        process_name: 로그 파일명으로 사용
        config: LedgerConfig (None이면 get_settings().config)

    Returns:
        루트 Logger
    """
    if config is None:
        config = get_settings().config

    console_level = config.log_level_value
    # WARNING 이상으로 콘솔을 줄여도 파일에는 INFO 이력 유지
    file_level = min(console_level, logging.INFO)
    log_file = get_log_file_path(process_name, config)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    root.addHandler(_console_handler(console_level, formatter))
    root.addHandler(_file_handler(log_file, file_level, formatter))
    root.setLevel(file_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root.info(
        f"Logging ready: {process_name} "
        f"(console={config.log_level}, file={log_file})"
    )
    return root
