"""core/logging.py 테스트"""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

import pytest

from core.config.loader import LedgerConfig, get_settings
from core.logging import LOG_FILE_BACKUP_COUNT, get_log_file_path, setup_logging


@pytest.fixture
def restore_root_logger():
    """테스트 후 루트 로거 핸들러 복원"""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def make_config(tmp_path: Path, log_level: str = "INFO") -> LedgerConfig:
    return LedgerConfig(
        db_path=tmp_path / "ledger.db",
        log_level=log_level,
        log_dir=tmp_path / "logs",
    )


def split_handlers(root: logging.Logger) -> tuple[list, list]:
    files = [h for h in root.handlers if isinstance(h, TimedRotatingFileHandler)]
    consoles = [h for h in root.handlers if h not in files]
    return consoles, files


class TestSetupLogging:
    """setup_logging 테스트"""

    def test_uses_config_level_and_dir(self, tmp_path: Path, restore_root_logger) -> None:
        config = make_config(tmp_path, "WARNING")

        root = setup_logging("ledger", config)

        consoles, files = split_handlers(root)
        assert [h.level for h in consoles] == [logging.WARNING]
        assert len(files) == 1
        assert files[0].level == logging.INFO
        assert files[0].backupCount == LOG_FILE_BACKUP_COUNT
        assert Path(files[0].baseFilename) == tmp_path / "logs" / "ledger.log"
        assert (tmp_path / "logs" / "ledger.log").exists()

    def test_debug_level_reaches_file(self, tmp_path: Path, restore_root_logger) -> None:
        root = setup_logging("ledger", make_config(tmp_path, "DEBUG"))

        _, files = split_handlers(root)
        assert files[0].level == logging.DEBUG
        assert root.level == logging.DEBUG

    def test_falls_back_to_settings(
        self, temp_config_file: Path, tmp_path: Path, restore_root_logger, monkeypatch
    ) -> None:
        """config 생략 시 Settings 싱글턴 설정 사용"""
        settings = get_settings(temp_config_file)
        monkeypatch.setattr(
            settings, "_config", make_config(tmp_path, settings.log_level)
        )

        root = setup_logging("ledger")

        consoles, _ = split_handlers(root)
        assert consoles[0].level == logging.DEBUG

    def test_repeated_setup_replaces_handlers(
        self, tmp_path: Path, restore_root_logger
    ) -> None:
        config = make_config(tmp_path)
        setup_logging("ledger", config)
        root = setup_logging("ledger", config)

        assert len(root.handlers) == 2

    def test_library_loggers_quieted(self, tmp_path: Path, restore_root_logger) -> None:
        setup_logging("ledger", make_config(tmp_path, "DEBUG"))

        assert logging.getLogger("aiosqlite").level == logging.WARNING

    def test_log_file_path(self, tmp_path: Path) -> None:
        config = make_config(tmp_path)

        assert get_log_file_path("ledger", config) == tmp_path / "logs" / "ledger.log"
