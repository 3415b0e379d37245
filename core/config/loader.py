"""
설정 로더

ledger.yaml 로드 및 LedgerConfig 생성
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from core.constants import Defaults, Paths, PROJECT_ROOT


VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class LedgerConfig:
    """Ledger 설정 (ledger.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    db_path: Path
    log_level: str = Defaults.LOG_LEVEL
    busy_timeout_ms: int = Defaults.BUSY_TIMEOUT_MS
    log_dir: Path = Paths.LOGS_DIR

    @property
    def log_level_value(self) -> int:
        """logging 모듈 레벨 값"""
        return getattr(logging, self.log_level)


class ConfigLoadError(Exception):
    """설정 로드 실패 예외"""

    pass


def default_config() -> LedgerConfig:
    """설정 파일이 없을 때 사용하는 기본 설정"""
    return LedgerConfig(db_path=Paths.LEDGER_DB)


def _resolve_path(raw: object, default: Path) -> Path:
    """설정 경로 해석 (상대 경로는 프로젝트 루트 기준)"""
    if raw is None:
        return default
    path = Path(str(raw))
    return path if path.is_absolute() else PROJECT_ROOT / path


def load_config(path: Path | None = None) -> LedgerConfig:
    """ledger.yaml 파일 로드

    파일이 없으면 기본 설정 반환.

    Args:
        path: ledger.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        LedgerConfig 인스턴스

    Raises:
        ConfigLoadError: 형식이 잘못된 경우
    """
    if path is None:
        path = Paths.CONFIG_FILE

    if not path.exists():
        return default_config()

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"ledger.yaml 파싱 실패: {e}") from e

    if data is None:
        return default_config()

    if not isinstance(data, dict):
        raise ConfigLoadError("ledger.yaml 최상위는 mapping이어야 합니다")

    db_path = _resolve_path(data.get("db_path"), Paths.LEDGER_DB)
    log_dir = _resolve_path(data.get("log_dir"), Paths.LOGS_DIR)

    # log_level 검증
    log_level = str(data.get("log_level", Defaults.LOG_LEVEL)).upper()
    if log_level not in VALID_LOG_LEVELS:
        raise ConfigLoadError(
            f"유효하지 않은 log_level입니다: '{log_level}'. "
            f"유효한 값: {list(VALID_LOG_LEVELS)}"
        )

    # busy_timeout_ms 검증
    busy_timeout_raw = data.get("busy_timeout_ms", Defaults.BUSY_TIMEOUT_MS)
    try:
        busy_timeout_ms = int(busy_timeout_raw)
    except (TypeError, ValueError) as e:
        raise ConfigLoadError(
            f"busy_timeout_ms는 정수여야 합니다: {busy_timeout_raw!r}"
        ) from e
    if busy_timeout_ms < 0:
        raise ConfigLoadError("busy_timeout_ms는 0 이상이어야 합니다")

    return LedgerConfig(
        db_path=db_path,
        log_level=log_level,
        busy_timeout_ms=busy_timeout_ms,
        log_dir=log_dir,
    )


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    ledger.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _config: LedgerConfig | None = None

    def __new__(cls, config_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, config_path: Path | None = None) -> None:
        if self._config is None:
            self._config = load_config(config_path)

    @property
    def config(self) -> LedgerConfig:
        """로드된 설정"""
        assert self._config is not None
        return self._config

    @property
    def db_path(self) -> Path:
        """DB 경로"""
        return self.config.db_path

    @property
    def log_level(self) -> str:
        """로그 레벨 이름"""
        return self.config.log_level

    @property
    def busy_timeout_ms(self) -> int:
        """SQLite busy_timeout (ms)"""
        return self.config.busy_timeout_ms

    @property
    def log_dir(self) -> Path:
        """로그 디렉토리"""
        return self.config.log_dir

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(config_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        config_path: ledger.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(config_path)
