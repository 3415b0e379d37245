"""
pytest 공통 fixture 정의

설정 파일, 임시 DB, Ledger 저장소/엔진/서비스 fixture
"""

import tempfile
from pathlib import Path

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import Settings
from core.ledger import BalanceEngine, LedgerService, LedgerStore, init_ledger_schema


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_config_file(temp_dir: Path) -> Path:
    """테스트용 ledger.yaml 파일 생성"""
    config_content = """# 테스트용 ledger.yaml
db_path: data/test_ledger.db
log_level: debug
busy_timeout_ms: 5000
"""
    config_path = temp_dir / "ledger.yaml"
    config_path.write_text(config_content, encoding="utf-8")
    return config_path


@pytest.fixture
def temp_config_file_invalid_level(temp_dir: Path) -> Path:
    """잘못된 log_level의 ledger.yaml 파일 생성"""
    config_path = temp_dir / "ledger_invalid.yaml"
    config_path.write_text("log_level: verbose\n", encoding="utf-8")
    return config_path


@pytest.fixture(autouse=True)
def reset_settings() -> None:
    """Settings 싱글턴 초기화"""
    Settings.reset()
    yield
    Settings.reset()


@pytest_asyncio.fixture
async def db(tmp_path: Path) -> SQLiteAdapter:
    """Ledger 스키마가 생성된 임시 DB"""
    adapter = SQLiteAdapter(tmp_path / "test_ledger.db")
    await adapter.connect()
    await init_ledger_schema(adapter)
    yield adapter
    await adapter.close()


@pytest.fixture
def ledger_store(db: SQLiteAdapter) -> LedgerStore:
    """LedgerStore 인스턴스"""
    return LedgerStore(db)


@pytest.fixture
def engine(ledger_store: LedgerStore) -> BalanceEngine:
    """BalanceEngine 인스턴스"""
    return BalanceEngine(ledger_store)


@pytest.fixture
def service(ledger_store: LedgerStore, engine: BalanceEngine) -> LedgerService:
    """LedgerService 인스턴스"""
    return LedgerService(ledger_store, engine)
