"""
Ledger 스키마 초기화

앱/스크립트 시작 시 자동으로 party, entry 테이블과 인덱스 생성.
CREATE IF NOT EXISTS 패턴으로 안전하게 동작.
"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)


async def init_ledger_schema(db: "SQLiteAdapter") -> None:
    """Ledger 스키마 초기화 (테이블 + 인덱스)

    이미 존재하는 경우 안전하게 건너뜀 (IF NOT EXISTS).

    Args:
        db: SQLiteAdapter 인스턴스
    """
    await _create_ledger_tables(db)
    await _create_ledger_indexes(db)
    await db.commit()
    logger.info("Ledger 스키마 초기화 완료")


async def _create_ledger_tables(db: "SQLiteAdapter") -> None:
    """Ledger 테이블 생성"""

    # party 테이블 (거래처)
    await db.execute("""
        CREATE TABLE IF NOT EXISTS party (
            id               INTEGER PRIMARY KEY AUTOINCREMENT,
            name             TEXT NOT NULL,
            phone            TEXT NOT NULL,
            type             TEXT NOT NULL CHECK (type IN ('customer', 'supplier')),
            balance          REAL NOT NULL DEFAULT 0,
            created_at       TEXT NOT NULL,
            updated_at       TEXT NOT NULL
        )
    """)

    # entry 테이블 (거래 내역)
    await db.execute("""
        CREATE TABLE IF NOT EXISTS entry (
            id               INTEGER PRIMARY KEY AUTOINCREMENT,
            party_id         INTEGER NOT NULL,
            direction        TEXT NOT NULL CHECK (direction IN ('credit', 'debit')),
            amount           REAL NOT NULL CHECK (amount > 0),
            date             TEXT NOT NULL,
            note             TEXT,
            balance_after    REAL NOT NULL DEFAULT 0,
            created_at       TEXT NOT NULL,
            FOREIGN KEY (party_id) REFERENCES party(id)
        )
    """)


async def _create_ledger_indexes(db: "SQLiteAdapter") -> None:
    """인덱스 생성"""
    await db.execute("CREATE INDEX IF NOT EXISTS idx_party_name ON party(name)")
    await db.execute("CREATE INDEX IF NOT EXISTS idx_party_phone ON party(phone)")
    await db.execute(
        "CREATE INDEX IF NOT EXISTS idx_entry_party_chrono "
        "ON entry(party_id, date, created_at)"
    )
