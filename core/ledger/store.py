"""
Ledger 저장소

party/entry 테이블 CRUD 및 원자적 트랜잭션 (SQLite 구현)
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Sequence, TypeVar

from core.constants import Tables
from core.ledger.models import Entry, Party
from core.ledger.types import (
    ENTRY_UPDATABLE_FIELDS,
    PARTY_UPDATABLE_FIELDS,
    EntryDirection,
    PartyType,
)
from core.utils.timezone import format_date, format_timestamp, now_utc

if TYPE_CHECKING:
    from adapters.db.sqlite_adapter import SQLiteAdapter

logger = logging.getLogger(__name__)

T = TypeVar("T")

PARTY_COLUMNS = "id, name, phone, type, balance, created_at, updated_at"
ENTRY_COLUMNS = "id, party_id, direction, amount, date, note, balance_after, created_at"

KNOWN_TABLES: frozenset[str] = frozenset({Tables.PARTY, Tables.ENTRY})


def _to_db_value(column: str, value: Any) -> Any:
    """Python 값 → DB 저장 값"""
    if value is None:
        return None
    if column == "date":
        return format_date(value)
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, (EntryDirection, PartyType)):
        return value.value
    if column in ("amount", "balance", "balance_after"):
        return float(value)
    return value


def _build_update(
    table: str,
    allowed: frozenset[str],
    fields: Mapping[str, Any],
) -> tuple[str, list[Any]]:
    """UPDATE SET 절 생성 (화이트리스트 컬럼만 허용)"""
    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Unknown {table} fields: {sorted(unknown)}")

    columns = sorted(fields)
    set_clause = ", ".join(f"{column} = ?" for column in columns)
    values = [_to_db_value(column, fields[column]) for column in columns]
    return set_clause, values


class LedgerStore:
    """Ledger 저장소

    party/entry 레코드를 저장하고 조회하는 클래스.
    잔액(balance, balance_after)은 BalanceEngine을 통해서만 변경해야 함.

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    # -------------------------------------------------------------------------
    # 트랜잭션
    # -------------------------------------------------------------------------

    async def run_atomic(
        self,
        tables: Sequence[str],
        block: Callable[[], Awaitable[T]],
    ) -> T:
        """block을 하나의 트랜잭션 안에서 실행

        SQLite는 DB 단위로 쓰기 잠금을 잡으므로 tables는 검증용으로만 사용.

        Raises:
            ValueError: 알 수 없는 테이블 이름
        """
        unknown = set(tables) - KNOWN_TABLES
        if unknown:
            raise ValueError(f"Unknown tables: {sorted(unknown)}")

        async with self.db.transaction():
            return await block()

    # -------------------------------------------------------------------------
    # Party
    # -------------------------------------------------------------------------

    async def insert_party(
        self,
        name: str,
        phone: str,
        party_type: PartyType | str,
        created_at: datetime | None = None,
    ) -> int:
        """거래처 생성 (balance = 0)

        Returns:
            생성된 party id
        """
        ts = format_timestamp(created_at or now_utc())
        party_id = await self.db.insert(
            """
            INSERT INTO party (name, phone, type, balance, created_at, updated_at)
            VALUES (?, ?, ?, 0, ?, ?)
            """,
            (name, phone, PartyType(party_type).value, ts, ts),
        )
        logger.debug(f"Inserted party: {party_id}")
        return party_id

    async def get_party(self, party_id: int) -> Party | None:
        """거래처 조회

        Returns:
            Party (없으면 None)
        """
        row = await self.db.fetchone(
            f"SELECT {PARTY_COLUMNS} FROM party WHERE id = ?",
            (party_id,),
        )
        return Party.from_row(row) if row else None

    async def list_parties(self) -> list[Party]:
        """전체 거래처 (최근 수정 순)"""
        rows = await self.db.fetchall(
            f"SELECT {PARTY_COLUMNS} FROM party ORDER BY updated_at DESC, id DESC"
        )
        return [Party.from_row(row) for row in rows]

    async def search_parties(self, query: str) -> list[Party]:
        """이름 또는 전화번호 부분 일치 검색

        query는 문자 그대로 비교 (%, _ 도 일반 문자).
        이름은 대소문자 무시, 전화번호는 그대로 비교.
        """
        rows = await self.db.fetchall(
            f"""
            SELECT {PARTY_COLUMNS} FROM party
            WHERE instr(lower(name), lower(?)) > 0 OR instr(phone, ?) > 0
            ORDER BY updated_at DESC, id DESC
            """,
            (query, query),
        )
        return [Party.from_row(row) for row in rows]

    async def update_party(self, party_id: int, fields: Mapping[str, Any]) -> None:
        """거래처 필드 부분 변경

        Raises:
            ValueError: 변경 불가 필드가 포함된 경우
        """
        if not fields:
            return
        set_clause, values = _build_update(Tables.PARTY, PARTY_UPDATABLE_FIELDS, fields)
        await self.db.execute(
            f"UPDATE party SET {set_clause} WHERE id = ?",
            (*values, party_id),
        )

    async def delete_party(self, party_id: int) -> None:
        """거래처 삭제 (거래 내역은 호출자가 먼저 삭제해야 함)"""
        await self.db.execute("DELETE FROM party WHERE id = ?", (party_id,))

    # -------------------------------------------------------------------------
    # Entry
    # -------------------------------------------------------------------------

    async def get_entry(self, entry_id: int) -> Entry | None:
        """거래 내역 단건 조회

        Returns:
            Entry (없으면 None)
        """
        row = await self.db.fetchone(
            f"SELECT {ENTRY_COLUMNS} FROM entry WHERE id = ?",
            (entry_id,),
        )
        return Entry.from_row(row) if row else None

    async def list_entries(self, party_id: int) -> list[Entry]:
        """거래처의 전체 거래 내역

        순서는 보장하지 않음. 시간순 정렬은 balance.order_entries 사용.
        """
        rows = await self.db.fetchall(
            f"SELECT {ENTRY_COLUMNS} FROM entry WHERE party_id = ?",
            (party_id,),
        )
        return [Entry.from_row(row) for row in rows]

    async def insert_entry(
        self,
        party_id: int,
        direction: EntryDirection | str,
        amount: float,
        entry_date: date,
        note: str | None,
        balance_after: float,
        created_at: datetime,
    ) -> int:
        """거래 내역 삽입

        Returns:
            생성된 entry id
        """
        entry_id = await self.db.insert(
            """
            INSERT INTO entry (
                party_id, direction, amount, date, note, balance_after, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                party_id,
                EntryDirection(direction).value,
                float(amount),
                format_date(entry_date),
                note,
                float(balance_after),
                format_timestamp(created_at),
            ),
        )
        logger.debug(f"Inserted entry: {entry_id} (party={party_id})")
        return entry_id

    async def update_entry(self, entry_id: int, fields: Mapping[str, Any]) -> None:
        """거래 내역 필드 부분 변경

        Raises:
            ValueError: 변경 불가 필드가 포함된 경우
        """
        if not fields:
            return
        set_clause, values = _build_update(Tables.ENTRY, ENTRY_UPDATABLE_FIELDS, fields)
        await self.db.execute(
            f"UPDATE entry SET {set_clause} WHERE id = ?",
            (*values, entry_id),
        )

    async def delete_entry(self, entry_id: int) -> None:
        """거래 내역 삭제"""
        await self.db.execute("DELETE FROM entry WHERE id = ?", (entry_id,))

    async def delete_all_entries(self, party_id: int) -> int:
        """거래처의 거래 내역 전체 삭제

        Returns:
            삭제된 행 수
        """
        cursor = await self.db.execute(
            "DELETE FROM entry WHERE party_id = ?",
            (party_id,),
        )
        return cursor.rowcount
