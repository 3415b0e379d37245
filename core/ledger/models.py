"""
Ledger 레코드 모델

Party(거래처), Entry(저장된 거래 내역), NewEntry(아직 저장 전인 거래 내역)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from core.ledger.types import EntryDirection, PartyType
from core.utils.timezone import now_utc, parse_date, parse_timestamp, to_utc


@dataclass
class Party:
    """거래처

    balance는 재계산 엔진만 변경함 (UI/서비스 코드에서 직접 쓰지 않음).
    """

    id: int
    name: str
    phone: str
    type: PartyType
    balance: float
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> Party:
        """DB 행 → Party

        컬럼 순서: id, name, phone, type, balance, created_at, updated_at
        """
        return cls(
            id=row[0],
            name=row[1],
            phone=row[2],
            type=PartyType(row[3]),
            balance=float(row[4]),
            created_at=parse_timestamp(row[5]),
            updated_at=parse_timestamp(row[6]),
        )


@dataclass
class Entry:
    """저장된 거래 내역 (id 보유)"""

    id: int
    party_id: int
    direction: EntryDirection
    amount: float
    date: date
    balance_after: float
    created_at: datetime
    note: str | None = None

    @property
    def signed_amount(self) -> float:
        """credit: +amount, debit: -amount"""
        return signed_amount(self.direction, self.amount)

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> Entry:
        """DB 행 → Entry

        컬럼 순서: id, party_id, direction, amount, date, note, balance_after, created_at
        """
        return cls(
            id=row[0],
            party_id=row[1],
            direction=EntryDirection(row[2]),
            amount=float(row[3]),
            date=parse_date(row[4]),
            note=row[5],
            balance_after=float(row[6]),
            created_at=parse_timestamp(row[7]),
        )


@dataclass
class NewEntry:
    """저장 전 거래 내역 (후보)

    id와 balance_after가 없음. 재계산 시 기존 Entry들과 함께 정렬되고,
    계산된 balance_after와 함께 삽입됨.
    """

    party_id: int
    direction: EntryDirection
    amount: float
    date: date
    note: str | None = None
    created_at: datetime = field(default_factory=now_utc)

    def __post_init__(self) -> None:
        # 저장된 Entry와 비교 가능하도록 정규화 (date, aware UTC)
        if isinstance(self.date, datetime):
            self.date = self.date.date()
        self.created_at = to_utc(self.created_at)

    @property
    def signed_amount(self) -> float:
        """credit: +amount, debit: -amount"""
        return signed_amount(self.direction, self.amount)


@dataclass(frozen=True)
class InsertedEntry:
    """recalculate_with_new_entry 결과"""

    entry_id: int
    balance_after: float
    party_balance: float


def signed_amount(direction: EntryDirection | str, amount: float) -> float:
    """방향에 따른 부호 적용 금액"""
    if EntryDirection(direction) == EntryDirection.CREDIT:
        return amount
    return -amount
