"""
Ledger 애플리케이션 서비스

화면 계층이 호출하는 유스케이스 모음.
입력값 검증 후 잔액 변경은 모두 BalanceEngine에 위임.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from core.constants import Tables
from core.ledger.balance import order_entries
from core.ledger.engine import BalanceEngine, RecalculationResult
from core.ledger.exceptions import PartyNotFoundError, ValidationError
from core.ledger.models import Entry, InsertedEntry, NewEntry, Party
from core.ledger.store import LedgerStore
from core.ledger.types import BalanceStatus, EntryDirection, PartyType
from core.utils.timezone import now_utc

logger = logging.getLogger(__name__)


@dataclass
class PartyDetail:
    """거래처 상세 (거래 내역은 최신순)"""

    party: Party
    entries: list[Entry]

    @property
    def status(self) -> BalanceStatus:
        return BalanceStatus.of(self.party.balance)


@dataclass
class LedgerSummary:
    """대시보드 요약

    total_receivable: 양수 잔액 합계 (받을 돈)
    total_payable: 음수 잔액 절대값 합계 (줄 돈)
    """

    total_receivable: float = 0.0
    total_payable: float = 0.0
    statuses: dict[int, BalanceStatus] = field(default_factory=dict)


# -------------------------------------------------------------------------
# 입력 검증
# -------------------------------------------------------------------------


def validate_amount(amount: Any) -> float:
    """금액 검증 (숫자, 유한, 0 초과)

    Raises:
        ValidationError: 검증 실패
    """
    if isinstance(amount, bool):
        raise ValidationError(f"Amount must be a number: {amount!r}")
    try:
        value = float(amount)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Amount must be a number: {amount!r}") from e
    if not math.isfinite(value) or value <= 0:
        raise ValidationError(f"Amount must be greater than 0: {amount!r}")
    return value


def validate_direction(direction: Any) -> EntryDirection:
    try:
        return EntryDirection(direction)
    except ValueError as e:
        raise ValidationError(f"Invalid direction: {direction!r}") from e


def validate_party_type(party_type: Any) -> PartyType:
    try:
        return PartyType(party_type)
    except ValueError as e:
        raise ValidationError(f"Invalid party type: {party_type!r}") from e


def validate_date(value: Any) -> date:
    """date, datetime 또는 'YYYY-MM-DD' 문자열 허용"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError as e:
            raise ValidationError(f"Invalid date: {value!r}") from e
    raise ValidationError(f"Invalid date: {value!r}")


def _require_text(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} is required")
    return value.strip()


class LedgerService:
    """Ledger 유스케이스

    Args:
        store: LedgerStore
        engine: BalanceEngine (None이면 store로 생성)
    """

    def __init__(self, store: LedgerStore, engine: BalanceEngine | None = None):
        self.store = store
        self.engine = engine or BalanceEngine(store)

    # -------------------------------------------------------------------------
    # 거래처
    # -------------------------------------------------------------------------

    async def create_party(
        self,
        name: str,
        phone: str,
        party_type: PartyType | str = PartyType.CUSTOMER,
    ) -> Party:
        """거래처 생성 (잔액 0)"""
        name = _require_text(name, "name")
        phone = _require_text(phone, "phone")
        ptype = validate_party_type(party_type)

        async def block() -> Party:
            party_id = await self.store.insert_party(name, phone, ptype)
            party = await self.store.get_party(party_id)
            assert party is not None
            return party

        party = await self.store.run_atomic((Tables.PARTY,), block)
        logger.info(f"Party created: {party.id} ({party.name})")
        return party

    async def update_party(
        self,
        party_id: int,
        name: str | None = None,
        phone: str | None = None,
        party_type: PartyType | str | None = None,
    ) -> Party:
        """거래처 정보 수정 (잔액은 변경하지 않음)"""
        fields: dict[str, Any] = {}
        if name is not None:
            fields["name"] = _require_text(name, "name")
        if phone is not None:
            fields["phone"] = _require_text(phone, "phone")
        if party_type is not None:
            fields["type"] = validate_party_type(party_type)

        async def block() -> Party:
            if await self.store.get_party(party_id) is None:
                raise PartyNotFoundError(party_id)
            if fields:
                await self.store.update_party(
                    party_id, {**fields, "updated_at": now_utc()}
                )
            party = await self.store.get_party(party_id)
            assert party is not None
            return party

        return await self.store.run_atomic((Tables.PARTY,), block)

    async def delete_party(self, party_id: int) -> int:
        """거래처 및 거래 내역 삭제

        Returns:
            삭제된 거래 내역 수
        """
        return await self.engine.delete_party(party_id)

    async def list_parties(self, search: str | None = None) -> list[Party]:
        """거래처 목록 (search: 이름/전화번호 부분 일치)"""

        async def block() -> list[Party]:
            if search and search.strip():
                return await self.store.search_parties(search.strip())
            return await self.store.list_parties()

        return await self.store.run_atomic((Tables.PARTY,), block)

    async def get_party_detail(self, party_id: int) -> PartyDetail:
        """거래처 + 거래 내역 (최신순)

        Raises:
            PartyNotFoundError: 거래처가 없는 경우
        """

        async def block() -> PartyDetail:
            party = await self.store.get_party(party_id)
            if party is None:
                raise PartyNotFoundError(party_id)
            entries = await self.store.list_entries(party_id)
            ordered = order_entries(entries)
            ordered.reverse()
            return PartyDetail(party=party, entries=ordered)  # type: ignore[arg-type]

        return await self.store.run_atomic((Tables.PARTY, Tables.ENTRY), block)

    async def get_summary(self) -> LedgerSummary:
        """받을 돈/줄 돈 합계"""
        summary = LedgerSummary()
        for party in await self.list_parties():
            if party.balance > 0:
                summary.total_receivable += party.balance
            elif party.balance < 0:
                summary.total_payable += abs(party.balance)
            summary.statuses[party.id] = BalanceStatus.of(party.balance)
        return summary

    # -------------------------------------------------------------------------
    # 거래 내역
    # -------------------------------------------------------------------------

    async def add_entry(
        self,
        party_id: int,
        direction: EntryDirection | str,
        amount: Any,
        entry_date: date | str,
        note: str | None = None,
    ) -> InsertedEntry:
        """거래 내역 추가 (과거 날짜 포함)

        Raises:
            ValidationError: 입력값 오류
            PartyNotFoundError: 거래처가 없는 경우
        """
        candidate = NewEntry(
            party_id=party_id,
            direction=validate_direction(direction),
            amount=validate_amount(amount),
            date=validate_date(entry_date),
            note=note or None,
        )
        inserted = await self.engine.recalculate_with_new_entry(party_id, candidate)
        logger.info(
            f"Entry added: {inserted.entry_id} (party={party_id}, "
            f"balance={inserted.party_balance})"
        )
        return inserted

    async def edit_entry(
        self,
        entry_id: int,
        direction: EntryDirection | str | None = None,
        amount: Any = None,
        entry_date: date | str | None = None,
        note: str | None = None,
    ) -> RecalculationResult:
        """거래 내역 수정 후 재계산

        note에 빈 문자열을 넘기면 메모 삭제.
        """
        fields: dict[str, Any] = {}
        if direction is not None:
            fields["direction"] = validate_direction(direction)
        if amount is not None:
            fields["amount"] = validate_amount(amount)
        if entry_date is not None:
            fields["date"] = validate_date(entry_date)
        if note is not None:
            fields["note"] = note or None

        result = await self.engine.update_entry(entry_id, fields)
        logger.info(f"Entry updated: {entry_id} (party={result.party_id})")
        return result

    async def delete_entry(self, entry_id: int, party_id: int) -> RecalculationResult:
        """거래 내역 삭제 후 재계산"""
        result = await self.engine.delete_entry(entry_id, party_id)
        logger.info(f"Entry deleted: {entry_id} (party={party_id})")
        return result

    async def recalculate_all(self) -> list[RecalculationResult]:
        """전체 거래처 재계산 (복구용)"""
        results = []
        for party in await self.list_parties():
            results.append(await self.engine.recalculate(party.id))
        changed = sum(1 for r in results if r.updated_entries or r.party_updated)
        logger.info(f"Recalculated {len(results)} parties ({changed} changed)")
        return results
