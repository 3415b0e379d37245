"""
잔액 재계산 엔진

거래처 단위로 거래 내역을 다시 읽어 시간순 누적 잔액을 계산하고,
값이 바뀐 필드만 저장소에 기록.

모든 읽기/쓰기는 party + entry 테이블에 대한 하나의 run_atomic 블록 안에서 실행.
동시에 들어온 재계산 요청도 트랜잭션 시작 시 최신 상태를 다시 읽으므로
커밋 순서대로 수렴함 (프로세스 내 잠금에 의존하지 않음).

사용 예시:
```python
engine = BalanceEngine(LedgerStore(db))

inserted = await engine.recalculate_with_new_entry(
    party_id,
    NewEntry(party_id=party_id, direction=EntryDirection.CREDIT,
             amount=100.0, date=date(2024, 1, 1)),
)
await engine.delete_entry(inserted.entry_id, party_id)
```
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping

from core.constants import Tables
from core.ledger.balance import RecalculationPlan, plan_insertion, plan_recalculation
from core.ledger.exceptions import EntryNotFoundError, PartyNotFoundError
from core.ledger.models import InsertedEntry, NewEntry, Party
from core.utils.timezone import now_utc

if TYPE_CHECKING:
    from adapters.interfaces import ILedgerStore

logger = logging.getLogger(__name__)

LEDGER_TABLES = (Tables.PARTY, Tables.ENTRY)

# 사용자가 수정할 수 있는 Entry 필드 (balance_after는 엔진만 기록)
EDITABLE_ENTRY_FIELDS = frozenset({"direction", "amount", "date", "note"})


@dataclass(frozen=True)
class RecalculationResult:
    """재계산 결과 요약"""

    party_id: int
    balance: float
    entry_count: int
    updated_entries: int
    party_updated: bool


class BalanceEngine:
    """잔액 재계산 엔진

    Args:
        store: ILedgerStore 구현체
    """

    def __init__(self, store: ILedgerStore):
        self.store = store

    # -------------------------------------------------------------------------
    # 공개 API
    # -------------------------------------------------------------------------

    async def recalculate(self, party_id: int) -> RecalculationResult:
        """저장된 거래 내역으로부터 잔액 재계산

        Raises:
            PartyNotFoundError: 거래처가 없는 경우 (트랜잭션 중단)
        """
        return await self.store.run_atomic(
            LEDGER_TABLES,
            lambda: self._recalculate(party_id),
        )

    async def recalculate_with_new_entry(
        self,
        party_id: int,
        candidate: NewEntry,
    ) -> InsertedEntry:
        """후보 거래 내역을 포함하여 재계산 후 삽입

        기존 Entry의 balance_after 갱신, 후보 삽입, 거래처 잔액 갱신이
        하나의 트랜잭션 안에서 실행됨.

        Returns:
            InsertedEntry (생성된 id, 계산된 balance_after, 거래처 잔액)

        Raises:
            PartyNotFoundError: 거래처가 없는 경우
            ValueError: candidate.party_id가 party_id와 다른 경우
        """
        if candidate.party_id != party_id:
            raise ValueError(
                f"Candidate belongs to party {candidate.party_id}, not {party_id}"
            )

        async def block() -> InsertedEntry:
            party = await self._require_party(party_id)
            entries = await self.store.list_entries(party_id)

            plan = plan_insertion(entries, candidate)
            updated = await self._write_entry_updates(plan)
            entry_id = await self.store.insert_entry(
                party_id=party_id,
                direction=candidate.direction,
                amount=candidate.amount,
                entry_date=candidate.date,
                note=candidate.note,
                balance_after=plan.candidate_balance,
                created_at=candidate.created_at,
            )
            await self._write_party_balance(party, plan.final_balance)

            logger.debug(
                f"Inserted entry {entry_id} for party {party_id}",
                extra={
                    "party_id": party_id,
                    "entry_count": len(plan.ordered),
                    "updated_entries": updated,
                },
            )
            return InsertedEntry(
                entry_id=entry_id,
                balance_after=plan.candidate_balance,
                party_balance=plan.final_balance,
            )

        return await self.store.run_atomic(LEDGER_TABLES, block)

    async def update_entry(
        self,
        entry_id: int,
        fields: Mapping[str, Any],
    ) -> RecalculationResult:
        """거래 내역 수정 후 같은 트랜잭션에서 재계산

        Raises:
            EntryNotFoundError: 거래 내역이 없는 경우
            ValueError: 수정할 수 없는 필드가 포함된 경우
        """
        unknown = set(fields) - EDITABLE_ENTRY_FIELDS
        if unknown:
            raise ValueError(f"Entry fields not editable: {sorted(unknown)}")

        async def block() -> RecalculationResult:
            entry = await self.store.get_entry(entry_id)
            if entry is None:
                raise EntryNotFoundError(entry_id)
            await self.store.update_entry(entry_id, fields)
            return await self._recalculate(entry.party_id)

        return await self.store.run_atomic(LEDGER_TABLES, block)

    async def delete_entry(self, entry_id: int, party_id: int) -> RecalculationResult:
        """거래 내역 삭제 후 같은 트랜잭션에서 재계산

        Raises:
            EntryNotFoundError: 거래 내역이 없는 경우
            ValueError: 거래 내역이 다른 거래처 소속인 경우
        """

        async def block() -> RecalculationResult:
            entry = await self.store.get_entry(entry_id)
            if entry is None:
                raise EntryNotFoundError(entry_id)
            if entry.party_id != party_id:
                raise ValueError(
                    f"Entry {entry_id} belongs to party {entry.party_id}, not {party_id}"
                )
            await self.store.delete_entry(entry_id)
            return await self._recalculate(party_id)

        return await self.store.run_atomic(LEDGER_TABLES, block)

    async def delete_party(self, party_id: int) -> int:
        """거래처와 모든 거래 내역을 하나의 트랜잭션에서 삭제

        Returns:
            삭제된 거래 내역 수

        Raises:
            PartyNotFoundError: 거래처가 없는 경우
        """

        async def block() -> int:
            await self._require_party(party_id)
            deleted = await self.store.delete_all_entries(party_id)
            await self.store.delete_party(party_id)
            return deleted

        deleted = await self.store.run_atomic(LEDGER_TABLES, block)
        logger.info(f"Deleted party {party_id} with {deleted} entries")
        return deleted

    # -------------------------------------------------------------------------
    # 내부 (run_atomic 블록 안에서만 호출)
    # -------------------------------------------------------------------------

    async def _recalculate(self, party_id: int) -> RecalculationResult:
        party = await self._require_party(party_id)
        entries = await self.store.list_entries(party_id)

        plan = plan_recalculation(entries)
        updated = await self._write_entry_updates(plan)
        party_updated = await self._write_party_balance(party, plan.final_balance)

        logger.debug(
            f"Recalculated party {party_id}: balance={plan.final_balance}",
            extra={
                "party_id": party_id,
                "entry_count": len(plan.ordered),
                "updated_entries": updated,
            },
        )
        return RecalculationResult(
            party_id=party_id,
            balance=plan.final_balance,
            entry_count=len(plan.ordered),
            updated_entries=updated,
            party_updated=party_updated,
        )

    async def _require_party(self, party_id: int) -> Party:
        party = await self.store.get_party(party_id)
        if party is None:
            logger.error(f"Recalculation requested for missing party {party_id}")
            raise PartyNotFoundError(party_id)
        return party

    async def _write_entry_updates(self, plan: RecalculationPlan) -> int:
        """balance_after가 바뀐 Entry만 기록"""
        for update in plan.updates:
            await self.store.update_entry(
                update.entry_id,
                {"balance_after": update.new_balance},
            )
        return len(plan.updates)

    async def _write_party_balance(self, party: Party, balance: float) -> bool:
        """거래처 잔액이 바뀐 경우에만 기록 (updated_at 갱신)"""
        if party.balance == balance:
            return False
        await self.store.update_party(
            party.id,
            {"balance": balance, "updated_at": now_utc()},
        )
        return True
