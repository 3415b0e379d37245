"""
잔액 재계산 로직 (순수 함수)

거래처의 거래 내역 집합 → 시간순 정렬 → 누적 잔액 계산 → 변경분 산출.
DB 접근 없음. engine.py가 트랜잭션 안에서 호출.

정렬 키: (date 오름차순, created_at 오름차순, 저장 여부, id 오름차순)
- 같은 (date, created_at)이면 저장된 Entry가 먼저, id 오름차순
- 저장 전 NewEntry는 같은 (date, created_at)의 저장된 Entry 뒤
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Sequence, Union

from core.ledger.models import Entry, NewEntry

LedgerItem = Union[Entry, NewEntry]


@dataclass(frozen=True)
class BalanceUpdate:
    """balance_after 변경이 필요한 저장된 Entry"""

    entry_id: int
    old_balance: float
    new_balance: float


@dataclass
class RecalculationPlan:
    """재계산 결과

    Attributes:
        ordered: 시간순 정렬된 항목
        balances: ordered와 같은 순서의 누적 잔액
        updates: 저장값과 다른 Entry 목록 (쓰기 대상)
        final_balance: 거래처 잔액 (항목이 없으면 0)
    """

    ordered: list[LedgerItem]
    balances: list[float]
    updates: list[BalanceUpdate] = field(default_factory=list)
    final_balance: float = 0.0


@dataclass
class InsertionPlan(RecalculationPlan):
    """저장 전 NewEntry를 포함한 재계산 결과

    Attributes:
        candidate_balance: NewEntry의 balance_after
    """

    candidate_balance: float = field(kw_only=True)


def chronological_key(item: LedgerItem) -> tuple[date, datetime, int, int]:
    """시간순 정렬 키

    id 없는 NewEntry도 값만으로 순위를 매길 수 있음.
    """
    if isinstance(item, Entry):
        return (item.date, item.created_at, 0, item.id)
    return (item.date, item.created_at, 1, 0)


def order_entries(items: Iterable[LedgerItem]) -> list[LedgerItem]:
    """시간순 정렬 (안정적, 결정적)"""
    return sorted(items, key=chronological_key)


def running_balances(ordered: Sequence[LedgerItem]) -> list[float]:
    """누적 잔액 계산

    balance_0 = 0, balance_i = balance_{i-1} + signed_amount_i
    """
    balances: list[float] = []
    running = 0.0
    for item in ordered:
        running += item.signed_amount
        balances.append(running)
    return balances


def changed_balances(
    ordered: Sequence[LedgerItem],
    balances: Sequence[float],
) -> list[BalanceUpdate]:
    """저장된 balance_after와 계산값이 다른 Entry만 추출 (NewEntry 제외)"""
    return [
        BalanceUpdate(
            entry_id=item.id,
            old_balance=item.balance_after,
            new_balance=balance,
        )
        for item, balance in zip(ordered, balances)
        if isinstance(item, Entry) and item.balance_after != balance
    ]


def plan_recalculation(entries: Iterable[Entry]) -> RecalculationPlan:
    """저장된 Entry만으로 재계산 계획 생성

    Args:
        entries: 거래처의 저장된 Entry 전체 (순서 무관)
    """
    ordered = order_entries(entries)
    balances = running_balances(ordered)
    return RecalculationPlan(
        ordered=ordered,
        balances=balances,
        updates=changed_balances(ordered, balances),
        # 항목이 없으면 정확히 0
        final_balance=balances[-1] if balances else 0.0,
    )


def plan_insertion(entries: Iterable[Entry], candidate: NewEntry) -> InsertionPlan:
    """저장 전 NewEntry를 함께 정렬하여 재계산 계획 생성

    Args:
        entries: 거래처의 저장된 Entry 전체 (순서 무관)
        candidate: 삽입할 NewEntry

    Returns:
        InsertionPlan (candidate_balance는 항상 계산됨)
    """
    ordered = order_entries([*entries, candidate])
    balances = running_balances(ordered)
    position = next(i for i, item in enumerate(ordered) if item is candidate)
    return InsertionPlan(
        ordered=ordered,
        balances=balances,
        updates=changed_balances(ordered, balances),
        final_balance=balances[-1],
        candidate_balance=balances[position],
    )
