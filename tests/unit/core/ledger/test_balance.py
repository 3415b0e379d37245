"""잔액 재계산 순수 로직 테스트"""

from datetime import date, datetime, timedelta, timezone

import pytest

from core.ledger.balance import (
    chronological_key,
    order_entries,
    plan_insertion,
    plan_recalculation,
    running_balances,
)
from core.ledger.models import Entry, NewEntry
from core.ledger.types import EntryDirection

T0 = datetime(2024, 1, 1, 9, 0, 0, tzinfo=timezone.utc)


def make_entry(
    entry_id: int,
    direction: EntryDirection,
    amount: float,
    day: date,
    balance_after: float = 0.0,
    created_at: datetime | None = None,
) -> Entry:
    return Entry(
        id=entry_id,
        party_id=1,
        direction=direction,
        amount=amount,
        date=day,
        balance_after=balance_after,
        created_at=created_at or T0 + timedelta(seconds=entry_id),
    )


class TestChronologicalOrder:
    """시간순 정렬 테스트"""

    def test_sorted_by_date_first(self) -> None:
        """date가 created_at보다 우선"""
        later_created = make_entry(1, EntryDirection.CREDIT, 10, date(2024, 1, 1),
                                   created_at=T0 + timedelta(days=5))
        earlier_created = make_entry(2, EntryDirection.CREDIT, 10, date(2024, 1, 2),
                                     created_at=T0)

        ordered = order_entries([earlier_created, later_created])

        assert [e.id for e in ordered] == [1, 2]

    def test_same_date_sorted_by_created_at(self) -> None:
        """같은 날짜는 created_at 오름차순"""
        day = date(2024, 3, 1)
        a = make_entry(5, EntryDirection.CREDIT, 1, day, created_at=T0 + timedelta(minutes=3))
        b = make_entry(6, EntryDirection.CREDIT, 1, day, created_at=T0 + timedelta(minutes=1))
        c = make_entry(7, EntryDirection.CREDIT, 1, day, created_at=T0 + timedelta(minutes=2))

        ordered = order_entries([a, b, c])

        assert [e.id for e in ordered] == [6, 7, 5]

    def test_identical_date_and_created_at_falls_back_to_id(self) -> None:
        """(date, created_at)이 같으면 id 오름차순"""
        day = date(2024, 3, 1)
        entries = [make_entry(i, EntryDirection.DEBIT, 1, day, created_at=T0) for i in (9, 3, 7)]

        assert [e.id for e in order_entries(entries)] == [3, 7, 9]
        assert [e.id for e in order_entries(reversed(entries))] == [3, 7, 9]

    def test_candidate_ranked_by_value(self) -> None:
        """id 없는 후보도 값으로 정렬됨"""
        a = make_entry(1, EntryDirection.CREDIT, 100, date(2024, 1, 1))
        b = make_entry(2, EntryDirection.DEBIT, 30, date(2024, 1, 3))
        candidate = NewEntry(
            party_id=1,
            direction=EntryDirection.CREDIT,
            amount=20,
            date=date(2024, 1, 2),
            created_at=T0 + timedelta(days=10),
        )

        ordered = order_entries([b, candidate, a])

        assert ordered == [a, candidate, b]

    def test_candidate_after_persisted_on_full_tie(self) -> None:
        """완전 동률이면 후보는 저장된 Entry 뒤"""
        day = date(2024, 1, 1)
        persisted = make_entry(1, EntryDirection.CREDIT, 10, day, created_at=T0)
        candidate = NewEntry(party_id=1, direction=EntryDirection.CREDIT, amount=5,
                             date=day, created_at=T0)

        assert chronological_key(persisted) < chronological_key(candidate)
        assert order_entries([candidate, persisted]) == [persisted, candidate]

    def test_candidate_accepts_datetime_date(self) -> None:
        """후보의 date가 datetime이어도 date로 정규화되어 비교 가능"""
        persisted = make_entry(1, EntryDirection.CREDIT, 10, date(2024, 1, 2))
        candidate = NewEntry(
            party_id=1,
            direction=EntryDirection.CREDIT,
            amount=5,
            date=datetime(2024, 1, 1, 15, 30),
            created_at=datetime(2024, 1, 1, 15, 30),
        )

        assert candidate.date == date(2024, 1, 1)
        assert order_entries([persisted, candidate])[0] is candidate


class TestRunningBalances:
    """누적 잔액 계산 테스트"""

    def test_empty(self) -> None:
        assert running_balances([]) == []

    def test_credit_adds_debit_subtracts(self) -> None:
        entries = [
            make_entry(1, EntryDirection.CREDIT, 100, date(2024, 1, 1)),
            make_entry(2, EntryDirection.DEBIT, 30, date(2024, 1, 2)),
            make_entry(3, EntryDirection.DEBIT, 90, date(2024, 1, 3)),
        ]

        assert running_balances(entries) == [100, 70, -20]


class TestPlanRecalculation:
    """재계산 계획 테스트"""

    def test_zero_entries_balance_is_exactly_zero(self) -> None:
        plan = plan_recalculation([])

        assert plan.final_balance == 0
        assert plan.updates == []

    def test_final_balance_is_credits_minus_debits(self) -> None:
        entries = [
            make_entry(1, EntryDirection.CREDIT, 250.5, date(2024, 2, 1)),
            make_entry(2, EntryDirection.DEBIT, 100.25, date(2024, 1, 15)),
            make_entry(3, EntryDirection.CREDIT, 10, date(2024, 3, 1)),
            make_entry(4, EntryDirection.DEBIT, 0.25, date(2024, 2, 1)),
        ]

        plan = plan_recalculation(entries)

        assert plan.final_balance == pytest.approx(250.5 + 10 - 100.25 - 0.25)

    def test_only_changed_entries_are_updated(self) -> None:
        a = make_entry(1, EntryDirection.CREDIT, 100, date(2024, 1, 1), balance_after=100)
        b = make_entry(2, EntryDirection.DEBIT, 30, date(2024, 1, 3), balance_after=999)

        plan = plan_recalculation([a, b])

        assert len(plan.updates) == 1
        update = plan.updates[0]
        assert update.entry_id == 2
        assert update.old_balance == 999
        assert update.new_balance == 70

    def test_append_candidate_causes_no_updates(self) -> None:
        a = make_entry(1, EntryDirection.CREDIT, 100, date(2024, 1, 1), balance_after=100)
        b = make_entry(2, EntryDirection.DEBIT, 30, date(2024, 1, 3), balance_after=70)
        candidate = NewEntry(party_id=1, direction=EntryDirection.CREDIT, amount=5,
                             date=date(2024, 1, 4))

        plan = plan_insertion([a, b], candidate)

        assert plan.updates == []
        assert plan.candidate_balance == 75
        assert plan.final_balance == 75

    def test_back_dated_candidate_updates_later_entries_only(self) -> None:
        a = make_entry(1, EntryDirection.CREDIT, 100, date(2024, 1, 1), balance_after=100)
        b = make_entry(2, EntryDirection.DEBIT, 30, date(2024, 1, 3), balance_after=70)
        candidate = NewEntry(party_id=1, direction=EntryDirection.CREDIT, amount=20,
                             date=date(2024, 1, 2))

        plan = plan_insertion([b, a], candidate)

        assert plan.candidate_balance == 120
        assert [(u.entry_id, u.new_balance) for u in plan.updates] == [(2, 90)]
        assert plan.final_balance == 90

    def test_idempotent(self) -> None:
        """같은 입력이면 항상 같은 결과"""
        day = date(2024, 5, 5)
        entries = [make_entry(i, EntryDirection.CREDIT, i, day, created_at=T0) for i in range(1, 6)]

        first = plan_recalculation(entries)
        second = plan_recalculation(list(reversed(entries)))

        assert first.balances == second.balances
        assert [u.entry_id for u in first.updates] == [u.entry_id for u in second.updates]


class TestPlanInsertion:
    """후보 포함 재계산 계획 테스트"""

    def test_first_entry_of_party(self) -> None:
        candidate = NewEntry(party_id=1, direction=EntryDirection.DEBIT, amount=40,
                             date=date(2024, 1, 1))

        plan = plan_insertion([], candidate)

        assert plan.ordered == [candidate]
        assert plan.candidate_balance == -40
        assert plan.final_balance == -40
        assert plan.updates == []

    def test_candidate_on_full_tie_sees_persisted_balance(self) -> None:
        """동률이면 후보는 저장된 Entry 뒤에서 누적"""
        day = date(2024, 1, 1)
        persisted = make_entry(1, EntryDirection.CREDIT, 10, day, balance_after=10,
                               created_at=T0)
        candidate = NewEntry(party_id=1, direction=EntryDirection.CREDIT, amount=5,
                             date=day, created_at=T0)

        plan = plan_insertion([persisted], candidate)

        assert plan.candidate_balance == 15
        assert plan.updates == []
