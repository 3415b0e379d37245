"""
거래처 장부 (Party Ledger) 시스템

거래처별 거래 내역(credit/debit)과 누적 잔액을 관리.
잔액(party.balance, entry.balance_after)은 BalanceEngine만 변경.

사용 예시:
```python
from core.ledger import LedgerStore, LedgerService, init_ledger_schema

await init_ledger_schema(db)
service = LedgerService(LedgerStore(db))

party = await service.create_party("홍길동", "010-1234-5678", "customer")
await service.add_entry(party.id, "credit", 100, "2024-01-01")

summary = await service.get_summary()
```
"""

from core.ledger.balance import (
    BalanceUpdate,
    InsertionPlan,
    RecalculationPlan,
    chronological_key,
    order_entries,
    plan_insertion,
    plan_recalculation,
    running_balances,
)
from core.ledger.engine import BalanceEngine, RecalculationResult
from core.ledger.exceptions import (
    EntryNotFoundError,
    LedgerError,
    PartyNotFoundError,
    ValidationError,
)
from core.ledger.models import Entry, InsertedEntry, NewEntry, Party, signed_amount
from core.ledger.schema import init_ledger_schema
from core.ledger.service import LedgerService, LedgerSummary, PartyDetail
from core.ledger.store import LedgerStore
from core.ledger.types import BalanceStatus, EntryDirection, PartyType

__all__ = [
    # 핵심 클래스
    "BalanceEngine",
    "LedgerService",
    "LedgerStore",
    "init_ledger_schema",
    # 모델
    "Party",
    "Entry",
    "NewEntry",
    "InsertedEntry",
    "PartyDetail",
    "LedgerSummary",
    "RecalculationResult",
    "RecalculationPlan",
    "BalanceUpdate",
    "InsertionPlan",
    # 순수 함수
    "chronological_key",
    "order_entries",
    "running_balances",
    "plan_insertion",
    "plan_recalculation",
    "signed_amount",
    # Enum
    "PartyType",
    "EntryDirection",
    "BalanceStatus",
    # 예외
    "LedgerError",
    "ValidationError",
    "PartyNotFoundError",
    "EntryNotFoundError",
]
