"""
Ledger 타입 정의

Party/Entry에서 사용하는 Enum 정의
"""

from enum import Enum


class PartyType(str, Enum):
    """거래처 유형

    표시용 정보일 뿐 잔액 부호에는 영향 없음.
    str을 상속하여 DB/JSON 직렬화 가능.
    """

    CUSTOMER = "customer"
    SUPPLIER = "supplier"


class EntryDirection(str, Enum):
    """거래 방향"""

    CREDIT = "credit"  # 준 돈 (잔액 증가, 받을 돈)
    DEBIT = "debit"  # 받은 돈 (잔액 감소)


class BalanceStatus(str, Enum):
    """거래처 잔액 상태"""

    RECEIVABLE = "receivable"  # balance > 0
    PAYABLE = "payable"  # balance < 0
    SETTLED = "settled"  # balance == 0

    @classmethod
    def of(cls, balance: float) -> "BalanceStatus":
        """잔액으로부터 상태 결정"""
        if balance > 0:
            return cls.RECEIVABLE
        if balance < 0:
            return cls.PAYABLE
        return cls.SETTLED


# Entry 컬럼 중 update_entry로 변경 가능한 필드
ENTRY_UPDATABLE_FIELDS: frozenset[str] = frozenset({
    "direction",
    "amount",
    "date",
    "note",
    "balance_after",
})

# Party 컬럼 중 update_party로 변경 가능한 필드
PARTY_UPDATABLE_FIELDS: frozenset[str] = frozenset({
    "name",
    "phone",
    "type",
    "balance",
    "updated_at",
})
