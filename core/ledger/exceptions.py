"""
Ledger 예외 정의
"""


class LedgerError(Exception):
    """Ledger 예외 기본 클래스"""

    pass


class ValidationError(LedgerError):
    """입력값 검증 실패

    엔진 호출 전에 호출자 측에서 거부되어야 하는 입력.
    (금액 <= 0, 숫자가 아님, 필수 필드 누락 등)
    """

    pass


class PartyNotFoundError(LedgerError):
    """거래처 없음 (참조 무결성 위반)

    재계산 대상 거래처가 없으면 트랜잭션을 중단하고 호출자에게 전달.
    """

    def __init__(self, party_id: int):
        self.party_id = party_id
        super().__init__(f"Party not found: {party_id}")


class EntryNotFoundError(LedgerError):
    """거래 내역 없음"""

    def __init__(self, entry_id: int):
        self.entry_id = entry_id
        super().__init__(f"Entry not found: {entry_id}")
