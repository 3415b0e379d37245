"""
어댑터 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
잔액 재계산 엔진은 이 Protocol만 사용하고 저장 방식에는 의존하지 않음.
"""

from datetime import date
from typing import Any, Awaitable, Callable, Mapping, Protocol, Sequence, TypeVar, runtime_checkable

from core.ledger.models import Entry, Party

T = TypeVar("T")


@runtime_checkable
class ILedgerStore(Protocol):
    """Ledger 저장소 인터페이스

    party/entry 두 테이블에 대한 CRUD + 원자적 트랜잭션.
    """

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    async def get_party(self, party_id: int) -> Party | None:
        """거래처 조회 (없으면 None)"""
        ...

    async def list_entries(self, party_id: int) -> list[Entry]:
        """거래처의 전체 거래 내역 (순서 보장 없음)"""
        ...

    async def get_entry(self, entry_id: int) -> Entry | None:
        """거래 내역 단건 조회 (없으면 None)"""
        ...

    # -------------------------------------------------------------------------
    # Entry 쓰기
    # -------------------------------------------------------------------------

    async def update_entry(self, entry_id: int, fields: Mapping[str, Any]) -> None:
        """지정 필드만 변경"""
        ...

    async def insert_entry(
        self,
        party_id: int,
        direction: str,
        amount: float,
        entry_date: date,
        note: str | None,
        balance_after: float,
        created_at: Any,
    ) -> int:
        """거래 내역 삽입

        Returns:
            생성된 entry id
        """
        ...

    async def delete_entry(self, entry_id: int) -> None:
        """거래 내역 삭제"""
        ...

    async def delete_all_entries(self, party_id: int) -> int:
        """거래처의 거래 내역 전체 삭제

        Returns:
            삭제된 행 수
        """
        ...

    # -------------------------------------------------------------------------
    # Party 쓰기
    # -------------------------------------------------------------------------

    async def update_party(self, party_id: int, fields: Mapping[str, Any]) -> None:
        """지정 필드만 변경"""
        ...

    async def delete_party(self, party_id: int) -> None:
        """거래처 삭제"""
        ...

    # -------------------------------------------------------------------------
    # 트랜잭션
    # -------------------------------------------------------------------------

    async def run_atomic(
        self,
        tables: Sequence[str],
        block: Callable[[], Awaitable[T]],
    ) -> T:
        """block을 원자적으로 실행

        block 안의 모든 읽기/쓰기는 겹치는 테이블을 다루는 다른 run_atomic 호출과
        격리됨. block에서 예외 발생 시 전체 롤백 후 예외 재전파.
        """
        ...
