"""
거래처 잔액 리포트

사용법:
    python -m scripts.ledger_report
    python -m scripts.ledger_report --db data/okledger.db --recalculate
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import get_settings
from core.ledger import LedgerService, LedgerStore, init_ledger_schema
from core.ledger.types import BalanceStatus
from core.logging import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="거래처 잔액 리포트")
    parser.add_argument("--db", type=Path, default=None, help="DB 파일 경로")
    parser.add_argument("--config", type=Path, default=None, help="ledger.yaml 경로")
    parser.add_argument(
        "--recalculate",
        action="store_true",
        help="출력 전에 모든 거래처 잔액 재계산",
    )
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    settings = get_settings(args.config)
    db_path = args.db or settings.db_path

    async with SQLiteAdapter(db_path, busy_timeout_ms=settings.busy_timeout_ms) as db:
        await init_ledger_schema(db)
        service = LedgerService(LedgerStore(db))

        if args.recalculate:
            results = await service.recalculate_all()
            changed = [r for r in results if r.updated_entries or r.party_updated]
            print(f"Recalculated {len(results)} parties, {len(changed)} changed")

        parties = await service.list_parties()
        summary = await service.get_summary()

        print(f"DB Path: {db_path}")
        print(f"Parties: {len(parties)}")
        for party in parties:
            status = summary.statuses.get(party.id, BalanceStatus.of(party.balance))
            print(
                f"  - [{party.id}] {party.name} ({party.type.value}, {party.phone}): "
                f"{abs(party.balance):,.2f} {status.value}"
            )
        print(f"\nTotal receivable: {summary.total_receivable:,.2f}")
        print(f"Total payable:    {summary.total_payable:,.2f}")

    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings(args.config)
    setup_logging("ledger_report", settings.config)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
