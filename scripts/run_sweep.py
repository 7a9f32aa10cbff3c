#!/usr/bin/env python3
"""Periodic ledger sweep: checkpoint accrual, realize daily earnings, mature batches.

Meant to be run from cron (for example daily at 00:00 UTC for --transfer and
hourly for --maturity). Exits non-zero when any wallet failed so the scheduler
can alert; rerun with --user-id to retry only those wallets.
"""

from __future__ import annotations

import argparse
import logging
import sys

from zerthyx.core.database import SessionLocal
from zerthyx.core.logging import configure_logging
from zerthyx.services.scheduler import run_maturity_sweep, transfer_daily_earnings, update_daily_earnings

logger = logging.getLogger("zerthyx.sweep")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--checkpoint", action="store_true", help="persist accrued earnings without realizing them")
    parser.add_argument("--transfer", action="store_true", help="move daily earnings into total profit")
    parser.add_argument("--maturity", action="store_true", help="mark batches past their maturity date")
    parser.add_argument("--user-id", type=int, action="append", dest="user_ids", help="limit to these users (repeatable)")
    args = parser.parse_args(argv)
    if not (args.checkpoint or args.transfer or args.maturity):
        args.transfer = args.maturity = True
    return args


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    args = _parse_args(argv)
    failed: set[int] = set()
    db = SessionLocal()
    try:
        if args.checkpoint:
            failed.update(update_daily_earnings(db, user_ids=args.user_ids).failed)
        if args.transfer:
            failed.update(transfer_daily_earnings(db, user_ids=args.user_ids).failed)
        if args.maturity:
            result = run_maturity_sweep(db, user_ids=args.user_ids)
            failed.update(result.failed)
            logger.info("Matured %s batch(es)", result.matured_batches)
    finally:
        db.close()

    if failed:
        logger.error("Sweep incomplete; retry with: %s", " ".join(f"--user-id {uid}" for uid in sorted(failed)))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
