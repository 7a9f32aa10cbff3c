"""Periodic earnings and maturity sweeps.

Nothing here schedules itself: ``scripts/run_sweep.py`` or an admin endpoint
triggers each pass. Every wallet is processed as its own unit of work, so one
failing wallet is rolled back and reported without touching the others.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from zerthyx.core.errors import LedgerError
from zerthyx.models import Wallet, NftDeposit, LedgerType, LedgerCategory
from zerthyx.services.accrual import checkpoint_earnings
from zerthyx.services.ledger import ZERO, as_decimal, commit_unit, quantize_money, record_entry
from zerthyx.services.wallet import lock_wallet
from zerthyx.utils.clock import as_utc, utcnow

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    processed: int = 0
    failed: list[int] = field(default_factory=list)
    total_amount: Decimal = ZERO
    matured_batches: int = 0


def transfer_wallet_earnings(db: Session, wallet: Wallet, now: datetime | None = None) -> Decimal:
    """Checkpoint accrual, then move all unflushed earnings into realized profit.

    Calling it twice at the same instant credits nothing the second time.
    """
    now = as_utc(now or utcnow())
    checkpoint_earnings(db, wallet, now)
    amount = quantize_money(wallet.daily_earnings)
    if amount > 0:
        wallet.total_profit = quantize_money(as_decimal(wallet.total_profit) + amount)
        record_entry(
            db,
            wallet,
            amount,
            LedgerType.CREDIT,
            LedgerCategory.PROFIT_TRANSFER,
            f"TRF_{wallet.id}_{int(now.timestamp())}",
            "Daily earnings transferred to profit",
        )
    wallet.daily_earnings = ZERO
    return amount


def mature_batches(db: Session, user_id: int, now: datetime | None = None) -> int:
    now = as_utc(now or utcnow())
    batches = (
        db.query(NftDeposit)
        .filter(
            NftDeposit.user_id == user_id,
            NftDeposit.is_matured.is_(False),
            NftDeposit.maturity_date <= now,
        )
        .with_for_update()
        .all()
    )
    for batch in batches:
        batch.is_matured = True
    return len(batches)


def _run_units(db: Session, user_ids: Iterable[int], unit: Callable[[int], Decimal], label: str) -> SweepResult:
    result = SweepResult()
    for user_id in user_ids:
        try:
            amount = unit(user_id)
            commit_unit(db)
        except (LedgerError, SQLAlchemyError) as exc:
            db.rollback()
            logger.warning("%s failed for user %s: %s", label, user_id, exc)
            result.failed.append(user_id)
            continue
        result.processed += 1
        result.total_amount += as_decimal(amount)
    logger.info(
        "%s finished: processed=%s failed=%s amount=%s",
        label,
        result.processed,
        len(result.failed),
        result.total_amount,
    )
    return result


def _earning_wallet_user_ids(db: Session) -> list[int]:
    rows = (
        db.query(Wallet.user_id)
        .filter(or_(Wallet.is_active.is_(True), Wallet.daily_earnings > 0))
        .order_by(Wallet.user_id)
        .all()
    )
    return [row[0] for row in rows]


def update_daily_earnings(db: Session, now: datetime | None = None, user_ids: list[int] | None = None) -> SweepResult:
    """Checkpoint accrual on every earning wallet without realizing it."""
    now = as_utc(now or utcnow())
    ids = user_ids if user_ids is not None else _earning_wallet_user_ids(db)

    def _unit(user_id: int) -> Decimal:
        return checkpoint_earnings(db, lock_wallet(db, user_id), now)

    return _run_units(db, ids, _unit, "Earnings checkpoint")


def transfer_daily_earnings(db: Session, now: datetime | None = None, user_ids: list[int] | None = None) -> SweepResult:
    now = as_utc(now or utcnow())
    ids = user_ids if user_ids is not None else _earning_wallet_user_ids(db)

    def _unit(user_id: int) -> Decimal:
        return transfer_wallet_earnings(db, lock_wallet(db, user_id), now)

    return _run_units(db, ids, _unit, "Earnings transfer")


def run_maturity_sweep(db: Session, now: datetime | None = None, user_ids: list[int] | None = None) -> SweepResult:
    now = as_utc(now or utcnow())
    if user_ids is None:
        rows = (
            db.query(NftDeposit.user_id)
            .filter(NftDeposit.is_matured.is_(False), NftDeposit.maturity_date <= now)
            .distinct()
            .order_by(NftDeposit.user_id)
            .all()
        )
        user_ids = [row[0] for row in rows]

    counts: dict[int, int] = {}

    def _unit(user_id: int) -> Decimal:
        counts[user_id] = mature_batches(db, user_id, now)
        return ZERO

    result = _run_units(db, user_ids, _unit, "Maturity sweep")
    result.matured_batches = sum(count for user_id, count in counts.items() if user_id not in result.failed)
    return result
