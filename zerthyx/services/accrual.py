"""Time-proportional yield on a wallet's principal.

Earnings grow linearly at ``total_deposit * DAILY_RATE / 86400`` per second
from the last checkpoint. Reads reconcile without writing; a checkpoint
persists the reconciled value and restarts the clock.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from zerthyx.core.config import get_settings
from zerthyx.models import Wallet, LedgerType, LedgerCategory
from zerthyx.services.ledger import ZERO, as_decimal, quantize_money, record_entry
from zerthyx.utils.clock import as_utc, utcnow

SECONDS_PER_DAY = Decimal("86400")


def per_second_rate(total_deposit, daily_rate=None) -> Decimal:
    rate = get_settings().daily_rate if daily_rate is None else as_decimal(daily_rate)
    return as_decimal(total_deposit) * rate / SECONDS_PER_DAY


def is_accruing(wallet: Wallet) -> bool:
    return bool(wallet.is_active) and as_decimal(wallet.total_deposit) > 0


def elapsed_seconds(wallet: Wallet, now: datetime) -> Decimal:
    if wallet.last_earnings_update is None:
        return ZERO
    delta = (as_utc(now) - as_utc(wallet.last_earnings_update)).total_seconds()
    # A checkpoint in the future (clock skew) earns nothing.
    if delta <= 0:
        return ZERO
    return Decimal(str(delta))


def accrued_since_checkpoint(wallet: Wallet, now: datetime | None = None) -> Decimal:
    if not is_accruing(wallet):
        return ZERO
    now = now or utcnow()
    # Multiply before dividing so whole days come out exact.
    daily = as_decimal(wallet.total_deposit) * get_settings().daily_rate
    return daily * elapsed_seconds(wallet, now) / SECONDS_PER_DAY


def reconcile_earnings(wallet: Wallet, now: datetime | None = None) -> Decimal:
    return as_decimal(wallet.daily_earnings) + accrued_since_checkpoint(wallet, now)


def checkpoint_earnings(db: Session, wallet: Wallet, now: datetime | None = None) -> Decimal:
    """Persist reconciled earnings and move the checkpoint to ``now``.

    The wallet must already be locked by the caller, whose unit commits.
    Returns the increment that was folded in.
    """
    now = as_utc(now or utcnow())
    increment = quantize_money(accrued_since_checkpoint(wallet, now))
    wallet.daily_earnings = quantize_money(as_decimal(wallet.daily_earnings) + increment)
    wallet.last_earnings_update = now
    record_entry(
        db,
        wallet,
        increment,
        LedgerType.CREDIT,
        LedgerCategory.ACCRUAL,
        f"ACR_{wallet.id}_{int(now.timestamp())}",
        "Accrued yield checkpoint",
    )
    return increment
