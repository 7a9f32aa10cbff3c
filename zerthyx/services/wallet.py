from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from zerthyx.core.errors import ConcurrencyConflict
from zerthyx.models import Wallet, WalletLedger
from zerthyx.services.accrual import reconcile_earnings
from zerthyx.services.ledger import ZERO, as_decimal, commit_unit
from zerthyx.utils.clock import as_utc, utcnow


def _new_wallet(user_id: int) -> Wallet:
    return Wallet(
        user_id=user_id,
        total_deposit=ZERO,
        daily_earnings=ZERO,
        total_profit=ZERO,
        is_active=False,
        deposit_batch_count=0,
    )


def get_or_create_wallet(db: Session, user_id: int) -> Wallet:
    wallet = db.query(Wallet).filter(Wallet.user_id == user_id).first()
    if not wallet:
        wallet = _new_wallet(user_id)
        db.add(wallet)
        commit_unit(db)
        db.refresh(wallet)
    return wallet


def lock_wallet(db: Session, user_id: int) -> Wallet:
    """Load the wallet row for update, creating it inside the current unit if missing.

    ``populate_existing`` makes a second writer that waited on the row lock see the
    committed balance instead of a stale identity-map copy.
    """
    wallet = (
        db.query(Wallet)
        .filter(Wallet.user_id == user_id)
        .populate_existing()
        .with_for_update()
        .first()
    )
    if wallet is None:
        wallet = _new_wallet(user_id)
        db.add(wallet)
        try:
            db.flush()
        except IntegrityError as exc:
            db.rollback()
            raise ConcurrencyConflict("The wallet was created by another request.") from exc
    return wallet


def _aware(value: datetime | None) -> datetime | None:
    return as_utc(value) if value is not None else None


def get_wallet_state(db: Session, user_id: int, now: datetime | None = None) -> dict:
    """Reconciled view of the wallet. Never writes; a missing row reads as empty."""
    now = as_utc(now or utcnow())
    wallet = db.query(Wallet).filter(Wallet.user_id == user_id).first() or _new_wallet(user_id)
    reconciled = reconcile_earnings(wallet, now)
    total_deposit = as_decimal(wallet.total_deposit)
    total_profit = as_decimal(wallet.total_profit)
    return {
        "user_id": wallet.user_id,
        "total_deposit": total_deposit,
        "daily_earnings": reconciled,
        "stored_daily_earnings": as_decimal(wallet.daily_earnings),
        "total_profit": total_profit,
        "available_balance": total_profit + reconciled,
        "total_balance": total_deposit + total_profit + reconciled,
        "last_earnings_update": _aware(wallet.last_earnings_update),
        "nft_maturity_date": _aware(wallet.nft_maturity_date),
        "is_active": bool(wallet.is_active),
        "last_withdrawal_date": wallet.last_withdrawal_date,
        "deposit_batch_count": int(wallet.deposit_batch_count or 0),
        "as_of": now,
    }


def list_ledger(db: Session, user_id: int, limit: int = 50) -> list[WalletLedger]:
    wallet = db.query(Wallet).filter(Wallet.user_id == user_id).first()
    if wallet is None:
        return []
    return (
        db.query(WalletLedger)
        .filter(WalletLedger.wallet_id == wallet.id)
        .order_by(WalletLedger.id.desc())
        .limit(limit)
        .all()
    )
