"""Withdrawal requests and their administrator settlement."""

import logging
from datetime import date, datetime
from zoneinfo import ZoneInfo

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from zerthyx.core.config import get_settings
from zerthyx.core.errors import (
    DailyLimitExceeded,
    InsufficientBalance,
    InvalidAmount,
    InvalidTransition,
    LedgerValidationError,
    NotFound,
)
from zerthyx.models import Wallet, WithdrawalRequest, RequestStatus, LedgerType, LedgerCategory
from zerthyx.services.accrual import reconcile_earnings
from zerthyx.services.admin_settings import normalize_blockchain
from zerthyx.services.ledger import as_decimal, commit_unit, quantize_money, record_entry
from zerthyx.services.scheduler import transfer_wallet_earnings
from zerthyx.services.wallet import get_or_create_wallet, lock_wallet
from zerthyx.utils.clock import as_utc, utcnow

logger = logging.getLogger(__name__)


def ledger_today(now: datetime) -> date:
    return as_utc(now).astimezone(ZoneInfo(get_settings().ledger_timezone)).date()


def _locked_withdrawal(db: Session, withdrawal_id: int) -> WithdrawalRequest:
    withdrawal = (
        db.query(WithdrawalRequest)
        .filter(WithdrawalRequest.id == withdrawal_id)
        .populate_existing()
        .with_for_update()
        .first()
    )
    if not withdrawal:
        raise NotFound("Withdrawal not found")
    if withdrawal.status != RequestStatus.PENDING:
        raise InvalidTransition(f"Withdrawal is already {withdrawal.status.value}.")
    return withdrawal


def request_withdrawal(
    db: Session,
    user_id: int,
    amount,
    wallet_address: str,
    blockchain: str,
    now: datetime | None = None,
) -> WithdrawalRequest:
    settings = get_settings()
    now = as_utc(now or utcnow())
    amount = as_decimal(amount)
    if amount < settings.withdrawal_min:
        raise InvalidAmount(f"Withdrawal amount must be at least {settings.withdrawal_min} USDT.")
    if amount > settings.withdrawal_max:
        raise InvalidAmount(f"Withdrawal amount cannot exceed {settings.withdrawal_max} USDT.")
    address = (wallet_address or "").strip()
    if not address:
        raise LedgerValidationError("Please enter your wallet address.")
    chain = normalize_blockchain(blockchain)

    wallet = get_or_create_wallet(db, user_id)
    available = as_decimal(wallet.total_profit) + reconcile_earnings(wallet, now)
    if amount > available:
        raise InsufficientBalance("You don't have enough profit to withdraw.")

    # Check-and-stamp in one statement: a concurrent request for the same day
    # finds the stamp already set and matches no row.
    today = ledger_today(now)
    stamped = db.execute(
        update(Wallet)
        .where(
            Wallet.id == wallet.id,
            or_(Wallet.last_withdrawal_date.is_(None), Wallet.last_withdrawal_date < today),
        )
        .values(last_withdrawal_date=today, version_id=Wallet.version_id + 1)
        .execution_options(synchronize_session=False)
    )
    if stamped.rowcount != 1:
        db.rollback()
        raise DailyLimitExceeded("You can only withdraw once per day. Please try again tomorrow.")

    withdrawal = WithdrawalRequest(
        user_id=user_id,
        amount=quantize_money(amount),
        wallet_address=address,
        blockchain=chain,
        status=RequestStatus.PENDING,
    )
    db.add(withdrawal)
    commit_unit(db)
    db.refresh(withdrawal)
    logger.info("Withdrawal request %s created for user %s: %s %s", withdrawal.id, user_id, amount, chain)
    return withdrawal


def approve_withdrawal(db: Session, withdrawal_id: int, now: datetime | None = None) -> WithdrawalRequest:
    """Flush the wallet's unflushed earnings into profit, then debit the withdrawal.

    The wallet is locked for the whole unit; a second approval waits and sees the
    debited balance. A debit larger than the flushed balance is refused and the
    request stays pending.
    """
    now = as_utc(now or utcnow())
    withdrawal = _locked_withdrawal(db, withdrawal_id)
    wallet = lock_wallet(db, withdrawal.user_id)
    transfer_wallet_earnings(db, wallet, now)

    amount = as_decimal(withdrawal.amount)
    available = as_decimal(wallet.total_profit)
    if amount > available:
        db.rollback()
        raise InsufficientBalance(
            f"Available balance {quantize_money(available)} is below the requested {amount}.",
            hint="Reject the request or approve it once more profit has accrued.",
        )

    wallet.total_profit = quantize_money(available - amount)
    record_entry(
        db,
        wallet,
        amount,
        LedgerType.DEBIT,
        LedgerCategory.WITHDRAWAL,
        f"WDR_{withdrawal.id}",
        f"Withdrawal to {withdrawal.blockchain} {withdrawal.wallet_address}",
    )
    withdrawal.status = RequestStatus.APPROVED
    withdrawal.approved_at = now
    commit_unit(db)
    db.refresh(withdrawal)
    logger.info("Withdrawal %s approved: user %s debited %s", withdrawal.id, withdrawal.user_id, amount)
    return withdrawal


def reject_withdrawal(db: Session, withdrawal_id: int, now: datetime | None = None) -> WithdrawalRequest:
    now = as_utc(now or utcnow())
    withdrawal = _locked_withdrawal(db, withdrawal_id)
    withdrawal.status = RequestStatus.REJECTED
    withdrawal.rejected_at = now
    commit_unit(db)
    db.refresh(withdrawal)
    logger.info("Withdrawal %s rejected for user %s", withdrawal.id, withdrawal.user_id)
    return withdrawal


def list_withdrawals(
    db: Session,
    user_id: int | None = None,
    status: RequestStatus | None = None,
    limit: int = 100,
) -> list[WithdrawalRequest]:
    query = db.query(WithdrawalRequest)
    if user_id is not None:
        query = query.filter(WithdrawalRequest.user_id == user_id)
    if status is not None:
        query = query.filter(WithdrawalRequest.status == status)
    return query.order_by(WithdrawalRequest.id.desc()).limit(limit).all()
