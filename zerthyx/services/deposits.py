import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from zerthyx.core.config import get_settings
from zerthyx.core.errors import InvalidAmount, InvalidTransition, LedgerValidationError, NotFound
from zerthyx.models import DepositRequest, NftDeposit, RequestStatus, LedgerType, LedgerCategory
from zerthyx.services.accrual import checkpoint_earnings
from zerthyx.services.admin_settings import get_deposit_address, normalize_blockchain
from zerthyx.services.ledger import ZERO, as_decimal, commit_unit, quantize_money, record_entry
from zerthyx.services.referrals import qualify_referral
from zerthyx.services.wallet import lock_wallet
from zerthyx.utils.clock import as_utc, utcnow

logger = logging.getLogger(__name__)


def _locked_deposit(db: Session, deposit_id: int) -> DepositRequest:
    deposit = (
        db.query(DepositRequest)
        .filter(DepositRequest.id == deposit_id)
        .populate_existing()
        .with_for_update()
        .first()
    )
    if not deposit:
        raise NotFound("Deposit not found")
    if deposit.status != RequestStatus.PENDING:
        raise InvalidTransition(f"Deposit is already {deposit.status.value}.")
    return deposit


def request_deposit(
    db: Session,
    user_id: int,
    amount,
    blockchain: str,
    deposit_address: str | None = None,
    tx_hash: str | None = None,
) -> DepositRequest:
    amount = as_decimal(amount)
    if amount <= 0:
        raise InvalidAmount("Deposit amount must be greater than zero.")
    chain = normalize_blockchain(blockchain)
    tx_hash = (tx_hash or "").strip()
    if not tx_hash:
        raise LedgerValidationError("Please enter your transaction hash/txid.")
    address = (deposit_address or "").strip() or get_deposit_address(db, chain)
    if not address:
        raise LedgerValidationError(
            f"No deposit address is configured for {chain}.",
            hint="Choose another network or contact support.",
        )

    deposit = DepositRequest(
        user_id=user_id,
        amount=quantize_money(amount),
        blockchain=chain,
        deposit_address=address,
        transaction_screenshot=tx_hash,
        status=RequestStatus.PENDING,
    )
    db.add(deposit)
    commit_unit(db)
    db.refresh(deposit)
    logger.info("Deposit request %s created for user %s: %s %s", deposit.id, user_id, amount, chain)
    return deposit


def approve_deposit(db: Session, deposit_id: int, now: datetime | None = None) -> dict:
    """Open a new maturing batch for an approved deposit and grow the wallet principal.

    Accrual up to ``now`` is checkpointed at the old principal first, so the new
    money only earns from the approval instant.
    """
    now = as_utc(now or utcnow())
    deposit = _locked_deposit(db, deposit_id)
    wallet = lock_wallet(db, deposit.user_id)
    checkpoint_earnings(db, wallet, now)

    amount = as_decimal(deposit.amount)
    batch_number = int(wallet.deposit_batch_count or 0) + 1
    batch = NftDeposit(
        user_id=deposit.user_id,
        deposit_id=deposit.id,
        batch_number=batch_number,
        amount=amount,
        deposit_date=now,
        maturity_date=now + timedelta(days=get_settings().maturity_days),
        is_matured=False,
        is_withdrawn=False,
    )
    db.add(batch)

    wallet.total_deposit = quantize_money(as_decimal(wallet.total_deposit) + amount)
    wallet.deposit_batch_count = batch_number
    wallet.is_active = True
    if wallet.first_deposit_date is None:
        wallet.first_deposit_date = now
    wallet.latest_deposit_date = now
    # Tracks the earliest open batch; only empty before the first batch or after
    # every batch has been released.
    if wallet.nft_maturity_date is None:
        wallet.nft_maturity_date = batch.maturity_date
    record_entry(
        db,
        wallet,
        amount,
        LedgerType.CREDIT,
        LedgerCategory.PRINCIPAL,
        f"DEP_{deposit.id}",
        f"Deposit batch #{batch_number} via {deposit.blockchain}",
    )

    deposit.status = RequestStatus.APPROVED
    deposit.reviewed_at = now
    qualify_referral(db, deposit.user_id, amount, now)
    commit_unit(db)
    db.refresh(batch)
    logger.info(
        "Deposit %s approved: user %s batch #%s amount %s matures %s",
        deposit.id,
        deposit.user_id,
        batch_number,
        amount,
        batch.maturity_date,
    )
    return {"success": True, "batch": batch}


def reject_deposit(db: Session, deposit_id: int, now: datetime | None = None, admin_notes: str | None = None) -> dict:
    now = as_utc(now or utcnow())
    deposit = _locked_deposit(db, deposit_id)
    deposit.status = RequestStatus.REJECTED
    deposit.reviewed_at = now
    if admin_notes:
        deposit.admin_notes = admin_notes[:255]
    commit_unit(db)
    logger.info("Deposit %s rejected for user %s", deposit_id, deposit.user_id)
    return {"success": True}


def list_deposits(
    db: Session,
    user_id: int | None = None,
    status: RequestStatus | None = None,
    limit: int = 100,
) -> list[DepositRequest]:
    query = db.query(DepositRequest)
    if user_id is not None:
        query = query.filter(DepositRequest.user_id == user_id)
    if status is not None:
        query = query.filter(DepositRequest.status == status)
    return query.order_by(DepositRequest.id.desc()).limit(limit).all()


def _batch_matured(batch: NftDeposit, now: datetime) -> bool:
    return bool(batch.is_matured) or as_utc(batch.maturity_date) <= now


def get_nft_summary(db: Session, user_id: int, now: datetime | None = None) -> dict:
    """Read-only projection of a user's deposit batches."""
    now = as_utc(now or utcnow())
    batches = (
        db.query(NftDeposit)
        .filter(NftDeposit.user_id == user_id)
        .order_by(NftDeposit.batch_number)
        .all()
    )
    total = matured = pending = withdrawn = ZERO
    next_maturity = None
    items = []
    for batch in batches:
        amount = as_decimal(batch.amount)
        maturity_date = as_utc(batch.maturity_date)
        is_matured = _batch_matured(batch, now)
        total += amount
        if is_matured:
            matured += amount
        else:
            pending += amount
            if next_maturity is None or maturity_date < next_maturity:
                next_maturity = maturity_date
        if batch.is_withdrawn:
            withdrawn += amount
        items.append(
            {
                "id": batch.id,
                "batch_number": batch.batch_number,
                "amount": amount,
                "deposit_date": as_utc(batch.deposit_date),
                "maturity_date": maturity_date,
                "is_matured": is_matured,
                "is_withdrawn": bool(batch.is_withdrawn),
                "seconds_to_maturity": max(0, int((maturity_date - now).total_seconds())),
            }
        )
    return {
        "total_deposits": total,
        "matured_amount": matured,
        "pending_amount": pending,
        "withdrawn_amount": withdrawn,
        "next_maturity_date": next_maturity,
        "batches": items,
    }


def release_matured_principal(db: Session, user_id: int, now: datetime | None = None) -> dict:
    """Return the principal of every matured, unreleased batch to the withdrawable balance."""
    now = as_utc(now or utcnow())
    wallet = lock_wallet(db, user_id)
    batches = (
        db.query(NftDeposit)
        .filter(
            NftDeposit.user_id == user_id,
            NftDeposit.is_withdrawn.is_(False),
            NftDeposit.maturity_date <= now,
        )
        .order_by(NftDeposit.batch_number)
        .with_for_update()
        .all()
    )
    if not batches:
        db.rollback()
        raise InvalidTransition(
            "No matured principal is available to release.",
            hint=f"Principal unlocks {get_settings().maturity_days} days after each deposit.",
        )

    # Earnings up to now still accrue on the full principal.
    checkpoint_earnings(db, wallet, now)
    released = ZERO
    for batch in batches:
        batch.is_matured = True
        batch.is_withdrawn = True
        batch.released_at = now
        released += as_decimal(batch.amount)

    wallet.total_deposit = max(ZERO, quantize_money(as_decimal(wallet.total_deposit) - released))
    wallet.total_profit = quantize_money(as_decimal(wallet.total_profit) + released)
    record_entry(
        db,
        wallet,
        released,
        LedgerType.CREDIT,
        LedgerCategory.PRINCIPAL_RELEASE,
        f"REL_{wallet.id}_{int(now.timestamp())}",
        f"Matured principal released from {len(batches)} batch(es)",
    )

    released_ids = [batch.id for batch in batches]
    remaining = (
        db.query(NftDeposit)
        .filter(
            NftDeposit.user_id == user_id,
            NftDeposit.is_withdrawn.is_(False),
            NftDeposit.id.notin_(released_ids),
        )
        .order_by(NftDeposit.maturity_date)
        .first()
    )
    wallet.nft_maturity_date = remaining.maturity_date if remaining else None
    if remaining is None or wallet.total_deposit <= 0:
        wallet.is_active = False
    commit_unit(db)
    logger.info("Released %s matured principal for user %s (%s batches)", released, user_id, len(batches))
    return {"released_amount": released, "batch_ids": released_ids}
