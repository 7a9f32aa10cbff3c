import logging
import secrets
from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Session

from zerthyx.core.config import get_settings
from zerthyx.core.errors import InvalidAmount, InvalidTransition, LedgerValidationError, NotFound
from zerthyx.models import User, Referral, ReferralStatus, LedgerType, LedgerCategory
from zerthyx.services.ledger import as_decimal, commit_unit, quantize_money, record_entry
from zerthyx.services.wallet import lock_wallet

logger = logging.getLogger(__name__)


def get_or_create_referral_code(db: Session, user_id: int) -> str:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")
    if user.referral_code:
        return user.referral_code

    code = secrets.token_hex(4).upper()
    while db.query(User.id).filter(User.referral_code == code).first():
        code = secrets.token_hex(4).upper()
    user.referral_code = code
    commit_unit(db)
    return code


def link_referral(db: Session, referred_user_id: int, code: str) -> Referral:
    code = (code or "").strip().upper()
    if not code:
        raise LedgerValidationError("Referral code is required.")
    referrer = db.query(User).filter(User.referral_code == code).first()
    if not referrer:
        raise NotFound("Referral code not found")
    if referrer.id == referred_user_id:
        raise LedgerValidationError("You cannot use your own referral code.")
    if db.query(Referral).filter(Referral.referred_id == referred_user_id).first():
        raise InvalidTransition("A referral is already linked to this account.", hint="")

    referral = Referral(
        referrer_id=referrer.id,
        referred_id=referred_user_id,
        referral_code=code,
        status=ReferralStatus.PENDING,
        reward_paid=False,
    )
    db.add(referral)
    commit_unit(db)
    db.refresh(referral)
    return referral


def qualify_referral(db: Session, user_id: int, amount: Decimal, now: datetime) -> Referral | None:
    """Mark the depositor's pending referral as qualified. Part of the caller's unit."""
    referral = (
        db.query(Referral)
        .filter(Referral.referred_id == user_id, Referral.status == ReferralStatus.PENDING)
        .first()
    )
    if referral is None:
        return None
    referral.status = ReferralStatus.QUALIFIED
    referral.qualification_amount = quantize_money(amount)
    referral.qualification_date = now
    return referral


def add_referral_reward(
    db: Session,
    referrer_id: int,
    referred_id: int,
    amount=None,
) -> Referral:
    amount = quantize_money(get_settings().default_referral_reward if amount is None else as_decimal(amount))
    if amount <= 0:
        raise InvalidAmount("Reward amount must be greater than zero.")

    referral = (
        db.query(Referral)
        .filter(Referral.referrer_id == referrer_id, Referral.referred_id == referred_id)
        .populate_existing()
        .with_for_update()
        .first()
    )
    if not referral:
        raise NotFound("Referral not found")
    if referral.reward_paid:
        raise InvalidTransition("Referral reward has already been paid.", hint="")

    wallet = lock_wallet(db, referrer_id)
    wallet.total_profit = quantize_money(as_decimal(wallet.total_profit) + amount)
    record_entry(
        db,
        wallet,
        amount,
        LedgerType.CREDIT,
        LedgerCategory.REFERRAL_REWARD,
        f"REF_{referral.id}",
        f"Referral reward for user {referred_id}",
    )
    referral.reward_amount = amount
    referral.reward_paid = True
    referral.status = ReferralStatus.REWARDED
    commit_unit(db)
    db.refresh(referral)
    logger.info("Referral reward %s paid to user %s for user %s", amount, referrer_id, referred_id)
    return referral
