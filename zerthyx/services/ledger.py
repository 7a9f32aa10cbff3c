import logging
from decimal import Decimal, ROUND_DOWN

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from zerthyx.core.errors import ConcurrencyConflict, PersistenceError
from zerthyx.models import Wallet, WalletLedger, LedgerType, LedgerCategory

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
_MONEY_STEP = Decimal("0.00000001")


def as_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(value) -> Decimal:
    # Round towards zero so a stored balance never exceeds what was earned.
    return as_decimal(value).quantize(_MONEY_STEP, rounding=ROUND_DOWN)


def record_entry(
    db: Session,
    wallet: Wallet,
    amount: Decimal,
    entry_type: LedgerType,
    category: LedgerCategory,
    reference: str,
    description: str,
) -> WalletLedger | None:
    amount = quantize_money(amount)
    if amount <= 0:
        return None
    entry = WalletLedger(
        wallet_id=wallet.id,
        amount=amount,
        entry_type=entry_type,
        category=category,
        reference=reference[:64],
        description=description[:255],
    )
    db.add(entry)
    return entry


def commit_unit(db: Session) -> None:
    """Commit one ledger unit of work, or roll it back and raise a ledger error."""
    try:
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        logger.warning("Wallet version conflict, unit rolled back: %s", exc)
        raise ConcurrencyConflict("The wallet was modified by another request.") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Ledger commit failed, unit rolled back: %s", exc)
        raise PersistenceError("The ledger store rejected the update.") from exc
