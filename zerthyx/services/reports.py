from sqlalchemy import func
from sqlalchemy.orm import Session

from zerthyx.models import User, Wallet, DepositRequest, WithdrawalRequest, RequestStatus
from zerthyx.services.ledger import as_decimal


def get_profit_summary(db: Session) -> dict:
    total_deposits, total_profits, total_daily, active_users = (
        db.query(
            func.coalesce(func.sum(Wallet.total_deposit), 0),
            func.coalesce(func.sum(Wallet.total_profit), 0),
            func.coalesce(func.sum(Wallet.daily_earnings), 0),
            func.count(Wallet.id),
        )
        .filter(Wallet.is_active.is_(True))
        .one()
    )
    return {
        "total_deposits": as_decimal(total_deposits),
        "total_profits": as_decimal(total_profits),
        "total_daily_earnings": as_decimal(total_daily),
        "active_users": int(active_users or 0),
    }


def _count(db: Session, model, status: RequestStatus) -> int:
    return db.query(func.count(model.id)).filter(model.status == status).scalar() or 0


def _sum(db: Session, model, status: RequestStatus):
    return as_decimal(db.query(func.coalesce(func.sum(model.amount), 0)).filter(model.status == status).scalar())


def get_dashboard_stats(db: Session) -> dict:
    return {
        "total_users": db.query(func.count(User.id)).scalar() or 0,
        "active_investors": db.query(func.count(Wallet.id)).filter(Wallet.is_active.is_(True)).scalar() or 0,
        "pending_deposits": _count(db, DepositRequest, RequestStatus.PENDING),
        "pending_withdrawals": _count(db, WithdrawalRequest, RequestStatus.PENDING),
        "approved_deposit_total": _sum(db, DepositRequest, RequestStatus.APPROVED),
        "approved_withdrawal_total": _sum(db, WithdrawalRequest, RequestStatus.APPROVED),
    }
