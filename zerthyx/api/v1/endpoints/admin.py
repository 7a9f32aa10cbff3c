from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from zerthyx.core.database import get_db
from zerthyx.dependencies import require_admin
from zerthyx.models import RequestStatus
from zerthyx.schemas.admin import (
    DashboardStatsOut,
    ProfitSummaryOut,
    ReferralRewardRequest,
    SettingsOut,
    SettingsUpdate,
    SweepOut,
    SweepRequest,
)
from zerthyx.schemas.deposit import DepositOut, DepositApprovalOut, DepositRejectRequest
from zerthyx.schemas.referral import ReferralOut
from zerthyx.schemas.withdrawal import WithdrawalOut
from zerthyx.services import deposits as deposit_service
from zerthyx.services import withdrawals as withdrawal_service
from zerthyx.services.admin_settings import list_settings, set_settings
from zerthyx.services.referrals import add_referral_reward
from zerthyx.services.reports import get_dashboard_stats, get_profit_summary
from zerthyx.services.scheduler import run_maturity_sweep, transfer_daily_earnings, update_daily_earnings

router = APIRouter()


def _coerce_status(value: Optional[str]) -> Optional[RequestStatus]:
    if value is None:
        return None
    raw = value.strip()
    if not raw:
        return None
    for member in RequestStatus:
        if raw.lower() == member.value.lower() or raw.upper() == member.name:
            return member
    raise HTTPException(status_code=400, detail="Invalid status")


def _sweep_out(result) -> dict:
    return {
        "processed": result.processed,
        "failed": result.failed,
        "total_amount": result.total_amount,
        "matured_batches": result.matured_batches,
    }


@router.get("/deposits", response_model=list[DepositOut])
def list_deposits(
    status: Optional[str] = None,
    limit: int = Query(default=100, ge=1, le=500),
    admin=Depends(require_admin),
    db: Session = Depends(get_db),
):
    return deposit_service.list_deposits(db, status=_coerce_status(status), limit=limit)


@router.post("/deposits/{deposit_id}/approve", response_model=DepositApprovalOut)
def approve_deposit(deposit_id: int, admin=Depends(require_admin), db: Session = Depends(get_db)):
    return deposit_service.approve_deposit(db, deposit_id)


@router.post("/deposits/{deposit_id}/reject")
def reject_deposit(
    deposit_id: int,
    payload: Optional[DepositRejectRequest] = None,
    admin=Depends(require_admin),
    db: Session = Depends(get_db),
):
    notes = payload.admin_notes if payload else None
    return deposit_service.reject_deposit(db, deposit_id, admin_notes=notes)


@router.get("/withdrawals", response_model=list[WithdrawalOut])
def list_withdrawals(
    status: Optional[str] = None,
    limit: int = Query(default=100, ge=1, le=500),
    admin=Depends(require_admin),
    db: Session = Depends(get_db),
):
    return withdrawal_service.list_withdrawals(db, status=_coerce_status(status), limit=limit)


@router.post("/withdrawals/{withdrawal_id}/approve")
def approve_withdrawal(withdrawal_id: int, admin=Depends(require_admin), db: Session = Depends(get_db)):
    withdrawal_service.approve_withdrawal(db, withdrawal_id)
    return {"success": True}


@router.post("/withdrawals/{withdrawal_id}/reject")
def reject_withdrawal(withdrawal_id: int, admin=Depends(require_admin), db: Session = Depends(get_db)):
    withdrawal_service.reject_withdrawal(db, withdrawal_id)
    return {"success": True}


@router.post("/earnings/checkpoint", response_model=SweepOut)
def checkpoint_earnings(
    payload: Optional[SweepRequest] = None,
    admin=Depends(require_admin),
    db: Session = Depends(get_db),
):
    return _sweep_out(update_daily_earnings(db, user_ids=payload.user_ids if payload else None))


@router.post("/earnings/transfer", response_model=SweepOut)
def transfer_earnings(
    payload: Optional[SweepRequest] = None,
    admin=Depends(require_admin),
    db: Session = Depends(get_db),
):
    return _sweep_out(transfer_daily_earnings(db, user_ids=payload.user_ids if payload else None))


@router.post("/maturity/sweep", response_model=SweepOut)
def maturity_sweep(
    payload: Optional[SweepRequest] = None,
    admin=Depends(require_admin),
    db: Session = Depends(get_db),
):
    return _sweep_out(run_maturity_sweep(db, user_ids=payload.user_ids if payload else None))


@router.get("/profits", response_model=ProfitSummaryOut)
def profit_summary(admin=Depends(require_admin), db: Session = Depends(get_db)):
    return get_profit_summary(db)


@router.get("/stats", response_model=DashboardStatsOut)
def dashboard_stats(admin=Depends(require_admin), db: Session = Depends(get_db)):
    return get_dashboard_stats(db)


@router.get("/settings", response_model=SettingsOut)
def get_settings_view(admin=Depends(require_admin), db: Session = Depends(get_db)):
    return {"settings": list_settings(db)}


@router.put("/settings", response_model=SettingsOut)
def update_settings(payload: SettingsUpdate, admin=Depends(require_admin), db: Session = Depends(get_db)):
    return {"settings": set_settings(db, payload.settings)}


@router.post("/referrals/reward", response_model=ReferralOut)
def referral_reward(payload: ReferralRewardRequest, admin=Depends(require_admin), db: Session = Depends(get_db)):
    return add_referral_reward(db, payload.referrer_id, payload.referred_id, payload.amount)
