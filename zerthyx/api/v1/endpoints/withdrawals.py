from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from zerthyx.core.database import get_db
from zerthyx.dependencies import get_current_user
from zerthyx.middlewares.rate_limit import limiter
from zerthyx.models import User
from zerthyx.schemas.withdrawal import WithdrawalCreateRequest, WithdrawalOut
from zerthyx.services.withdrawals import request_withdrawal, list_withdrawals

router = APIRouter()


@router.post("", response_model=WithdrawalOut)
@limiter.limit("5/minute")
def create_withdrawal(
    request: Request,
    payload: WithdrawalCreateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return request_withdrawal(db, user.id, payload.amount, payload.wallet_address, payload.blockchain)


@router.get("", response_model=list[WithdrawalOut])
def my_withdrawals(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return list_withdrawals(db, user_id=user.id)
