from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from zerthyx.core.database import get_db
from zerthyx.dependencies import get_current_user
from zerthyx.middlewares.rate_limit import limiter
from zerthyx.models import User
from zerthyx.schemas.deposit import DepositCreateRequest, DepositOut, DepositAddressesOut
from zerthyx.services.admin_settings import get_deposit_addresses
from zerthyx.services.deposits import request_deposit, list_deposits

router = APIRouter()


@router.get("/addresses", response_model=DepositAddressesOut)
def deposit_addresses(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"addresses": get_deposit_addresses(db)}


@router.post("", response_model=DepositOut)
@limiter.limit("5/minute")
def create_deposit(
    request: Request,
    payload: DepositCreateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return request_deposit(
        db,
        user.id,
        payload.amount,
        payload.blockchain,
        deposit_address=payload.deposit_address,
        tx_hash=payload.transaction_hash,
    )


@router.get("", response_model=list[DepositOut])
def my_deposits(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return list_deposits(db, user_id=user.id)
