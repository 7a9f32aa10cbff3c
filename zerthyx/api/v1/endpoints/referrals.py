from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from zerthyx.core.database import get_db
from zerthyx.dependencies import get_current_user
from zerthyx.models import User
from zerthyx.schemas.referral import ReferralCodeOut, LinkReferralRequest, ReferralOut
from zerthyx.services.referrals import get_or_create_referral_code, link_referral

router = APIRouter()


@router.get("/code", response_model=ReferralCodeOut)
def my_referral_code(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"referral_code": get_or_create_referral_code(db, user.id)}


@router.post("/link", response_model=ReferralOut)
def link_code(payload: LinkReferralRequest, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return link_referral(db, user.id, payload.referral_code)
