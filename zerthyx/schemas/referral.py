from pydantic import BaseModel, ConfigDict
from decimal import Decimal
from datetime import datetime
from typing import Optional

from zerthyx.models.referral import ReferralStatus


class ReferralCodeOut(BaseModel):
    referral_code: str


class LinkReferralRequest(BaseModel):
    referral_code: str


class ReferralOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    referrer_id: int
    referred_id: int
    referral_code: str
    status: ReferralStatus
    qualification_amount: Optional[Decimal] = None
    qualification_date: Optional[datetime] = None
    reward_amount: Optional[Decimal] = None
    reward_paid: bool
