from pydantic import BaseModel, ConfigDict
from decimal import Decimal
from datetime import datetime
from typing import Optional

from zerthyx.models.deposit import RequestStatus


class WithdrawalCreateRequest(BaseModel):
    amount: Decimal
    wallet_address: str
    blockchain: str = "TRC20"


class WithdrawalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    amount: Decimal
    wallet_address: str
    blockchain: str
    status: RequestStatus
    created_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
