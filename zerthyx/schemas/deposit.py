from pydantic import BaseModel, ConfigDict
from decimal import Decimal
from datetime import datetime
from typing import Optional

from zerthyx.models.deposit import RequestStatus


class DepositCreateRequest(BaseModel):
    amount: Decimal
    blockchain: str
    transaction_hash: str
    deposit_address: Optional[str] = None


class DepositOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    amount: Decimal
    blockchain: str
    deposit_address: str
    transaction_screenshot: Optional[str] = None
    status: RequestStatus
    admin_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None


class BatchOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    batch_number: int
    amount: Decimal
    deposit_date: datetime
    maturity_date: datetime
    is_matured: bool
    is_withdrawn: bool


class DepositApprovalOut(BaseModel):
    success: bool
    batch: BatchOut


class DepositRejectRequest(BaseModel):
    admin_notes: Optional[str] = None


class DepositAddressesOut(BaseModel):
    addresses: dict[str, str]
