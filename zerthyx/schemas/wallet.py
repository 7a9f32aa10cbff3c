from pydantic import BaseModel, ConfigDict
from decimal import Decimal
from datetime import date, datetime
from typing import Optional

from zerthyx.models.wallet_ledger import LedgerCategory, LedgerType


class WalletStateOut(BaseModel):
    user_id: int
    total_deposit: Decimal
    # Reconciled to ``as_of``; ``stored_daily_earnings`` is the last checkpoint.
    daily_earnings: Decimal
    stored_daily_earnings: Decimal
    total_profit: Decimal
    available_balance: Decimal
    total_balance: Decimal
    last_earnings_update: Optional[datetime] = None
    nft_maturity_date: Optional[datetime] = None
    is_active: bool
    last_withdrawal_date: Optional[date] = None
    deposit_batch_count: int
    as_of: datetime


class LedgerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    amount: Decimal
    entry_type: LedgerType
    category: LedgerCategory
    reference: str
    description: str
    created_at: Optional[datetime] = None


class NftBatchOut(BaseModel):
    id: int
    batch_number: int
    amount: Decimal
    deposit_date: datetime
    maturity_date: datetime
    is_matured: bool
    is_withdrawn: bool
    seconds_to_maturity: int


class NftSummaryOut(BaseModel):
    total_deposits: Decimal
    matured_amount: Decimal
    pending_amount: Decimal
    withdrawn_amount: Decimal
    next_maturity_date: Optional[datetime] = None
    batches: list[NftBatchOut]


class ReleasePrincipalOut(BaseModel):
    released_amount: Decimal
    batch_ids: list[int]
