from pydantic import BaseModel
from decimal import Decimal
from typing import Optional


class SweepOut(BaseModel):
    processed: int
    failed: list[int]
    total_amount: Decimal
    matured_batches: int = 0


class SweepRequest(BaseModel):
    # Retry only these users; all eligible wallets when omitted.
    user_ids: Optional[list[int]] = None


class ProfitSummaryOut(BaseModel):
    total_deposits: Decimal
    total_profits: Decimal
    total_daily_earnings: Decimal
    active_users: int


class DashboardStatsOut(BaseModel):
    total_users: int
    active_investors: int
    pending_deposits: int
    pending_withdrawals: int
    approved_deposit_total: Decimal
    approved_withdrawal_total: Decimal


class SettingsOut(BaseModel):
    settings: dict[str, str]


class SettingsUpdate(BaseModel):
    settings: dict[str, str]


class ReferralRewardRequest(BaseModel):
    referrer_id: int
    referred_id: int
    amount: Optional[Decimal] = None
