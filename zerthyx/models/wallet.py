from decimal import Decimal
from sqlalchemy import Column, Integer, ForeignKey, Numeric, Boolean, Date, DateTime, Index
from sqlalchemy.orm import relationship
from zerthyx.core.database import Base
from zerthyx.models.base import TimestampMixin

# Per-second accrual needs more than cents to stay exact between checkpoints.
MONEY = Numeric(20, 8)


class Wallet(Base, TimestampMixin):
    __tablename__ = "wallets"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    total_deposit = Column(MONEY, default=Decimal("0"), nullable=False)
    daily_earnings = Column(MONEY, default=Decimal("0"), nullable=False)
    total_profit = Column(MONEY, default=Decimal("0"), nullable=False)
    last_earnings_update = Column(DateTime(timezone=True), nullable=True)
    nft_maturity_date = Column(DateTime(timezone=True), nullable=True)
    is_active = Column(Boolean, default=False, nullable=False)
    last_withdrawal_date = Column(Date, nullable=True)
    deposit_batch_count = Column(Integer, default=0, nullable=False)
    first_deposit_date = Column(DateTime(timezone=True), nullable=True)
    latest_deposit_date = Column(DateTime(timezone=True), nullable=True)
    version_id = Column(Integer, nullable=False, default=1)

    user = relationship("User", back_populates="wallet")
    ledger_entries = relationship("WalletLedger", back_populates="wallet")

    __mapper_args__ = {"version_id_col": version_id}


Index("ix_wallets_user_id", Wallet.user_id)
Index("ix_wallets_is_active", Wallet.is_active)
