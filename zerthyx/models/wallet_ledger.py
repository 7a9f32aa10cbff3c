import enum
from sqlalchemy import Column, Integer, ForeignKey, String, Enum, Index
from sqlalchemy.orm import relationship
from zerthyx.core.database import Base
from zerthyx.models.base import TimestampMixin
from zerthyx.models.wallet import MONEY


class LedgerType(str, enum.Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class LedgerCategory(str, enum.Enum):
    PRINCIPAL = "principal"
    ACCRUAL = "accrual"
    PROFIT_TRANSFER = "profit_transfer"
    WITHDRAWAL = "withdrawal"
    PRINCIPAL_RELEASE = "principal_release"
    REFERRAL_REWARD = "referral_reward"


class WalletLedger(Base, TimestampMixin):
    __tablename__ = "wallet_ledger"

    id = Column(Integer, primary_key=True, index=True)
    wallet_id = Column(Integer, ForeignKey("wallets.id"), nullable=False)
    amount = Column(MONEY, nullable=False)
    entry_type = Column(Enum(LedgerType), nullable=False)
    category = Column(Enum(LedgerCategory), nullable=False)
    reference = Column(String(64), nullable=False, index=True)
    description = Column(String(255), nullable=False)

    wallet = relationship("Wallet", back_populates="ledger_entries")


Index("ix_wallet_ledger_wallet_id_type", WalletLedger.wallet_id, WalletLedger.entry_type)
