from sqlalchemy import Column, Integer, ForeignKey, Boolean, DateTime, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from zerthyx.core.database import Base
from zerthyx.models.base import TimestampMixin
from zerthyx.models.wallet import MONEY


class NftDeposit(Base, TimestampMixin):
    """One approved deposit with its own maturity clock."""

    __tablename__ = "nft_deposits"
    __table_args__ = (UniqueConstraint("user_id", "batch_number", name="uq_nft_deposits_user_batch"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    deposit_id = Column(Integer, ForeignKey("deposits.id"), unique=True, nullable=False)
    batch_number = Column(Integer, nullable=False)
    amount = Column(MONEY, nullable=False)
    deposit_date = Column(DateTime(timezone=True), nullable=False)
    maturity_date = Column(DateTime(timezone=True), nullable=False)
    is_matured = Column(Boolean, default=False, nullable=False)
    is_withdrawn = Column(Boolean, default=False, nullable=False)
    released_at = Column(DateTime(timezone=True), nullable=True)

    deposit = relationship("DepositRequest", back_populates="batch")


Index("ix_nft_deposits_user_open", NftDeposit.user_id, NftDeposit.is_withdrawn)
Index("ix_nft_deposits_maturity", NftDeposit.is_matured, NftDeposit.maturity_date)
