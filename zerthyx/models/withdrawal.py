from sqlalchemy import Column, Integer, String, ForeignKey, Enum, Index, DateTime
from sqlalchemy.orm import relationship
from zerthyx.core.database import Base
from zerthyx.models.base import TimestampMixin
from zerthyx.models.deposit import RequestStatus
from zerthyx.models.wallet import MONEY


class WithdrawalRequest(Base, TimestampMixin):
    __tablename__ = "withdrawals"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    amount = Column(MONEY, nullable=False)
    wallet_address = Column(String(128), nullable=False)
    blockchain = Column(String(16), nullable=False)
    status = Column(Enum(RequestStatus), nullable=False, default=RequestStatus.PENDING)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="withdrawals")


Index("ix_withdrawals_user_status", WithdrawalRequest.user_id, WithdrawalRequest.status)
Index("ix_withdrawals_status", WithdrawalRequest.status)
