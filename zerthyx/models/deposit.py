import enum
from sqlalchemy import Column, Integer, String, ForeignKey, Enum, Index, DateTime
from sqlalchemy.orm import relationship
from zerthyx.core.database import Base
from zerthyx.models.base import TimestampMixin
from zerthyx.models.wallet import MONEY


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DepositRequest(Base, TimestampMixin):
    __tablename__ = "deposits"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    amount = Column(MONEY, nullable=False)
    blockchain = Column(String(16), nullable=False)
    deposit_address = Column(String(128), nullable=False)
    # User-supplied tx hash; never verified on-chain.
    transaction_screenshot = Column(String(255), nullable=True)
    status = Column(Enum(RequestStatus), nullable=False, default=RequestStatus.PENDING)
    admin_notes = Column(String(255), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="deposits")
    batch = relationship("NftDeposit", back_populates="deposit", uselist=False)


Index("ix_deposits_user_status", DepositRequest.user_id, DepositRequest.status)
Index("ix_deposits_status", DepositRequest.status)
