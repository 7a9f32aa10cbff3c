import enum
from sqlalchemy import Column, Integer, String, ForeignKey, Enum, Boolean, DateTime, Index
from zerthyx.core.database import Base
from zerthyx.models.base import TimestampMixin
from zerthyx.models.wallet import MONEY


class ReferralStatus(str, enum.Enum):
    PENDING = "pending"
    QUALIFIED = "qualified"
    REWARDED = "rewarded"


class Referral(Base, TimestampMixin):
    __tablename__ = "referrals"

    id = Column(Integer, primary_key=True, index=True)
    referrer_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    referred_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    referral_code = Column(String(16), nullable=False)
    status = Column(Enum(ReferralStatus), nullable=False, default=ReferralStatus.PENDING)
    qualification_amount = Column(MONEY, nullable=True)
    qualification_date = Column(DateTime(timezone=True), nullable=True)
    reward_amount = Column(MONEY, nullable=True)
    reward_paid = Column(Boolean, default=False, nullable=False)


Index("ix_referrals_referrer", Referral.referrer_id)
