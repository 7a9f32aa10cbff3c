import enum
from sqlalchemy import Column, Integer, String, Boolean, Enum, Index
from sqlalchemy.orm import relationship
from zerthyx.core.database import Base
from zerthyx.models.base import TimestampMixin


class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=False, default="")
    role = Column(Enum(UserRole), nullable=False, default=UserRole.USER)
    is_active = Column(Boolean, default=True, nullable=False)
    referral_code = Column(String(16), unique=True, nullable=True)

    wallet = relationship("Wallet", back_populates="user", uselist=False)
    deposits = relationship("DepositRequest", back_populates="user")
    withdrawals = relationship("WithdrawalRequest", back_populates="user")


Index("ix_users_role_active", User.role, User.is_active)
