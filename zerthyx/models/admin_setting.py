from sqlalchemy import Column, Integer, String
from zerthyx.core.database import Base
from zerthyx.models.base import TimestampMixin


class AdminSetting(Base, TimestampMixin):
    __tablename__ = "admin_settings"

    id = Column(Integer, primary_key=True, index=True)
    setting_key = Column(String(64), unique=True, nullable=False, index=True)
    setting_value = Column(String(512), nullable=False)
