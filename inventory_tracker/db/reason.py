from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func

from .database import Base


class AdjustmentReason(Base):
    __tablename__ = "adjustment_reasons"

    name = Column(String, primary_key=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
