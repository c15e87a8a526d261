import uuid

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from ..database import Base


class StockByLocation(Base):
    __tablename__ = "stock_by_location"
    __table_args__ = (
        UniqueConstraint("sku", "location_id", name="ux_stock_by_location_sku_location"),
        CheckConstraint("quantity >= 0", name="ck_stock_by_location_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    sku = Column(String, ForeignKey("items.sku", ondelete="CASCADE"), nullable=False, index=True)
    location_id = Column(String(36), ForeignKey("locations.id", ondelete="CASCADE"), nullable=False, index=True)

    quantity = Column(Integer, nullable=False, default=0)

    item = relationship("Item", back_populates="stocks")
    location = relationship("Location", back_populates="stocks")
