from sqlalchemy import CheckConstraint, Column, Integer, String
from sqlalchemy.orm import relationship

from .database import Base


class Item(Base):
    """Catalogue item, keyed by its immutable SKU"""
    __tablename__ = "items"
    __table_args__ = (
        CheckConstraint("selling_price_minor_units >= 0", name="ck_items_price_non_negative"),
    )

    sku = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    selling_price_minor_units = Column(Integer, nullable=False, default=0)
    quantity_unit = Column(String(8), nullable=False, default="unit")  # 'unit' | 'kg'

    stocks = relationship("StockByLocation", back_populates="item", cascade="all, delete-orphan", passive_deletes=True)
    booking = relationship("Booking", back_populates="item", cascade="all, delete-orphan", passive_deletes=True, uselist=False)
