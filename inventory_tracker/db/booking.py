from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .database import Base


class Booking(Base):
    """Booked (promised) quantity and free-text note per SKU"""
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_bookings_quantity_non_negative"),
    )

    sku = Column(String, ForeignKey("items.sku", ondelete="CASCADE"), primary_key=True)
    quantity = Column(Integer, nullable=False, default=0)
    note = Column(Text, nullable=False, default="")

    item = relationship("Item", back_populates="booking")
