from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from .database import Base


class Location(Base):
    __tablename__ = "locations"

    # generated by the location registry, stable for the location's lifetime
    id = Column(String(36), primary_key=True)
    name = Column(String, nullable=False)

    stocks = relationship("StockByLocation", back_populates="location", cascade="all, delete-orphan", passive_deletes=True)
