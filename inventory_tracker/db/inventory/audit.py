import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, Text

from ..database import Base


class AuditTrailEntry(Base):
    """Append-only. No foreign keys: entries outlive the items and locations they name."""
    __tablename__ = "audit_trail"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_audit_trail_quantity_positive"),
    )

    # insertion order; breaks timestamp ties
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), nullable=False, unique=True, default=lambda: str(uuid.uuid4()))
    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)
    kind = Column(String(16), nullable=False, index=True)  # 'add' | 'deduct' | 'transfer'
    sku = Column(String, nullable=False, index=True)

    location_id = Column(String(36), nullable=True)
    from_location_id = Column(String(36), nullable=True)
    to_location_id = Column(String(36), nullable=True)

    quantity = Column(Integer, nullable=False)
    reason = Column(Text, nullable=True)
    note = Column(Text, nullable=True)
    actor_id = Column(String(36), nullable=True)

    item_name_cached = Column(String, nullable=False)
    location_name_cached = Column(String, nullable=True)
    from_location_name_cached = Column(String, nullable=True)
    to_location_name_cached = Column(String, nullable=True)
