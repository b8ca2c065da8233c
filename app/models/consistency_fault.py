# app/models/consistency_fault.py
from sqlalchemy import Column, String, DateTime, Text, Uuid
from sqlalchemy.sql import func
from app.models.base import Base
import enum
import uuid


class ConsistencyFaultKind(str, enum.Enum):
    RESTAURANT_MISSING = "restaurant_missing"
    DATE_ENTRY_MISSING = "date_entry_missing"
    TABLE_DEFINITION_MISSING = "table_definition_missing"
    LEGACY_SIZE_MATCH_MISSING = "legacy_size_match_missing"
    RELEASE_CONFLICT = "release_conflict"


class ConsistencyFault(Base):
    """
    A detected break of the slot/booking invariant, found while repairing
    inventory after a cancellation. Recorded for reconciliation, never
    reported to the diner.
    """
    __tablename__ = "consistency_faults"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    kind = Column(String(50), nullable=False, index=True)
    booking_id = Column(Uuid(as_uuid=True), nullable=True, index=True)
    restaurant_id = Column(Uuid(as_uuid=True), nullable=True)
    detail = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<ConsistencyFault(kind={self.kind}, booking_id={self.booking_id})>"
