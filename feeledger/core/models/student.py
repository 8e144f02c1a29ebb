"""Learner directory row. Identity and class are owned by the registry; the ledger owns is_fees_cleared."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, String, Uuid
from sqlalchemy.orm import relationship

from feeledger.db.session import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    serial_id = Column(String(50), nullable=False, unique=True, index=True)
    first_name = Column(String(100), nullable=False)
    surname = Column(String(100), nullable=False)
    current_class = Column(String(50), nullable=False, index=True)
    status = Column(String(30), nullable=False, default="Admitted")  # Pending, Scheduled, Results Ready, Admitted, Withdrawn
    is_fees_cleared = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    ledger_entries = relationship(
        "LedgerEntry",
        back_populates="student",
        order_by="LedgerEntry.sequence",
    )
