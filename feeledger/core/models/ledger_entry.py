"""Ledger entry: one immutable line of a student's running-balance ledger."""

import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from feeledger.db.session import Base


class LedgerEntry(Base):
    """Append-only. (student_id, sequence) is unique, so two writers racing on the same ledger position cannot both commit."""

    __tablename__ = "ledger_entries"
    __table_args__ = (
        UniqueConstraint("student_id", "sequence", name="uq_ledger_entry_student_sequence"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid(as_uuid=True), ForeignKey("students.id", ondelete="RESTRICT"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)
    date = Column(Date, nullable=False, index=True)
    transaction_code = Column(String(40), nullable=False, unique=True)
    balance_bf = Column(Numeric(12, 2), nullable=False)
    new_bill = Column(Numeric(12, 2), nullable=False)
    tax_amount = Column(Numeric(12, 2), nullable=False)
    total_bill = Column(Numeric(12, 2), nullable=False)
    amount_paid = Column(Numeric(12, 2), nullable=False)
    current_balance = Column(Numeric(12, 2), nullable=False)
    status = Column(String(20), nullable=False)  # Full, Partial
    category = Column(String(100), nullable=False)
    processed_by_staff_id = Column(String(50), nullable=False)
    processed_by_staff_name = Column(String(255), nullable=False)
    processed_time = Column(String(20), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    student = relationship("Student", back_populates="ledger_entries")
