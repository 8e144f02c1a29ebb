"""Transaction audit log: institution-wide record of who processed which payment."""

import uuid
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Numeric, String, Uuid

from feeledger.db.session import Base


class TransactionAuditLog(Base):
    """Immutable. Paired with a ledger entry through transaction_code only."""

    __tablename__ = "transaction_audit_logs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    date = Column(Date, nullable=False, index=True)
    time = Column(String(20), nullable=False)
    staff_id = Column(String(50), nullable=False, index=True)
    staff_name = Column(String(255), nullable=False)
    learner_id = Column(String(50), nullable=False, index=True)
    learner_name = Column(String(255), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    category = Column(String(100), nullable=False)
    transaction_code = Column(String(40), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
