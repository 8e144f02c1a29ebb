"""Finance settings: billable categories, class bill schedule and tax rates. Single row."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, Numeric, Text

from feeledger.db.session import Base


class FinanceSetting(Base):
    __tablename__ = "finance_settings"

    id = Column(Integer, primary_key=True, default=1)
    categories = Column(JSON, nullable=False, default=list)
    class_bills = Column(JSON, nullable=False, default=dict)  # {class: {category: "amount"}}
    vat_rate = Column(Numeric(6, 2), nullable=False, default=0)
    nhil_rate = Column(Numeric(6, 2), nullable=False, default=0)
    get_levy_rate = Column(Numeric(6, 2), nullable=False, default=0)
    covid_levy_rate = Column(Numeric(6, 2), nullable=False, default=0)
    is_tax_enabled = Column(Boolean, nullable=False, default=False)
    receipt_message = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
