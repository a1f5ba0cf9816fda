"""SQLAlchemy ORM models for pool state"""

import uuid
from sqlalchemy import Column, BigInteger, Boolean, DateTime, Integer, Text, JSON
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class AccountRecord(Base):
    """Tracked balance for one identity"""

    __tablename__ = "account"

    identity = Column(Text, primary_key=True)
    balance = Column(BigInteger, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class LoanRecord(Base):
    """Loan book entry; the index column is the loan's stable handle"""

    __tablename__ = "loan"

    index = Column("loan_index", Integer, primary_key=True, autoincrement=False)
    borrower = Column(Text, nullable=False, index=True)
    principal = Column(BigInteger, nullable=False)
    rate = Column(Integer, nullable=False)
    duration = Column(BigInteger, nullable=False)
    created_at = Column(BigInteger, nullable=False)
    maturity = Column(BigInteger, nullable=False)
    repaid = Column(Boolean, nullable=False, default=False)
    repaid_at = Column(BigInteger, nullable=True)


class OutboundWebhook(Base):
    """Event delivery log with retry tracking"""

    __tablename__ = "outbound_webhook"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_type = Column(Text, nullable=False)
    payload = Column(JSON, nullable=False)
    target_url = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="pending")
    last_attempt_at = Column(DateTime(timezone=True), nullable=True)
    attempts = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
