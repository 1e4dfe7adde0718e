from sqlalchemy import JSON, Boolean, Column, DateTime, String, func

from database import Base


class Customer(Base):
    __tablename__ = "customers"

    uid = Column(String(64), primary_key=True, index=True)
    # Validated category payloads (snake_case); NULL until the step is submitted
    personal_info = Column(JSON, nullable=True)
    contact_info = Column(JSON, nullable=True)
    loan_info = Column(JSON, nullable=True)
    financial_info = Column(JSON, nullable=True)
    is_finalized = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
