"""
Follow-up Engine - SQLAlchemy ORM Models
Customer snapshot tables and the append-only follow-up ledger
"""
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, Date, Text, ForeignKey, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship
from ..database import Base
from .followup import UsageStatus


# =============================================================================
# CUSTOMER SNAPSHOT (owned by the CRUD screens, read-only here)
# =============================================================================

class CustomerDB(Base):
    """Customer record maintained by the dashboard's data-entry screens."""
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    usage_status = Column(SQLEnum(UsageStatus), nullable=False, default=UsageStatus.ACTIVE, index=True)

    # Free text - arrives from spreadsheet ingestion, parsed by the engine
    contract_start = Column(String(50), nullable=True)
    cs_owner = Column(String(100), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    branches = relationship(
        "BranchDB",
        back_populates="customer",
        cascade="all, delete-orphan",
        order_by="BranchDB.id",
    )


class BranchDB(Base):
    """Branch of a customer. Overrides the customer's contract start when set."""
    __tablename__ = "branches"

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    contract_start = Column(String(50), nullable=True)
    cs_owner = Column(String(100), nullable=True)

    customer = relationship("CustomerDB", back_populates="branches")


# =============================================================================
# FOLLOW-UP LEDGER
# =============================================================================
# Append-only. One row per call attempt or completion.
# Rows are never updated or deleted; history is rebuilt from them.
# =============================================================================

class FollowUpLogDB(Base):
    """
    A recorded call outcome for one (customer, branch, round) identity.

    Append-only. Immutable after insert.
    """
    __tablename__ = "follow_up_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Identity of the obligation this entry resulted from
    customer_id = Column(Integer, nullable=False, index=True)
    branch_name = Column(String(255), nullable=False)
    round = Column(Integer, nullable=False)

    # Snapshot of the obligation at call time
    customer_name = Column(String(255), nullable=True)
    cs_owner = Column(String(100), nullable=True)
    due_date = Column(Date, nullable=True)

    # Outcome - nullable: rows written before the three-way split carry none
    outcome = Column(String(30), nullable=True)
    feedback = Column(Text, nullable=True)

    # Timestamps
    completed_at = Column(DateTime, nullable=False)
    created_by = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_follow_up_logs_identity", "customer_id", "branch_name", "round"),
    )
