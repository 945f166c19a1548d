"""
Follow-up Ledger Service

SQLAlchemy-backed collaborator that feeds the engine its snapshots and
takes its single write.

Core Principles:
1. The ledger records what happened on a call. It never decides.
2. Append-only - there is no update or delete.
3. Each append is one commit; on failure the session is rolled back.
4. History is rebuilt from rows, never mutated in place.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ...models.db_models import BranchDB, CustomerDB, FollowUpLogDB
from ...models.followup import (
    EXCLUDED_USAGE_STATUSES, Branch, Customer, FollowUpLogEntry, FollowUpOutcome,
)

logger = logging.getLogger(__name__)


class FollowUpLedgerService:
    """
    Reads the customer snapshot and the follow-up log, appends new log entries.
    """

    def __init__(self, db: Session):
        self.db = db

    # =========================================================================
    # Customer Snapshot (READ-ONLY)
    # =========================================================================

    def list_active_customers_with_branches(self) -> List[Customer]:
        """
        Get every customer still in use, with nested branches.

        Canceled and inactive customers are filtered out here; the
        generator filters them again so it is safe on any snapshot.
        """
        rows = (
            self.db.query(CustomerDB)
            .options(selectinload(CustomerDB.branches))
            .filter(CustomerDB.usage_status.notin_(list(EXCLUDED_USAGE_STATUSES)))
            .order_by(CustomerDB.id)
            .all()
        )
        return [self.to_customer(row) for row in rows]

    @staticmethod
    def to_customer(row: CustomerDB) -> Customer:
        return Customer(
            id=row.id,
            name=row.name,
            usage_status=row.usage_status,
            contract_start=row.contract_start,
            cs_owner=row.cs_owner,
            branches=[FollowUpLedgerService.to_branch(b) for b in row.branches],
        )

    @staticmethod
    def to_branch(row: BranchDB) -> Branch:
        return Branch(
            name=row.name,
            contract_start=row.contract_start,
            cs_owner=row.cs_owner,
        )

    # =========================================================================
    # Follow-up Log (READ)
    # =========================================================================

    def list_follow_up_logs(self, customer_id: Optional[int] = None) -> List[FollowUpLogEntry]:
        """
        Get the full follow-up history, newest first.

        Args:
            customer_id: Optional filter for a single customer's history

        Returns:
            List of log entries
        """
        query = self.db.query(FollowUpLogDB)

        if customer_id is not None:
            query = query.filter(FollowUpLogDB.customer_id == customer_id)

        rows = query.order_by(FollowUpLogDB.created_at.desc(), FollowUpLogDB.id.desc()).all()
        return [self.to_log_entry(row) for row in rows]

    @staticmethod
    def read_outcome(row: FollowUpLogDB) -> FollowUpOutcome:
        """
        Outcome of a stored row.

        Rows written before outcomes were recorded carry none and read as
        completed. Unrecognised values read as no_answer so the obligation
        stays in the queue.
        """
        if not row.outcome:
            return FollowUpOutcome.COMPLETED
        try:
            return FollowUpOutcome(row.outcome)
        except ValueError:
            logger.warning(f"Follow-up log {row.id} has unknown outcome '{row.outcome}', reading as no_answer")
            return FollowUpOutcome.NO_ANSWER

    @classmethod
    def to_log_entry(cls, row: FollowUpLogDB) -> FollowUpLogEntry:
        return FollowUpLogEntry(
            id=row.id,
            customer_id=row.customer_id,
            customer_name=row.customer_name or "",
            branch_name=row.branch_name,
            round=row.round,
            cs_owner=row.cs_owner or "",
            due_date=row.due_date,
            completed_at=row.completed_at,
            feedback=row.feedback,
            outcome=cls.read_outcome(row),
            created_by=row.created_by,
            created_at=row.created_at,
        )

    # =========================================================================
    # Follow-up Log (APPEND)
    # =========================================================================

    def append_follow_up_log(self, entry: FollowUpLogEntry) -> FollowUpLogEntry:
        """
        Append one entry to the ledger.

        The only write the engine performs. Commits immediately; on failure
        the session is rolled back and the error propagates.

        Returns:
            The stored entry, with id and created_at assigned
        """
        row = FollowUpLogDB(
            customer_id=entry.customer_id,
            customer_name=entry.customer_name,
            branch_name=entry.branch_name,
            round=entry.round,
            cs_owner=entry.cs_owner,
            due_date=entry.due_date,
            completed_at=entry.completed_at,
            feedback=entry.feedback,
            outcome=entry.outcome.value,
            created_by=entry.created_by,
            created_at=entry.created_at or datetime.utcnow(),
        )
        try:
            self.db.add(row)
            # Flush assigns the id; the stored entry is built before commit
            self.db.flush()
            stored = self.to_log_entry(row)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        return stored
