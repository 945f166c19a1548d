"""
Outcome Recorder

The engine's only side effect: appends one immutable log entry per call
attempt or completion through the ledger collaborator.

Key behaviors:
- Exactly one append per call; no batching, no retry
- Recording the same identity twice writes two entries
- A failed write raises LedgerWriteError and leaves no local "done" state;
  the obligation stays in the next generated queue
- After a successful write the caller re-reconciles against a fresh log snapshot
"""
import logging
from datetime import datetime
from typing import Optional, Union

from ...models.followup import FollowUpLogEntry, FollowUpObligation, FollowUpOutcome
from .errors import InvalidOutcomeError, LedgerWriteError

logger = logging.getLogger(__name__)


class OutcomeRecorder:
    """
    Records call outcomes for live obligations.

    `ledger` is any object exposing append_follow_up_log(entry) -> entry,
    normally a FollowUpLedgerService.
    """

    def __init__(self, ledger):
        self.ledger = ledger

    @staticmethod
    def parse_outcome(outcome: Union[FollowUpOutcome, str, None]) -> FollowUpOutcome:
        if outcome is None or outcome == "":
            raise InvalidOutcomeError("Outcome is required")
        try:
            return FollowUpOutcome(outcome)
        except ValueError:
            valid = [o.value for o in FollowUpOutcome]
            raise InvalidOutcomeError(f"Invalid outcome '{outcome}'. Must be one of: {valid}")

    def build_entry(
        self,
        obligation: FollowUpObligation,
        outcome: FollowUpOutcome,
        feedback: Optional[str],
        completed_at: datetime,
        created_by: Optional[str],
    ) -> FollowUpLogEntry:
        return FollowUpLogEntry(
            customer_id=obligation.customer_id,
            customer_name=obligation.customer_name,
            branch_name=obligation.branch_name,
            round=obligation.round,
            cs_owner=obligation.cs_owner,
            due_date=obligation.due_date,
            completed_at=completed_at,
            feedback=feedback or None,
            outcome=outcome,
            created_by=created_by,
        )

    def record_outcome(
        self,
        obligation: FollowUpObligation,
        outcome: Union[FollowUpOutcome, str],
        feedback: Optional[str] = None,
        now: Optional[datetime] = None,
        created_by: Optional[str] = None,
    ) -> FollowUpLogEntry:
        """
        Append one log entry for `obligation`.

        Args:
            obligation: A live (non-suppressed) obligation from the current queue
            outcome: completed, no_answer or callback_later
            feedback: Optional free-text notes from the call
            now: Timestamp recorded as completed_at (default: utcnow)
            created_by: Operator who made the call

        Returns:
            The entry as stored by the ledger

        Raises:
            InvalidOutcomeError: outcome missing or unknown; nothing is written
            LedgerWriteError: the append failed; ledger state is unchanged
        """
        parsed = self.parse_outcome(outcome)
        entry = self.build_entry(obligation, parsed, feedback, now or datetime.utcnow(), created_by)

        try:
            stored = self.ledger.append_follow_up_log(entry)
        except Exception as e:
            logger.error(f"Failed to record {parsed.value} for {obligation.identity}: {e}")
            raise LedgerWriteError(f"Could not append follow-up log: {e}") from e

        logger.info(f"Recorded {parsed.value} for {obligation.identity}")
        return stored
