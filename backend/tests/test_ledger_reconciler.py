"""
Tests for the Outcome Ledger Reconciler.
"""
from followup_engine.models.followup import FollowUpOutcome, ObligationIdentity
from followup_engine.services.followup.ledger_reconciler import reconcile

from conftest import make_log


IDENTITY = ObligationIdentity(1, "head office", 7)


class TestReconcile:
    """Completed identities and attempt counts from a log snapshot."""

    def test_empty_log(self):
        result = reconcile([])
        assert result.completed_keys == frozenset()
        assert result.attempts == {}
        assert result.attempts_for(IDENTITY) == 0
        assert not result.is_completed(IDENTITY)

    def test_completed_entry_marks_identity(self):
        result = reconcile([make_log(1, 7)])
        assert result.is_completed(IDENTITY)
        assert result.attempts_for(IDENTITY) == 0

    def test_attempt_then_completion(self):
        """no_answer followed by completed: one attempt, and done."""
        logs = [
            make_log(1, 7, FollowUpOutcome.NO_ANSWER),
            make_log(1, 7, FollowUpOutcome.COMPLETED),
        ]
        result = reconcile(logs)
        assert result.is_completed(IDENTITY)
        assert result.attempts_for(IDENTITY) == 1

    def test_duplicate_completions_collapse(self):
        result = reconcile([make_log(1, 7), make_log(1, 7)])
        assert result.completed_keys == frozenset({IDENTITY})

    def test_attempts_are_never_capped(self):
        logs = [make_log(1, 7, FollowUpOutcome.CALLBACK_LATER) for _ in range(25)]
        result = reconcile(logs)
        assert result.attempts_for(IDENTITY) == 25
        assert not result.is_completed(IDENTITY)

    def test_attempts_after_completion_still_count(self):
        logs = [
            make_log(1, 7, FollowUpOutcome.COMPLETED),
            make_log(1, 7, FollowUpOutcome.NO_ANSWER),
        ]
        assert reconcile(logs).attempts_for(IDENTITY) == 1

    def test_identities_are_independent(self):
        """Branch and round are part of the key."""
        logs = [
            make_log(1, 7),
            make_log(1, 14, FollowUpOutcome.NO_ANSWER),
            make_log(1, 7, FollowUpOutcome.NO_ANSWER, branch_name="Silom"),
            make_log(2, 7, FollowUpOutcome.NO_ANSWER),
        ]
        result = reconcile(logs)

        assert result.completed_keys == frozenset({IDENTITY})
        assert result.attempts_for(ObligationIdentity(1, "head office", 14)) == 1
        assert result.attempts_for(ObligationIdentity(1, "Silom", 7)) == 1
        assert result.attempts_for(ObligationIdentity(2, "head office", 7)) == 1
        assert result.attempts_for(IDENTITY) == 0

    def test_rebuilt_from_scratch(self):
        """Same snapshot, same result; a longer snapshot is not patched onto an old one."""
        logs = [make_log(1, 7, FollowUpOutcome.NO_ANSWER)]
        first = reconcile(logs)
        assert reconcile(logs) == first

        longer = reconcile(logs + [make_log(1, 7)])
        assert first.attempts_for(IDENTITY) == 1
        assert not first.is_completed(IDENTITY)
        assert longer.is_completed(IDENTITY)
