"""
Tests for the Outcome Recorder.

Key tests:
1. One append per call, entry built from the obligation
2. Outcome validation happens before any write
3. Duplicate calls write duplicate entries
4. Write failures surface as LedgerWriteError and leave the queue unchanged
"""
from datetime import datetime

import pytest
from unittest.mock import MagicMock

from followup_engine.models.followup import FollowUpLogEntry, FollowUpOutcome, QueueTab
from followup_engine.services.followup.errors import InvalidOutcomeError, LedgerWriteError
from followup_engine.services.followup.obligation_generator import generate_obligations
from followup_engine.services.followup.outcome_recorder import OutcomeRecorder
from followup_engine.services.followup.queue_projector import generate_queue

from conftest import NOW, make_customer


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def mock_ledger():
    """Ledger collaborator that echoes the appended entry."""
    ledger = MagicMock()
    ledger.append_follow_up_log = MagicMock(side_effect=lambda entry: entry)
    return ledger


@pytest.fixture
def recorder(mock_ledger):
    return OutcomeRecorder(mock_ledger)


@pytest.fixture
def obligation():
    customer = make_customer(42, 19, name="Acme Dental", cs_owner="Nok")
    return generate_obligations([customer], NOW)[0]


# =============================================================================
# APPEND
# =============================================================================

class TestRecordOutcome:

    def test_appends_one_entry(self, recorder, mock_ledger, obligation):
        entry = recorder.record_outcome(obligation, FollowUpOutcome.NO_ANSWER, feedback="Line busy", now=NOW)

        mock_ledger.append_follow_up_log.assert_called_once()
        assert isinstance(entry, FollowUpLogEntry)
        assert entry.identity == obligation.identity
        assert entry.customer_name == "Acme Dental"
        assert entry.cs_owner == "Nok"
        assert entry.due_date == obligation.due_date
        assert entry.completed_at == NOW
        assert entry.feedback == "Line busy"
        assert entry.outcome == FollowUpOutcome.NO_ANSWER

    def test_returns_stored_entry(self, mock_ledger, obligation):
        stored = MagicMock()
        mock_ledger.append_follow_up_log.side_effect = None
        mock_ledger.append_follow_up_log.return_value = stored

        assert OutcomeRecorder(mock_ledger).record_outcome(obligation, "completed") is stored

    def test_outcome_accepts_string(self, recorder, obligation):
        entry = recorder.record_outcome(obligation, "callback_later")
        assert entry.outcome == FollowUpOutcome.CALLBACK_LATER

    def test_completed_at_defaults_to_now(self, recorder, obligation):
        before = datetime.utcnow()
        entry = recorder.record_outcome(obligation, FollowUpOutcome.COMPLETED)
        assert before <= entry.completed_at <= datetime.utcnow()

    def test_empty_feedback_is_none(self, recorder, obligation):
        assert recorder.record_outcome(obligation, "completed", feedback="").feedback is None

    def test_created_by_recorded(self, recorder, obligation):
        assert recorder.record_outcome(obligation, "completed", created_by="ploy").created_by == "ploy"

    def test_duplicate_calls_write_twice(self, recorder, mock_ledger, obligation):
        recorder.record_outcome(obligation, FollowUpOutcome.COMPLETED)
        recorder.record_outcome(obligation, FollowUpOutcome.COMPLETED)
        assert mock_ledger.append_follow_up_log.call_count == 2


# =============================================================================
# VALIDATION AND FAILURE
# =============================================================================

class TestRecordOutcomeErrors:

    @pytest.mark.parametrize("outcome", [None, "", "done", "COMPLETED"])
    def test_invalid_outcome_rejected_before_write(self, recorder, mock_ledger, obligation, outcome):
        with pytest.raises(InvalidOutcomeError):
            recorder.record_outcome(obligation, outcome)
        mock_ledger.append_follow_up_log.assert_not_called()

    def test_write_failure_raises_ledger_write_error(self, recorder, mock_ledger, obligation):
        mock_ledger.append_follow_up_log.side_effect = RuntimeError("connection reset")

        with pytest.raises(LedgerWriteError) as exc_info:
            recorder.record_outcome(obligation, FollowUpOutcome.COMPLETED)

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert "connection reset" in str(exc_info.value)
        mock_ledger.append_follow_up_log.assert_called_once()

    def test_failed_write_leaves_obligation_in_queue(self, mock_ledger):
        """No optimistic done state: the next generation still shows the call."""
        customers = [make_customer(1, 7)]
        mock_ledger.append_follow_up_log.side_effect = RuntimeError("timeout")
        logs = []

        obligation = generate_queue(customers, logs, NOW, QueueTab.TODAY).items[0].obligation
        with pytest.raises(LedgerWriteError):
            OutcomeRecorder(mock_ledger).record_outcome(obligation, FollowUpOutcome.COMPLETED)

        again = generate_queue(customers, logs, NOW, QueueTab.TODAY)
        assert [i.obligation.identity for i in again.items] == [obligation.identity]
