"""
Follow-up Scheduling Services

Retention check-in obligations and their outcome ledger.

- milestones: Fixed 7/14/30/60/90 day table and date arithmetic
- ObligationGenerator: Customer snapshot -> live obligations
- reconcile: Log snapshot -> completed identities and attempt counts
- generate_queue / list_history: Suppress, bucket, sort and page the queue
- bucket_counts / attempts_by_owner: Summary figures for the dashboard and reports
- OutcomeRecorder: The single append to the ledger
- FollowUpLedgerService: SQLAlchemy persistence collaborator
"""

from .milestones import MILESTONES
from .errors import FollowUpError, InvalidOutcomeError, LedgerWriteError
from .obligation_generator import ObligationGenerator, generate_obligations, HEAD_OFFICE_BRANCH
from .ledger_reconciler import reconcile
from .queue_projector import (
    PAGE_SIZE, QueueView, attempts_by_owner, bucket_counts, generate_queue, list_history,
    project_queue,
)
from .outcome_recorder import OutcomeRecorder
from .followup_ledger import FollowUpLedgerService

__all__ = [
    'MILESTONES',
    'FollowUpError',
    'InvalidOutcomeError',
    'LedgerWriteError',
    'ObligationGenerator',
    'generate_obligations',
    'HEAD_OFFICE_BRANCH',
    'reconcile',
    'PAGE_SIZE',
    'QueueView',
    'attempts_by_owner',
    'bucket_counts',
    'generate_queue',
    'list_history',
    'project_queue',
    'OutcomeRecorder',
    'FollowUpLedgerService',
]
