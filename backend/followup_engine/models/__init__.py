"""Follow-up Engine - Data Models"""
from .followup import (
    # Enums
    UsageStatus, FollowUpStatus, FollowUpOutcome, QueueTab,
    # Customer snapshot
    Customer, Branch,
    # Derived obligations
    ObligationIdentity, FollowUpObligation,
    # Ledger
    FollowUpLogEntry,
    # Projections
    LedgerReconciliation, QueueItem, Page, QueuePage, HistoryPage,
)

__all__ = [
    "UsageStatus", "FollowUpStatus", "FollowUpOutcome", "QueueTab",
    "Customer", "Branch",
    "ObligationIdentity", "FollowUpObligation",
    "FollowUpLogEntry",
    "LedgerReconciliation", "QueueItem", "Page", "QueuePage", "HistoryPage",
]
