"""
Follow-up Engine - Domain Models

Plain data structures passed between the generator, the reconciler,
the projector and the recorder. Obligations are derived on every call
and never persisted; log entries mirror rows of the append-only ledger.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, FrozenSet, Generic, List, NamedTuple, Optional, TypeVar, Union


# =============================================================================
# ENUMS
# =============================================================================

class UsageStatus(str, Enum):
    ACTIVE = "Active"
    PENDING = "Pending"
    TRAINING = "Training"
    CANCELED = "Canceled"
    INACTIVE = "Inactive"


# Customers in these states never owe a check-in call
EXCLUDED_USAGE_STATUSES = frozenset({UsageStatus.CANCELED, UsageStatus.INACTIVE})


class FollowUpStatus(str, Enum):
    """Status of a live obligation relative to its round day."""
    PENDING = "Pending"
    CALLING = "Calling"
    OVERDUE = "Overdue"


class FollowUpOutcome(str, Enum):
    """Result of a single call attempt recorded in the ledger."""
    COMPLETED = "completed"
    NO_ANSWER = "no_answer"
    CALLBACK_LATER = "callback_later"


class QueueTab(str, Enum):
    TODAY = "today"
    OVERDUE = "overdue"
    UPCOMING = "upcoming"
    ALL = "all"
    HISTORY = "history"


# =============================================================================
# CUSTOMER SNAPSHOT (read-only input)
# =============================================================================

ContractDate = Union[date, datetime, str, None]


@dataclass(frozen=True)
class Branch:
    """A customer branch. Its own contract start overrides the customer's."""
    name: str
    contract_start: ContractDate = None
    cs_owner: Optional[str] = None


@dataclass(frozen=True)
class Customer:
    id: int
    name: str
    usage_status: UsageStatus = UsageStatus.ACTIVE
    contract_start: ContractDate = None
    cs_owner: Optional[str] = None
    branches: List[Branch] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.usage_status not in EXCLUDED_USAGE_STATUSES


# =============================================================================
# OBLIGATIONS (derived, never persisted)
# =============================================================================

class ObligationIdentity(NamedTuple):
    """
    Natural key of an obligation and of every log entry about it.

    Two obligations are the same thing iff all three parts match.
    """
    customer_id: int
    branch_name: str
    round: int


@dataclass(frozen=True)
class FollowUpObligation:
    customer_id: int
    customer_name: str
    branch_name: str
    round: int
    due_date: date
    contract_start: date
    cs_owner: str
    status: FollowUpStatus
    days_used: int

    @property
    def identity(self) -> ObligationIdentity:
        return ObligationIdentity(self.customer_id, self.branch_name, self.round)

    @property
    def days_remaining(self) -> int:
        """Days until the round day; positive means the call is not due yet."""
        return self.round - self.days_used


# =============================================================================
# LEDGER ENTRIES (persisted, append-only)
# =============================================================================

@dataclass(frozen=True)
class FollowUpLogEntry:
    """
    One recorded call attempt or completion.

    Immutable once written. id is None until the ledger assigns one.
    """
    customer_id: int
    branch_name: str
    round: int
    outcome: FollowUpOutcome
    completed_at: datetime
    due_date: Optional[date] = None
    customer_name: str = ""
    cs_owner: str = ""
    feedback: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    id: Optional[int] = None

    @property
    def identity(self) -> ObligationIdentity:
        return ObligationIdentity(self.customer_id, self.branch_name, self.round)

    @property
    def is_completion(self) -> bool:
        return self.outcome == FollowUpOutcome.COMPLETED


# =============================================================================
# PROJECTIONS
# =============================================================================

@dataclass(frozen=True)
class LedgerReconciliation:
    """Completed identities and attempt counts rebuilt from a log snapshot."""
    completed_keys: FrozenSet[ObligationIdentity]
    attempts: Dict[ObligationIdentity, int]

    def is_completed(self, identity: ObligationIdentity) -> bool:
        return identity in self.completed_keys

    def attempts_for(self, identity: ObligationIdentity) -> int:
        return self.attempts.get(identity, 0)


@dataclass(frozen=True)
class QueueItem:
    """A live obligation together with how many unresolved attempts it has."""
    obligation: FollowUpObligation
    attempts: int = 0


T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    items: List[T]
    total_count: int
    total_pages: int
    page: int


QueuePage = Page[QueueItem]
HistoryPage = Page[FollowUpLogEntry]
