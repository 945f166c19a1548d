"""
Queue Projector

Merges generated obligations with the reconciled ledger into the paged
view a caller (dashboard or automation) sees on each refresh.

Fixed order of operations:
1. Suppression - drop identities with a completed log entry
2. Search      - case-insensitive substring on customer or branch name
3. Bucket      - today / overdue / upcoming / all (history bypasses 1-3)
4. Sort        - ascending by days used
5. Paginate    - PAGE_SIZE items per page

Every call is a pure function of its inputs.
"""
import logging
import math
from collections import Counter
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence, TypeVar, Union

from ...models.followup import (
    Customer, FollowUpLogEntry, FollowUpObligation, HistoryPage,
    LedgerReconciliation, Page, QueueItem, QueuePage, QueueTab,
)
from .ledger_reconciler import reconcile
from .milestones import (
    FIRST_MILESTONE, is_milestone, next_milestone, previous_milestone,
)
from .obligation_generator import generate_obligations

logger = logging.getLogger(__name__)


PAGE_SIZE = 10

LIVE_TABS = (QueueTab.TODAY, QueueTab.OVERDUE, QueueTab.UPCOMING, QueueTab.ALL)

T = TypeVar("T")


# =============================================================================
# VIEW STATE
# =============================================================================

@dataclass(frozen=True)
class QueueView:
    """
    Tab, search term and page of a caller's queue view.

    Changing the tab or the search term sends the view back to page 1.
    Refreshing with the same tab and term keeps the current page.
    """
    tab: QueueTab = QueueTab.TODAY
    search_term: str = ""
    page: int = 1

    def with_tab(self, tab: Union[QueueTab, str]) -> "QueueView":
        tab = QueueTab(tab)
        if tab == self.tab:
            return self
        return replace(self, tab=tab, page=1)

    def with_search(self, search_term: Optional[str]) -> "QueueView":
        search_term = search_term or ""
        if search_term == self.search_term:
            return self
        return replace(self, search_term=search_term, page=1)

    def with_page(self, page: int) -> "QueueView":
        return replace(self, page=max(1, page))


# =============================================================================
# FILTERS
# =============================================================================

def is_suppressed(obligation: FollowUpObligation, reconciliation: LedgerReconciliation) -> bool:
    return reconciliation.is_completed(obligation.identity)


def matches_search(obligation: FollowUpObligation, search_term: Optional[str]) -> bool:
    term = (search_term or "").strip().lower()
    if not term:
        return True
    return term in obligation.customer_name.lower() or term in obligation.branch_name.lower()


def in_bucket(days: int, tab: QueueTab) -> bool:
    """
    Whether an obligation `days` into its contract belongs to a live tab.

    today    - exactly on a milestone day
    overdue  - past the milestone below the next unreached one, and not on a milestone
    upcoming - contract started, first milestone not reached
    all      - everything
    """
    if tab == QueueTab.TODAY:
        return is_milestone(days)
    if tab == QueueTab.OVERDUE:
        upcoming = next_milestone(days)
        return days > previous_milestone(upcoming) and not is_milestone(days)
    if tab == QueueTab.UPCOMING:
        return 0 <= days < FIRST_MILESTONE
    if tab == QueueTab.ALL:
        return True
    raise ValueError(f"{tab} is not a live queue tab")


# =============================================================================
# PAGINATION
# =============================================================================

def paginate(items: Sequence[T], page: int, page_size: int = PAGE_SIZE) -> Page[T]:
    """Slice one page. Pages below 1 read as 1; pages past the end are empty."""
    page = max(1, page)
    total = len(items)
    start = (page - 1) * page_size
    return Page(
        items=list(items[start:start + page_size]),
        total_count=total,
        total_pages=math.ceil(total / page_size),
        page=page,
    )


# =============================================================================
# PROJECTIONS
# =============================================================================

def live_pool(
    obligations: Iterable[FollowUpObligation],
    reconciliation: LedgerReconciliation,
    search_term: Optional[str] = "",
) -> List[FollowUpObligation]:
    """Obligations that survive suppression and search, in generator order."""
    return [
        o for o in obligations
        if not is_suppressed(o, reconciliation) and matches_search(o, search_term)
    ]


def project_queue(
    obligations: Iterable[FollowUpObligation],
    reconciliation: LedgerReconciliation,
    tab: Union[QueueTab, str] = QueueTab.TODAY,
    search_term: Optional[str] = "",
    page: int = 1,
) -> QueuePage:
    """Suppress, search, bucket, sort and paginate an already generated obligation list."""
    tab = QueueTab(tab)
    pool = live_pool(obligations, reconciliation, search_term)

    bucket = [o for o in pool if in_bucket(o.days_used, tab)]
    # Stable: obligations with equal days used keep due-date order
    bucket.sort(key=lambda o: o.days_used)

    items = [QueueItem(obligation=o, attempts=reconciliation.attempts_for(o.identity)) for o in bucket]
    return paginate(items, page)


def generate_queue(
    customers: Iterable[Customer],
    logs: Iterable[FollowUpLogEntry],
    now: Union[date, datetime],
    tab: Union[QueueTab, str] = QueueTab.TODAY,
    search_term: Optional[str] = "",
    page: int = 1,
) -> Union[QueuePage, HistoryPage]:
    """
    Build one page of the follow-up queue.

    The history tab bypasses the live queue and pages the raw ledger instead.
    Identical inputs always produce identical output.
    """
    tab = QueueTab(tab)
    logs = list(logs)

    if tab == QueueTab.HISTORY:
        return list_history(logs, page)

    obligations = generate_obligations(customers, now)
    result = project_queue(obligations, reconcile(logs), tab, search_term, page)

    logger.info(
        f"Follow-up queue generated: tab={tab.value} page={result.page}/{result.total_pages} "
        f"items={result.total_count} of {len(obligations)} obligations"
    )
    return result


def history_sort_key(entry: FollowUpLogEntry):
    return (
        entry.completed_at,
        entry.created_at or datetime.min,
        entry.id or 0,
    )


def list_history(
    logs: Iterable[FollowUpLogEntry],
    page: int = 1,
    customer_id: Optional[int] = None,
) -> HistoryPage:
    """Page the raw ledger newest first, independent of suppression and buckets."""
    entries = [e for e in logs if customer_id is None or e.customer_id == customer_id]
    entries.sort(key=history_sort_key, reverse=True)
    return paginate(entries, page)


def bucket_counts(
    customers: Iterable[Customer],
    logs: Iterable[FollowUpLogEntry],
    now: Union[date, datetime],
    search_term: Optional[str] = "",
) -> Dict[str, int]:
    """Item count per tab, matching the total_count each tab would report."""
    logs = list(logs)
    pool = live_pool(generate_obligations(customers, now), reconcile(logs), search_term)

    counts = {
        tab.value: sum(1 for o in pool if in_bucket(o.days_used, tab))
        for tab in LIVE_TABS
    }
    counts[QueueTab.HISTORY.value] = len(logs)
    return counts


def attempts_by_owner(logs: Iterable[FollowUpLogEntry]) -> Dict[str, int]:
    """
    Unresolved call attempts per CS owner, busiest owner first.

    Counts every no_answer / callback_later entry in the ledger, whether or
    not the obligation was completed later. Entries without an owner are
    grouped under an empty string.
    """
    tally = Counter(e.cs_owner for e in logs if not e.is_completion)
    return dict(tally.most_common())
