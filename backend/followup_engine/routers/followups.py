"""
Follow-up API Routes

Endpoints for the retention check-in queue.
Queue and history views are recomputed from the customer snapshot and the
follow-up ledger on every request. Recording an outcome is the only write.
"""
from datetime import datetime
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..auth import get_current_operator
from ..database import get_db
from ..models.followup import (
    FollowUpLogEntry, FollowUpOutcome, HistoryPage, QueuePage, QueueTab,
)
from ..services.followup import (
    MILESTONES,
    FollowUpLedgerService,
    LedgerWriteError,
    OutcomeRecorder,
    attempts_by_owner,
    bucket_counts,
    generate_obligations,
    generate_queue,
    list_history,
    reconcile,
)


router = APIRouter(prefix="/followups", tags=["followups"])


def get_now() -> datetime:
    """Snapshot of the server clock for one request."""
    return datetime.now()


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class RecordOutcomeRequest(BaseModel):
    """Request to record the result of a check-in call."""
    customer_id: int = Field(..., description="Customer the call was for")
    branch_name: str = Field(..., description="Branch name, 'head office' for customers without branches")
    round: int = Field(..., description="Milestone round (7, 14, 30, 60, 90)")
    outcome: FollowUpOutcome = Field(..., description="completed, no_answer or callback_later")
    feedback: Optional[str] = Field(None, description="Notes from the call")


class ObligationResponse(BaseModel):
    """A live follow-up obligation."""
    customer_id: int
    customer_name: str
    branch_name: str
    round: int
    due_date: str
    contract_start: str
    cs_owner: str
    status: str
    days_used: int
    days_remaining: int
    attempts: int


class LogEntryResponse(BaseModel):
    """A follow-up ledger entry."""
    id: Optional[int]
    customer_id: int
    customer_name: str
    branch_name: str
    round: int
    cs_owner: str
    due_date: Optional[str]
    completed_at: str
    feedback: Optional[str]
    outcome: str
    created_by: Optional[str]


class QueueResponse(BaseModel):
    tab: str
    page: int
    total_count: int
    total_pages: int
    items: List[ObligationResponse]


class HistoryResponse(BaseModel):
    tab: str = QueueTab.HISTORY.value
    page: int
    total_count: int
    total_pages: int
    items: List[LogEntryResponse]


class SummaryResponse(BaseModel):
    counts: dict
    attempts_by_owner: dict


# =============================================================================
# SERIALIZATION
# =============================================================================

def to_log_entry_response(entry: FollowUpLogEntry) -> LogEntryResponse:
    return LogEntryResponse(
        id=entry.id,
        customer_id=entry.customer_id,
        customer_name=entry.customer_name,
        branch_name=entry.branch_name,
        round=entry.round,
        cs_owner=entry.cs_owner,
        due_date=entry.due_date.isoformat() if entry.due_date else None,
        completed_at=entry.completed_at.isoformat(),
        feedback=entry.feedback,
        outcome=entry.outcome.value,
        created_by=entry.created_by,
    )


def to_history_response(result: HistoryPage) -> HistoryResponse:
    return HistoryResponse(
        page=result.page,
        total_count=result.total_count,
        total_pages=result.total_pages,
        items=[to_log_entry_response(e) for e in result.items],
    )


def to_queue_response(tab: QueueTab, result: QueuePage) -> QueueResponse:
    return QueueResponse(
        tab=tab.value,
        page=result.page,
        total_count=result.total_count,
        total_pages=result.total_pages,
        items=[
            ObligationResponse(
                customer_id=item.obligation.customer_id,
                customer_name=item.obligation.customer_name,
                branch_name=item.obligation.branch_name,
                round=item.obligation.round,
                due_date=item.obligation.due_date.isoformat(),
                contract_start=item.obligation.contract_start.isoformat(),
                cs_owner=item.obligation.cs_owner,
                status=item.obligation.status.value,
                days_used=item.obligation.days_used,
                days_remaining=item.obligation.days_remaining,
                attempts=item.attempts,
            )
            for item in result.items
        ],
    )


# =============================================================================
# READ ENDPOINTS
# =============================================================================

@router.get("/queue", response_model=Union[QueueResponse, HistoryResponse])
async def get_queue(
    tab: QueueTab = QueueTab.TODAY,
    search: str = "",
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
    operator: str = Depends(get_current_operator),
):
    """
    Get one page of the follow-up queue.

    The history tab returns ledger entries instead of live obligations.
    """
    ledger = FollowUpLedgerService(db)
    logs = ledger.list_follow_up_logs()

    if tab == QueueTab.HISTORY:
        return to_history_response(list_history(logs, page))

    customers = ledger.list_active_customers_with_branches()
    result = generate_queue(customers, logs, now, tab, search, page)
    return to_queue_response(tab, result)


@router.get("/history", response_model=HistoryResponse)
async def get_history(
    page: int = Query(1, ge=1),
    customer_id: Optional[int] = None,
    db: Session = Depends(get_db),
    operator: str = Depends(get_current_operator),
):
    """
    Get the follow-up ledger, newest first.
    """
    ledger = FollowUpLedgerService(db)
    logs = ledger.list_follow_up_logs(customer_id=customer_id)
    return to_history_response(list_history(logs, page, customer_id=customer_id))


@router.get("/summary", response_model=SummaryResponse)
async def get_summary(
    search: str = "",
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
    operator: str = Depends(get_current_operator),
):
    """
    Get item counts for every queue tab, and unresolved attempts per CS owner.
    """
    ledger = FollowUpLedgerService(db)
    logs = ledger.list_follow_up_logs()
    counts = bucket_counts(
        ledger.list_active_customers_with_branches(),
        logs,
        now,
        search,
    )
    return SummaryResponse(counts=counts, attempts_by_owner=attempts_by_owner(logs))


# =============================================================================
# WRITE ENDPOINT
# =============================================================================

@router.post("/outcomes", response_model=LogEntryResponse)
async def record_outcome(
    request: RecordOutcomeRequest,
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
    operator: str = Depends(get_current_operator),
):
    """
    Record the outcome of a check-in call.

    The obligation is re-derived from the current snapshot; only live,
    not yet completed obligations can be recorded against.
    """
    if request.round not in MILESTONES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid round. Must be one of: {list(MILESTONES)}",
        )

    ledger = FollowUpLedgerService(db)
    reconciliation = reconcile(ledger.list_follow_up_logs(customer_id=request.customer_id))

    obligation = next(
        (
            o for o in generate_obligations(ledger.list_active_customers_with_branches(), now)
            if o.customer_id == request.customer_id
            and o.branch_name == request.branch_name
            and o.round == request.round
        ),
        None,
    )
    if obligation is None or reconciliation.is_completed(obligation.identity):
        raise HTTPException(status_code=404, detail="No open follow-up for this customer, branch and round")

    recorder = OutcomeRecorder(ledger)
    try:
        entry = recorder.record_outcome(
            obligation,
            request.outcome,
            feedback=request.feedback,
            now=now,
            created_by=operator,
        )
    except LedgerWriteError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return to_log_entry_response(entry)
