"""
Shared fixtures for follow-up engine tests.
"""
from dataclasses import replace
from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from followup_engine.database import Base
from followup_engine.models import db_models  # noqa: F401 - registers tables
from followup_engine.models.followup import (
    Customer, FollowUpLogEntry, FollowUpOutcome, UsageStatus,
)


NOW = datetime(2024, 6, 1, 9, 0)


def started(days_ago: int, now: datetime = NOW) -> str:
    """Contract start, as ingested text, `days_ago` days before now."""
    return (now.date() - timedelta(days=days_ago)).isoformat()


def make_customer(
    customer_id: int,
    days_ago=None,
    name: str = None,
    usage_status: UsageStatus = UsageStatus.ACTIVE,
    cs_owner: str = "Nok",
    branches=None,
) -> Customer:
    return Customer(
        id=customer_id,
        name=name or f"Customer {customer_id}",
        usage_status=usage_status,
        contract_start=started(days_ago) if days_ago is not None else None,
        cs_owner=cs_owner,
        branches=branches or [],
    )


def make_log(
    customer_id: int,
    round: int,
    outcome: FollowUpOutcome = FollowUpOutcome.COMPLETED,
    branch_name: str = "head office",
    completed_at: datetime = NOW,
    log_id: int = None,
) -> FollowUpLogEntry:
    return FollowUpLogEntry(
        id=log_id,
        customer_id=customer_id,
        branch_name=branch_name,
        round=round,
        outcome=outcome,
        completed_at=completed_at,
    )


class InMemoryLedger:
    """Append-only list standing in for the persistence collaborator."""

    def __init__(self):
        self.entries = []

    def append_follow_up_log(self, entry):
        stored = replace(entry, id=len(self.entries) + 1)
        self.entries.append(stored)
        return stored

    def list_follow_up_logs(self, customer_id=None):
        return [e for e in self.entries if customer_id is None or e.customer_id == customer_id]


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def ledger():
    return InMemoryLedger()


@pytest.fixture
def db_engine():
    """In-memory SQLite shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = Session()
    try:
        yield session
    finally:
        session.close()
