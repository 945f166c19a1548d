"""
Obligation Generator

Derives the live follow-up obligations from a customer snapshot.

Key behaviors:
- One obligation per active customer x branch with a resolvable contract start
- Customers without branches count as a single "head office" branch
- A branch's own contract start / owner override the customer's
- Round, due date and status are recomputed from scratch on every call

Nothing is cached between calls. Output depends only on (customers, now).
"""
import logging
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Union

from ...models.followup import (
    Branch, Customer, FollowUpObligation, FollowUpStatus,
)
from .milestones import days_used, parse_contract_start, round_for_days

logger = logging.getLogger(__name__)


HEAD_OFFICE_BRANCH = "head office"


class ObligationGenerator:
    """
    Builds FollowUpObligation records for a customer snapshot.

    Pairs with an unparseable or missing contract start are skipped
    silently: they are not under contract yet.
    """

    def generate(
        self,
        customers: Iterable[Customer],
        now: Union[date, datetime],
    ) -> List[FollowUpObligation]:
        obligations = []
        skipped = 0

        for customer in customers:
            if not customer.is_active:
                continue

            for branch in self.branches_for(customer):
                obligation = self.build_obligation(customer, branch, now)
                if obligation is None:
                    skipped += 1
                    continue
                obligations.append(obligation)

        if skipped:
            logger.debug(f"Skipped {skipped} customer/branch pairs without a usable contract start")

        obligations.sort(key=lambda o: (o.due_date, o.customer_id, o.branch_name))
        return obligations

    @staticmethod
    def branches_for(customer: Customer) -> List[Branch]:
        """Branches of a customer, or one virtual head office inheriting its contract."""
        if customer.branches:
            return list(customer.branches)
        return [Branch(
            name=HEAD_OFFICE_BRANCH,
            contract_start=customer.contract_start,
            cs_owner=customer.cs_owner,
        )]

    def build_obligation(
        self,
        customer: Customer,
        branch: Branch,
        now: Union[date, datetime],
    ) -> Optional[FollowUpObligation]:
        # A branch date that is set but unparseable does not fall back to the customer's
        raw_start = branch.contract_start or customer.contract_start
        contract_start = parse_contract_start(raw_start)
        if contract_start is None:
            return None

        elapsed = days_used(contract_start, now)
        current_round = round_for_days(elapsed)
        due_date = contract_start + timedelta(days=current_round)

        return FollowUpObligation(
            customer_id=customer.id,
            customer_name=customer.name,
            branch_name=branch.name,
            round=current_round,
            due_date=due_date,
            contract_start=contract_start,
            cs_owner=branch.cs_owner or customer.cs_owner or "",
            status=self.status_for(elapsed, current_round),
            days_used=elapsed,
        )

    @staticmethod
    def status_for(elapsed: int, current_round: int) -> FollowUpStatus:
        if elapsed > current_round:
            return FollowUpStatus.OVERDUE
        if elapsed == current_round:
            return FollowUpStatus.CALLING
        return FollowUpStatus.PENDING


def generate_obligations(
    customers: Iterable[Customer],
    now: Union[date, datetime],
) -> List[FollowUpObligation]:
    """Generate the full obligation list for a snapshot."""
    return ObligationGenerator().generate(customers, now)
