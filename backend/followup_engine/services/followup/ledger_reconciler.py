"""
Outcome Ledger Reconciler

Rebuilds, from the full log snapshot, which obligation identities are
done and how many unresolved attempts each one has.

The result is recomputed from scratch on every call. It is never patched
incrementally, so it cannot drift from the ledger after concurrent writes.
"""
from collections import Counter
from typing import Iterable

from ...models.followup import FollowUpLogEntry, LedgerReconciliation


def reconcile(logs: Iterable[FollowUpLogEntry]) -> LedgerReconciliation:
    """
    Fold a log snapshot into completed identities and attempt counts.

    - completed_keys: identities with at least one completed entry
    - attempts: identity -> number of entries whose outcome is not completed

    Duplicate completions collapse into the set. Attempts are never capped
    and keep counting after a completion.
    """
    completed = set()
    attempts = Counter()

    for entry in logs:
        if entry.is_completion:
            completed.add(entry.identity)
        else:
            attempts[entry.identity] += 1

    return LedgerReconciliation(
        completed_keys=frozenset(completed),
        attempts=dict(attempts),
    )
