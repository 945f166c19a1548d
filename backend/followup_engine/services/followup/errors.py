"""Follow-up engine errors."""


class FollowUpError(Exception):
    """Base class for follow-up engine failures."""
    pass


class InvalidOutcomeError(FollowUpError):
    """Raised when an outcome value is missing or not one of the known outcomes."""
    pass


class LedgerWriteError(FollowUpError):
    """Raised when appending to the follow-up ledger fails. Nothing was written."""
    pass
