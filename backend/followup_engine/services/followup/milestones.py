"""
Milestone Table

Fixed day-offsets from contract start at which a retention check-in
call is expected, plus the date arithmetic every other component shares.
"""
from datetime import date, datetime
from typing import Optional, Union

from dateutil import parser as date_parser


# =============================================================================
# MILESTONE CONFIGURATION
# =============================================================================

MILESTONES = (7, 14, 30, 60, 90)

FIRST_MILESTONE = MILESTONES[0]
LAST_MILESTONE = MILESTONES[-1]

# Two fill-in values that disagree on day, month and year
PARSE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def as_date(value: Union[date, datetime]) -> date:
    """Midnight-align a snapshot value."""
    if isinstance(value, datetime):
        return value.date()
    return value


def parse_contract_start(value) -> Optional[date]:
    """
    Resolve a contract start date from whatever the snapshot carries.

    Accepts date/datetime objects and free-text dates from spreadsheet
    ingestion. Returns None when the value is missing, unparseable, or
    lacks an explicit day, month or year.
    """
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return as_date(value)

    text = str(value).strip()
    if not text:
        return None

    try:
        first, second = (date_parser.parse(text, default=d).date() for d in PARSE_DEFAULTS)
    except (ValueError, OverflowError):
        return None

    # Partial dates would otherwise be completed from the system clock
    if first != second:
        return None
    return first


def days_used(contract_start: date, now: Union[date, datetime]) -> int:
    """Whole days elapsed since contract start. Negative for future contracts."""
    return (as_date(now) - contract_start).days


def round_for_days(days: int) -> int:
    """Greatest milestone not after `days`; the first milestone before it is reached."""
    current = FIRST_MILESTONE
    for milestone in MILESTONES:
        if days >= milestone:
            current = milestone
    return current


def is_milestone(days: int) -> bool:
    return days in MILESTONES


def next_milestone(days: int) -> int:
    """First milestone strictly after `days`, or the last one when all are passed."""
    for milestone in MILESTONES:
        if days < milestone:
            return milestone
    return LAST_MILESTONE


def previous_milestone(milestone: int) -> int:
    """Milestone immediately below `milestone`; the first one has no predecessor."""
    index = MILESTONES.index(milestone)
    if index == 0:
        return FIRST_MILESTONE
    return MILESTONES[index - 1]
