"""
Flag record and the age helpers used to classify stale flags.

All timestamps are timezone-aware UTC datetimes. ``None`` stands for a
timestamp LaunchDarkly never recorded and counts as older than any threshold.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

UNKNOWN_MAINTAINER = "unknown"

STATUS_INACTIVE = "inactive"
STATUS_INUSE = "inuse"

_YEAR = timedelta(days=365)
_MONTH = timedelta(days=30)
_DAY = timedelta(days=1)
_HOUR = timedelta(hours=1)
_MINUTE = timedelta(minutes=1)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def more_than(timestamp: Optional[datetime], duration: timedelta,
              now: Optional[datetime] = None) -> bool:
    """
    Check whether a timestamp lies more than ``duration`` in the past.

    An unset timestamp is treated as infinitely old. Elapsed time exactly
    equal to ``duration`` is not "more than".
    """
    if timestamp is None:
        return True
    return (now or utcnow()) - timestamp > duration


def ago(elapsed: timedelta) -> str:
    """
    Format an elapsed duration using the largest unit that applies.

    Examples:
        >>> ago(timedelta(days=400))
        '1.1 years ago'
        >>> ago(timedelta(seconds=90))
        '1.5 minutes ago'
    """
    if elapsed > _YEAR:
        return f"{elapsed / _YEAR:.1f} years ago"
    if elapsed > _MONTH:
        return f"{elapsed / _MONTH:.1f} months ago"
    if elapsed > _DAY:
        return f"{elapsed / _DAY:.1f} days ago"
    if elapsed > _HOUR:
        return f"{elapsed / _HOUR:.1f} hours ago"
    if elapsed > _MINUTE:
        return f"{elapsed / _MINUTE:.1f} minutes ago"
    return f"{elapsed.total_seconds():.0f} seconds ago"


def format_ago(timestamp: Optional[datetime], now: Optional[datetime] = None) -> str:
    if timestamp is None:
        return "never"
    return ago((now or utcnow()) - timestamp)


@dataclass(frozen=True)
class Flag:
    """
    A live feature flag in a single project/environment.

    Attributes:
        key: Flag key, unique within the project
        maintainer_email: Maintainer's email, "unknown" when LaunchDarkly has none
        creation_date: When the flag was created
        last_modified: Last modification in the environment
        last_requested: Last SDK evaluation in the environment, None if never seen
        temporary: Whether the flag is marked as temporary
    """

    key: str
    maintainer_email: str = UNKNOWN_MAINTAINER
    creation_date: Optional[datetime] = None
    last_modified: Optional[datetime] = None
    last_requested: Optional[datetime] = None
    temporary: bool = False

    def creation_date_more_than(self, value: timedelta, now: Optional[datetime] = None) -> bool:
        return more_than(self.creation_date, value, now)

    def last_modified_more_than(self, value: timedelta, now: Optional[datetime] = None) -> bool:
        return more_than(self.last_modified, value, now)

    def last_requested_more_than(self, value: timedelta, now: Optional[datetime] = None) -> bool:
        return more_than(self.last_requested, value, now)

    def creation_date_ago(self, now: Optional[datetime] = None) -> str:
        return format_ago(self.creation_date, now)

    def last_modified_ago(self, now: Optional[datetime] = None) -> str:
        return format_ago(self.last_modified, now)

    def last_requested_ago(self, now: Optional[datetime] = None) -> str:
        return format_ago(self.last_requested, now)

    def is_inactive(self, threshold: timedelta, now: Optional[datetime] = None) -> bool:
        """A flag is inactive when no SDK has requested it within ``threshold``."""
        return self.last_requested_more_than(threshold, now)

    def status(self, threshold: timedelta, now: Optional[datetime] = None) -> str:
        return STATUS_INACTIVE if self.is_inactive(threshold, now) else STATUS_INUSE

    def temporary_label(self) -> str:
        return "temporary" if self.temporary else "permanent"
