"""
LaunchDarkly Flags

Flag record built from the LaunchDarkly API and the age/status helpers used
to decide whether a flag is stale.

Classes:
    Flag: An enriched live flag for one project/environment

Functions:
    more_than: Check whether a timestamp is older than a duration
    ago: Format an elapsed duration as "<n> <unit> ago"
    format_ago: Format a timestamp relative to now, "never" when unset
"""

from .flag import (
    Flag,
    STATUS_INACTIVE,
    STATUS_INUSE,
    UNKNOWN_MAINTAINER,
    ago,
    format_ago,
    more_than,
    utcnow,
)

__all__ = [
    'Flag',
    'STATUS_INACTIVE',
    'STATUS_INUSE',
    'UNKNOWN_MAINTAINER',
    'ago',
    'format_ago',
    'more_than',
    'utcnow',
]
