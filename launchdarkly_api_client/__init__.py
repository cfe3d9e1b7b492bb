"""
LaunchDarkly API Client

This module provides a client for the parts of the LaunchDarkly API used by
the stale flag report: the paginated flag list and the flag status query.

Classes:
    LaunchDarklyAPI: Client for interacting with the LaunchDarkly API
    FlagsPage, FlagSummary, FlagStatuses: Decoded API responses
    ResponseDecodeError: Raised for undecodable responses
    DeadlineExceeded: Raised when the retrieval deadline expires
"""

from .client import LaunchDarklyAPI, DEFAULT_DEADLINE, DEFAULT_HOST, DEFAULT_TIMEOUT, PAGE_SIZE
from .errors import DeadlineExceeded, ResponseDecodeError
from .responses import FlagsPage, FlagStatuses, FlagSummary

__all__ = [
    'LaunchDarklyAPI',
    'DEFAULT_DEADLINE',
    'DEFAULT_HOST',
    'DEFAULT_TIMEOUT',
    'PAGE_SIZE',
    'DeadlineExceeded',
    'ResponseDecodeError',
    'FlagsPage',
    'FlagStatuses',
    'FlagSummary',
]
