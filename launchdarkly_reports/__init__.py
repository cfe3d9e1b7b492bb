"""
LaunchDarkly Reports

This module filters, orders and renders stale flag reports as an aligned
text table, a markdown table, CSV, or a summary grouped by maintainer.

Classes:
    StaleFlagReport: Renders a list of flags in one of several formats
"""

from .stale_flag_report import (
    FORMATS,
    StaleFlagReport,
    build_report,
    filter_flags,
    flag_link,
    sort_flags,
)

__all__ = ['FORMATS', 'StaleFlagReport', 'build_report', 'filter_flags', 'flag_link', 'sort_flags']
