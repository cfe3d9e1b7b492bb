"""
Stale flag report: filtering, ordering and rendering of live flags.

A flag is stale when it was created and last modified more than the
threshold ago. Within the report, flags are grouped by maintainer with
inactive flags (not requested within the threshold) listed first.
"""

import csv
import io
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from launchdarkly_flags import Flag, STATUS_INACTIVE, STATUS_INUSE, utcnow

FORMATS = ("text", "markdown", "csv", "summary")

HEADERS = [
    "KEY", "MAINTAINER", "CREATION DATE", "LAST MODIFIED",
    "LAST REQUESTED", "STATUS", "TEMPORARY", "LINK",
]
SUMMARY_HEADERS = HEADERS[:6]

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)

logger = logging.getLogger(__name__)


def filter_flags(flags: Iterable[Flag], threshold: timedelta, with_permanent: bool = False,
                 now: Optional[datetime] = None) -> List[Flag]:
    """
    Keep the flags created and last modified more than ``threshold`` ago

    Args:
        flags: Flags to filter
        threshold: Minimum age of creation and last modification
        with_permanent: Keep permanent flags too, not only temporary ones
        now: Reference time (default: current UTC time)

    Returns:
        List[Flag]: Matching flags in their original order
    """
    now = now or utcnow()
    return [
        flag for flag in flags
        if flag.creation_date_more_than(threshold, now)
        and flag.last_modified_more_than(threshold, now)
        and (flag.temporary or with_permanent)
    ]


def sort_flags(flags: Iterable[Flag], threshold: timedelta,
               now: Optional[datetime] = None) -> List[Flag]:
    """
    Order flags by maintainer, then inactive before in use, then oldest first
    """
    now = now or utcnow()
    return sorted(flags, key=lambda flag: (
        flag.maintainer_email,
        not flag.is_inactive(threshold, now),
        flag.creation_date or _EARLIEST,
    ))


def flag_link(host: str, project_key: str, environment_key: str, flag_key: str) -> str:
    return f"{host.rstrip('/')}/{project_key}/{environment_key}/features/{flag_key}"


def align_columns(rows: Sequence[Sequence[str]]) -> str:
    """
    Pad every column but the last to its widest cell plus one space
    """
    if not rows:
        return ""
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]) - 1)]
    lines = []
    for row in rows:
        cells = [cell.ljust(width + 1) for cell, width in zip(row, widths)]
        cells.append(row[-1])
        lines.append("".join(cells))
    return "\n".join(lines) + "\n"


class StaleFlagReport:
    """
    Renders already filtered and sorted flags for one project/environment.

    Attributes:
        flags: Flags in report order
        project_key: Project the flags belong to
        environment_key: Environment the timestamps refer to
        threshold: Age used to tell inactive flags from flags in use
        host: LaunchDarkly host used to build deep links
        now: Reference time for all "ago" columns
    """

    def __init__(self, flags: List[Flag], project_key: str, environment_key: str,
                 threshold: timedelta, host: str, now: Optional[datetime] = None):
        self.flags = flags
        self.project_key = project_key
        self.environment_key = environment_key
        self.threshold = threshold
        self.host = host
        self.now = now or utcnow()

    def link(self, flag: Flag) -> str:
        return flag_link(self.host, self.project_key, self.environment_key, flag.key)

    def row(self, flag: Flag) -> List[str]:
        return [
            flag.key,
            flag.maintainer_email,
            flag.creation_date_ago(self.now),
            flag.last_modified_ago(self.now),
            flag.last_requested_ago(self.now),
            flag.status(self.threshold, self.now),
            flag.temporary_label(),
            self.link(flag),
        ]

    def rows(self) -> List[List[str]]:
        return [self.row(flag) for flag in self.flags]

    def render(self, fmt: str = "text") -> str:
        """
        Render the report

        Args:
            fmt: One of "text", "markdown", "csv" or "summary"

        Returns:
            str: The complete report

        Raises:
            ValueError: If the format is unknown
        """
        renderers = {
            "text": self.render_text,
            "markdown": self.render_markdown,
            "csv": self.render_csv,
            "summary": self.render_summary,
        }
        if fmt not in renderers:
            raise ValueError(f"Unknown format '{fmt}', expected one of: {', '.join(FORMATS)}")
        logger.debug(f"Rendering {len(self.flags)} flags as {fmt}")
        return renderers[fmt]()

    def render_text(self) -> str:
        return align_columns([HEADERS] + self.rows())

    def render_markdown(self) -> str:
        lines = [
            " | ".join(HEADERS),
            " | ".join("---" for _ in HEADERS),
        ]
        lines.extend(" | ".join(row) for row in self.rows())
        return "\n".join(lines) + "\n"

    def render_csv(self) -> str:
        output = io.StringIO()
        writer = csv.writer(output, lineterminator="\n")
        writer.writerow(HEADERS)
        writer.writerows(self.rows())
        return output.getvalue()

    def render_summary(self) -> str:
        """
        Table without temporary/link columns, then flag keys grouped by maintainer

        Maintainers appear in the order they are first seen in ``flags``.
        """
        table = align_columns([SUMMARY_HEADERS] + [row[:6] for row in self.rows()])

        groups: Dict[str, Dict[str, List[Flag]]] = {STATUS_INACTIVE: {}, STATUS_INUSE: {}}
        for flag in self.flags:
            status = flag.status(self.threshold, self.now)
            groups[status].setdefault(flag.maintainer_email, []).append(flag)

        sections = [table]
        for status, title in ((STATUS_INACTIVE, "INACTIVE FLAGS"), (STATUS_INUSE, "INUSE FLAGS")):
            lines = ["", title, "=" * len(title)]
            for maintainer, flags in groups[status].items():
                lines.append(f"{maintainer}:")
                for flag in flags:
                    lines.append(
                        f"  - {flag.key} (created {flag.creation_date_ago(self.now)}, "
                        f"modified {flag.last_modified_ago(self.now)}, "
                        f"requested {flag.last_requested_ago(self.now)}) {self.link(flag)}"
                    )
            sections.append("\n".join(lines) + "\n")
        return "".join(sections)


def build_report(flags: Iterable[Flag], project_key: str, environment_key: str,
                 threshold: timedelta, host: str, fmt: str = "text",
                 with_permanent: bool = False,
                 now: Optional[datetime] = None) -> StaleFlagReport:
    """
    Filter and sort ``flags`` and wrap them in a report

    The "summary" format keeps permanent flags regardless of ``with_permanent``.
    """
    now = now or utcnow()
    flags = list(flags)
    stale = filter_flags(flags, threshold, with_permanent or fmt == "summary", now)
    logger.info(f"{len(stale)} of {len(flags)} flags are older than {threshold}")
    return StaleFlagReport(sort_flags(stale, threshold, now), project_key, environment_key,
                           threshold, host, now)
