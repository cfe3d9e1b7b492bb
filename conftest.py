"""Pytest configuration shared by the stale flag report tests."""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from launchdarkly_flags import Flag

NOW = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def days_ago(days: float, now: datetime = NOW) -> datetime:
    return now - timedelta(days=days)


def epoch_millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def make_response(data, url: str = "https://app.launchdarkly.com/api/v2/test"):
    """
    Build a stand-in for a streamed requests.Response

    ``data`` is served as JSON, or as is when it is already bytes.
    """
    body = data if isinstance(data, bytes) else json.dumps(data).encode("utf-8")
    response = MagicMock()
    response.url = url
    response.status_code = 200
    response.iter_content.side_effect = lambda chunk_size=1, decode_unicode=False: iter(
        [body[i:i + 16] for i in range(0, len(body), 16)]
    )
    response.raise_for_status.return_value = None
    return response


@pytest.fixture
def make_flag():
    """Factory fixture for flags with ages given in days relative to NOW."""

    def _make_flag(key, maintainer="dev@example.com", created=400, modified=400,
                   requested=None, temporary=True):
        return Flag(
            key=key,
            maintainer_email=maintainer,
            creation_date=None if created is None else days_ago(created),
            last_modified=None if modified is None else days_ago(modified),
            last_requested=None if requested is None else days_ago(requested),
            temporary=temporary,
        )

    return _make_flag
