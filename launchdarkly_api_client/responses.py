"""
Typed views over the LaunchDarkly responses used by the stale flag report.

Only the fields the report needs are decoded. Missing optional fields fall
back to empty values; a response whose structure is wrong raises
``ResponseDecodeError``.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .errors import ResponseDecodeError

# Go's zero time, sent for flags that were never evaluated
_ZERO_INSTANT_PREFIX = "0001-01-01"
_FRACTION = re.compile(r"\.(\d+)")


def epoch_millis_to_datetime(value: Optional[int]) -> Optional[datetime]:
    """
    Convert a LaunchDarkly epoch-millisecond timestamp to a UTC datetime.

    ``0`` and ``None`` mean the timestamp was never set.
    """
    if not value:
        return None
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def parse_instant(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 instant such as "2024-03-14T15:30:00.123Z".

    Args:
        value: Timestamp string, or None

    Returns:
        Aware datetime, or None if the value is empty or the zero instant

    Raises:
        ResponseDecodeError: If the value is not a valid instant
    """
    if not value:
        return None
    if not isinstance(value, str):
        raise ResponseDecodeError(f"Invalid timestamp {value!r}")
    if value.startswith(_ZERO_INSTANT_PREFIX):
        return None

    # strptime accepts at most microseconds
    normalized = _FRACTION.sub(lambda m: "." + m.group(1)[:6], value, count=1)
    if "." not in normalized:
        normalized = re.sub(r"(Z|[+-]\d{2}:?\d{2})$", r".000\1", normalized)

    try:
        parsed = datetime.strptime(normalized, "%Y-%m-%dT%H:%M:%S.%f%z")
    except ValueError as e:
        raise ResponseDecodeError(f"Invalid timestamp {value!r}: {e}") from e
    return parsed.astimezone(timezone.utc)


def _items(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    items = data.get("items") or []
    if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
        raise ResponseDecodeError("Expected 'items' to be a list of objects")
    return items


def _key(item: Dict[str, Any]) -> str:
    key = item.get("key")
    if not isinstance(key, str):
        raise ResponseDecodeError(f"Item without a string 'key': {item!r}")
    return key


@dataclass
class FlagSummary:
    """One entry of the flag list endpoint."""

    key: str
    maintainer_email: str = ""
    temporary: bool = False
    creation_date: int = 0
    last_modified: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FlagSummary":
        try:
            environments = data.get("environments") or {}
            return cls(
                key=_key(data),
                maintainer_email=(data.get("_maintainer") or {}).get("email") or "",
                temporary=bool(data.get("temporary", False)),
                creation_date=int(data.get("creationDate") or 0),
                last_modified={
                    env_key: int((env_data or {}).get("lastModified") or 0)
                    for env_key, env_data in environments.items()
                },
            )
        except ResponseDecodeError:
            raise
        except (AttributeError, TypeError, ValueError) as e:
            raise ResponseDecodeError(f"Malformed flag item: {e}") from e


@dataclass
class FlagsPage:
    """A page of ``GET /api/v2/flags/{projectKey}``."""

    items: List[FlagSummary]
    next_href: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FlagsPage":
        links = data.get("_links") or {}
        next_link = (links.get("next") or {}) if isinstance(links, dict) else None
        if not isinstance(next_link, dict):
            raise ResponseDecodeError(f"Malformed pagination links: {links!r}")
        next_href = next_link.get("href")
        if next_href is not None and not isinstance(next_href, str):
            raise ResponseDecodeError(f"Malformed next page link: {next_href!r}")
        return cls(
            items=[FlagSummary.from_dict(item) for item in _items(data)],
            next_href=next_href or None,
        )

    def keys(self) -> List[str]:
        return [item.key for item in self.items]


@dataclass
class FlagStatuses:
    """
    Response of ``POST /api/v2/projects/{projectKey}/flag-statuses/queries``.

    Attributes:
        environments: flag key -> environment key -> last requested instant
    """

    environments: Dict[str, Dict[str, Optional[datetime]]]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FlagStatuses":
        environments = {}
        for item in _items(data):
            envs = item.get("environments") or {}
            if not isinstance(envs, dict) or not all(
                isinstance(env_data, dict) for env_data in envs.values()
            ):
                raise ResponseDecodeError(f"Malformed environments for flag {item.get('key')!r}")
            environments[_key(item)] = {
                env_key: parse_instant(env_data.get("lastRequested"))
                for env_key, env_data in envs.items()
            }
        return cls(environments=environments)

    def last_requested(self, environment_key: str) -> Dict[str, Optional[datetime]]:
        """Map each flag key reported for ``environment_key`` to its last request."""
        return {
            key: envs[environment_key]
            for key, envs in self.environments.items()
            if environment_key in envs
        }
