import json
import logging
import time
from typing import Dict, List, Optional
from urllib.parse import quote

import requests
from tqdm import tqdm

from launchdarkly_flags import Flag, UNKNOWN_MAINTAINER

from .errors import DeadlineExceeded, ResponseDecodeError
from .responses import FlagsPage, FlagStatuses, epoch_millis_to_datetime

DEFAULT_HOST = "https://app.launchdarkly.com"
DEFAULT_TIMEOUT = 60
DEFAULT_DEADLINE = 5 * 60
PAGE_SIZE = 50
# bytes per body read; the time budget is checked after each one
READ_CHUNK_SIZE = 1


class LaunchDarklyAPI:
    """
    Client for reading live flags and their evaluation status from LaunchDarkly.

    Requests are made once: there is no caching and no retry. Any transport
    error, non-2xx status or undecodable body propagates to the caller.

    Attributes:
        api_key (str): LaunchDarkly API access token
        host (str): Scheme and host of the LaunchDarkly instance
        timeout (float): Per-request timeout in seconds
        deadline (float): Time budget in seconds for a whole ``get_live_flags`` run
        show_progress (bool): Whether to display a progress bar while fetching
        headers (Dict): HTTP headers for API requests
        beta_headers (Dict): HTTP headers for beta API endpoints
        logger: Logger instance for this class

    Example:
        ```python
        api = LaunchDarklyAPI("your-api-key")
        flags = api.get_live_flags("default", "production")
        ```
    """

    def __init__(self, api_key: str, host: str = DEFAULT_HOST, timeout: float = DEFAULT_TIMEOUT,
                 deadline: float = DEFAULT_DEADLINE, show_progress: bool = True):
        self.api_key = api_key
        self.host = host.rstrip("/")
        self.timeout = timeout
        self.deadline = deadline
        self.show_progress = show_progress
        self.headers = {
            "Authorization": api_key,
            "Accept": "application/json",
        }
        self.beta_headers = {
            **self.headers,
            "Content-Type": "application/json",
            "LD-API-Version": "beta"
        }
        self.logger = logging.getLogger(__name__)
        self._expires_at: Optional[float] = None

        self.logger.debug(f"host={self.host}")
        self.logger.debug(f"timeout={self.timeout} deadline={self.deadline}")

    @staticmethod
    def first_page(project_key: str, environment_key: str, limit: int = PAGE_SIZE) -> str:
        return (
            f"/api/v2/flags/{quote(project_key)}?limit={limit}&env={quote(environment_key)}"
            "&sort=creationDate&filter=state%3Alive"
        )

    @staticmethod
    def query_url(project_key: str) -> str:
        return f"/api/v2/projects/{quote(project_key)}/flag-statuses/queries"

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        if not path.startswith("/"):
            path = "/" + path
        return self.host + path

    def _request_timeout(self) -> float:
        """
        Per-request timeout, capped at whatever remains of the retrieval deadline

        Raises:
            DeadlineExceeded: If the deadline has already passed
        """
        if self._expires_at is None:
            return self.timeout
        remaining = self._expires_at - time.monotonic()
        if remaining <= 0:
            raise DeadlineExceeded(f"Deadline of {self.deadline} seconds exceeded")
        return min(self.timeout, remaining)

    def _check_in_flight(self, url: str, read_until: float):
        """
        Fail a request whose body is still arriving after its time budget

        Raises:
            DeadlineExceeded: If the retrieval deadline has passed
            Timeout: If the per-request timeout has passed
        """
        now = time.monotonic()
        if self._expires_at is not None and now >= self._expires_at:
            raise DeadlineExceeded(f"Deadline of {self.deadline} seconds exceeded while reading {url}")
        if now >= read_until:
            raise requests.exceptions.Timeout(f"Timed out after {self.timeout} seconds reading {url}")

    def _read_body(self, response: requests.Response, read_until: float) -> bytes:
        # socket timeouts only bound each read, so the whole body is checked against the budget
        chunks = []
        for chunk in response.iter_content(chunk_size=READ_CHUNK_SIZE):
            self._check_in_flight(response.url, read_until)
            chunks.append(chunk)
        return b"".join(chunks)

    def _decode(self, response: requests.Response, read_until: float) -> dict:
        try:
            response.raise_for_status()
            body = self._read_body(response, read_until)
        finally:
            response.close()

        try:
            data = json.loads(body)
        except ValueError as e:
            raise ResponseDecodeError(f"Invalid JSON from {response.url}: {e}") from e
        if not isinstance(data, dict):
            raise ResponseDecodeError(f"Expected a JSON object from {response.url}")
        return data

    def get(self, path: str) -> dict:
        """
        Make an authenticated GET request

        Args:
            path: API path (e.g. "/api/v2/flags/default") or absolute URL

        Returns:
            dict: Decoded JSON response

        Raises:
            RequestException: On connection failure, timeout or error status
            ResponseDecodeError: If the body is not a JSON object
        """
        url = self._url(path)
        self.logger.debug(f"GET {url}")
        timeout = self._request_timeout()
        read_until = time.monotonic() + timeout
        response = requests.get(url, headers=self.headers, timeout=timeout, stream=True)
        return self._decode(response, read_until)

    def post(self, path: str, body: dict) -> dict:
        """
        Make an authenticated POST request against a beta endpoint

        Args:
            path: API path or absolute URL
            body: JSON-serializable request payload

        Returns:
            dict: Decoded JSON response
        """
        url = self._url(path)
        self.logger.debug(f"POST {url}")
        timeout = self._request_timeout()
        read_until = time.monotonic() + timeout
        response = requests.post(url, headers=self.beta_headers, json=body,
                                 timeout=timeout, stream=True)
        return self._decode(response, read_until)

    def get_flag_statuses(self, project_key: str, environment_key: str,
                          flag_keys: List[str]) -> FlagStatuses:
        """Query the evaluation status of ``flag_keys`` in one environment."""
        response = self.post(self.query_url(project_key), {
            "environmentKeys": [environment_key],
            "flagKeys": flag_keys,
        })
        return FlagStatuses.from_dict(response)

    def get_live_flags(self, project_key: str, environment_key: str,
                       limit: int = PAGE_SIZE) -> List[Flag]:
        """
        Fetch every live flag of a project, enriched for one environment

        Follows the ``_links.next`` pagination of the flag list and, for each
        page, queries the last requested time of that page's flags only.

        Args:
            project_key: Project identifier
            environment_key: Environment identifier
            limit: Number of flags per page (default: 50)

        Returns:
            List[Flag]: Flags in API order

        Raises:
            RequestException: On any transport error, including the deadline
            ResponseDecodeError: If any response cannot be decoded
        """
        flags: List[Flag] = []
        progress = tqdm(desc=f"Fetching flags for {project_key}/{environment_key}", unit="flags",
                        leave=False, disable=not self.show_progress)
        self._expires_at = time.monotonic() + self.deadline

        try:
            next_page = self.first_page(project_key, environment_key, limit)
            while next_page:
                page = FlagsPage.from_dict(self.get(next_page))
                self.logger.debug(f"Fetched {len(page.items)} flags from {next_page}")

                statuses = self.get_flag_statuses(project_key, environment_key, page.keys())
                last_requested = statuses.last_requested(environment_key)

                flags.extend(
                    self._to_flag(item, environment_key, last_requested) for item in page.items
                )
                progress.update(len(page.items))

                next_page = page.next_href
        finally:
            self._expires_at = None
            progress.close()

        self.logger.info(f"Fetched {len(flags)} live flags for {project_key}/{environment_key}")
        return flags

    @staticmethod
    def _to_flag(item, environment_key: str, last_requested: Dict) -> Flag:
        return Flag(
            key=item.key,
            maintainer_email=item.maintainer_email or UNKNOWN_MAINTAINER,
            creation_date=epoch_millis_to_datetime(item.creation_date),
            last_modified=epoch_millis_to_datetime(item.last_modified.get(environment_key)),
            last_requested=last_requested.get(item.key),
            temporary=item.temporary,
        )
