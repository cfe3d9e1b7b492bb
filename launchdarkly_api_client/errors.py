from requests.exceptions import Timeout


class ResponseDecodeError(ValueError):
    """Raised when a response body is not JSON or does not have the expected shape."""


class DeadlineExceeded(Timeout):
    """Raised when the overall retrieval deadline expires before a request is sent."""
