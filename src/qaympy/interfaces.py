from abc import ABC


class ApiClient(ABC):
    base_url: str | None = None
    """The base URL for the API, without a trailing slash."""

    api_key: str = ""
    """The API key appended to every request path."""
