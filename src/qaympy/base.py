# SPDX-License-Identifier: GPL-3.0-or-later
#
# Copyright (C) 2025 The qaympy contributors
# This file is part of qaympy, distributed under the terms of the GNU GPLv3.

import json
import threading
from abc import abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar
from urllib.parse import urlparse

import arrow
import httpx

from qaympy.exceptions import (
    DecodeError,
    HttpStatusError,
    TransportError,
    URLNetlocError,
    URLPathError,
    URLSchemaError,
)
from qaympy.interfaces import ApiClient
from qaympy.logger import log_exception, logger
from qaympy.scheduling import RequestLogEntry, TaskRunner


@dataclass(frozen=True)
class QaymResponse:
    """
    A decoded API response together with the URL that produced it.

    Returned by `fetch`, so concurrent requests never depend on the shared
    last-call state of the client.
    """

    url: str
    """The URL the request was sent to."""

    status_code: int
    """The HTTP status code of the response."""

    content: bytes
    """The raw response body."""

    data: Any
    """The JSON-decoded response body."""


class RestApiBaseClass(ApiClient):
    """
    An abstract base class for key-in-path JSON API clients.

    This class owns the HTTP session, sends GET requests, decodes JSON
    responses, records the last call for debugging and maps transport,
    status and decoding failures to qaympy exceptions.

    Warnings
    --------
    The last-call state (`last_url` and `last_response`) is shared by the
    whole instance. Calling `call` from several threads on the same instance
    is not safe. Use `fetch_many` or `fetch` to get per-request results.
    """

    MAX_CONNECTIONS: ClassVar[int] = 1
    """
    The maximum number of concurrent connections opened to the API server.

    1 connection is used for synchronous calls, the rest for `fetch_many`.
    """

    def __init__(
        self,
        *,
        base_url: str,
        headers: dict | None = None,
        timeout: int = 10,
        transport: httpx.BaseTransport | None = None,
    ):
        self._verify_base_url(base_url)
        self.base_url: str = base_url
        """
        A string containing the base URL of the API server.

        The base URL must include:

         - Scheme (http / https)
         - Hostname / IP address
         - Base path, if any (MUST NOT end with a `/`)

        Examples
        --------
        - http://api.qaym.com/0.1
        - http://localhost:8080
        """

        self.headers: dict = headers or {}
        """
        A dictionary of HTTP headers to be sent with each request.
        """

        self.timeout: int = timeout
        """The timeout in seconds for each request to the API server."""

        self.transport: httpx.BaseTransport | None = transport
        """
        Optional httpx transport used instead of the default network transport.

        Useful for tests (`httpx.MockTransport`) or custom proxies.
        """

        self.client: httpx.Client | None = None
        """
        An httpx Client instance used to send requests to the API server.

        This client is created when the first request is made and is reused for all subsequent requests.
        """

        self.tasks: TaskRunner | None = None
        """
        Runs concurrent requests for `fetch_many`. Created on first use.
        """

        self.request_index: int = 0
        """
        An index to keep track of the number of requests made.
        """

        self.request_log: list[RequestLogEntry] = []
        """
        A list of responses received from the API server.

        Each entry contains the request URL, status code, and timestamp.
        """

        self._last_url: str = ""
        self._last_response: Any = None

        self._lock: threading.Lock = threading.Lock()
        """Keeps request numbering and logging of concurrent requests in order."""

    @abstractmethod
    def build_url(
        self,
        origin: str,
        resource_id: int | None = None,
        subresource: str | None = None,
        *,
        parameter: str | None = None,
    ) -> str:
        """
        Abstract method to construct the full URL of an API endpoint.
        """
        raise NotImplementedError

    @property
    def last_url(self) -> str:
        """The URL of the most recent `call`, or an empty string."""
        return self._last_url

    @property
    def last_response(self) -> Any:
        """The decoded response of the most recent `call`, or `None`."""
        return self._last_response

    def get_last_url(self) -> str:
        """
        Returns the URL of the most recent `call`.

        Returns
        -------
        str
            The URL, or an empty string if no call has been made.
        """
        return self._last_url

    def get_last_response(self) -> Any:
        """
        Returns the decoded response of the most recent `call`.

        Returns
        -------
        Any
            The decoded JSON value, or `None` if no call has been made or the
            most recent call failed.
        """
        return self._last_response

    def call(self, url: str) -> Any:
        """
        Send a GET request, decode the JSON body and remember the result.

        The URL is recorded before the request is sent, so `last_url` also
        points at the failing request when an exception is raised. On any
        failure `last_response` is `None`.

        Parameters
        ----------
        url
            The full URL to request.

        Returns
        -------
        Any
            The JSON-decoded response body.

        Raises
        ------
        TransportError
            The request could not be completed.
        HttpStatusError
            The API responded with a non-2xx status code.
        DecodeError
            The response body is not valid JSON.
        """
        self._last_url = url
        self._last_response = None

        response = self.fetch(url)

        self._last_response = response.data
        return self._last_response

    def fetch(self, url: str) -> QaymResponse:
        """
        Send a GET request and decode the JSON body without touching the
        last-call state.

        Parameters
        ----------
        url
            The full URL to request.

        Returns
        -------
        QaymResponse
            The URL, status code, raw body and decoded body of the response.
        """
        self._ensure_client()

        try:
            request = self.client.build_request("GET", url, headers=self.headers)
        except httpx.InvalidURL as exc:
            error = TransportError("Request could not be built", url=url, error=exc)
            log_exception(error, severity="ERROR")
            raise error from exc

        with self._lock:
            self.request_index += 1
            request_index = self.request_index

        response = self._send_request(request, request_index=request_index)

        if not response.is_success:
            error = HttpStatusError(
                f"Request #{request_index} failed", response=response
            )
            log_exception(error, severity="ERROR")
            raise error

        try:
            data = response.json()
        except ValueError as exc:
            error = DecodeError(
                f"Response #{request_index} is not valid JSON", response=response
            )
            log_exception(error, severity="ERROR")
            raise error from exc

        return QaymResponse(
            url=url,
            status_code=response.status_code,
            content=response.content,
            data=data,
        )

    def fetch_many(self, urls: list[str]) -> dict[str, QaymResponse]:
        """
        Fetch several URLs concurrently.

        Each URL is fetched independently and the last-call state of the
        client is not modified.

        Parameters
        ----------
        urls
            The full URLs to request. Duplicates are fetched once.

        Returns
        -------
        dict[str, QaymResponse]
            The response of each URL, keyed by URL.

        Raises
        ------
        QaympyException
            The error of a failed request, once all requests have finished.
        """
        self._ensure_client()
        self._ensure_tasks()

        for url in dict.fromkeys(urls):
            self.tasks.schedule(self.fetch, url, _task_name=url)

        return self.tasks.run()

    def _send_request(
        self, request: httpx.Request, *, request_index: int
    ) -> httpx.Response:
        """
        Send a prepared request with synchronized logging.

        Parameters
        ----------
        request
            The request object to be sent.
        request_index
            The number of the request, used as a log prefix.

        Returns
        -------
        httpx.Response
            The response object returned by the API server, whatever the status code.
        """
        request_log_prefix = f"Request #{request_index}"
        response_log_prefix = f"Response #{request_index}"

        with self._lock:
            logger.trace(
                f"Prepared {request_log_prefix}: {request.method} {request.url}"
            )
            request_header_json = json.dumps(dict(request.headers))
            logger.trace(
                f"Prepared {request_log_prefix} headers: {request_header_json}"
            )

        try:
            response = self.client.send(request)
        except httpx.RequestError as exc:
            error = TransportError(
                f"{request_log_prefix} failed", url=str(request.url), error=exc
            )
            log_exception(error, severity="CRITICAL")
            raise error from exc

        with self._lock:
            self.request_log.append(
                RequestLogEntry(
                    url=str(response.url),
                    status_code=response.status_code,
                    timestamp=arrow.utcnow(),
                ),
            )

            logger.debug(f"{request_log_prefix}: {request.method} {request.url}")

            response_header_json = json.dumps(dict(response.headers))
            logger.trace(
                f"{response_log_prefix} status code: {response.status_code} {response.reason_phrase}"
            )
            logger.trace(f"{response_log_prefix} headers: {response_header_json}")
            logger.trace(f"{response_log_prefix} body: {response.text}")

        return response

    def _verify_base_url(self, base_url: str) -> None:
        """
        Verifies the base URL contains a scheme, hostname, and does not end with a `/`.

        Parameters
        ----------
        base_url
            The base URL to be verified.

        Raises
        ------
        URLSchemaError
            If the base URL does not contain a scheme (http or https).
        URLNetlocError
            If the base URL does not contain a hostname or IP address.
        URLPathError
            If the base URL path ends with a `/`.
        """
        parsed_url = urlparse(base_url)
        if parsed_url.scheme.lower() not in ("http", "https"):
            error = URLSchemaError(base_url=base_url)
            log_exception(error, severity="ERROR")
            raise error
        if not parsed_url.netloc:
            error = URLNetlocError(base_url=base_url)
            log_exception(error, severity="ERROR")
            raise error
        if parsed_url.path and parsed_url.path[-1] == "/":
            error = URLPathError(base_url=base_url)
            log_exception(error, severity="ERROR")
            raise error

    def _ensure_client(self):
        """
        Instantiate a new `httpx` client if needed.
        """

        if not self.client:
            limits = httpx.Limits(
                max_keepalive_connections=self.MAX_CONNECTIONS,
                max_connections=self.MAX_CONNECTIONS,
                keepalive_expiry=60,
            )

            self.client = httpx.Client(
                timeout=self.timeout,
                follow_redirects=True,
                limits=limits,
                transport=self.transport,
            )

    def _ensure_tasks(self):
        """
        Instantiate the task runner if needed.
        """

        if not self.tasks:
            if self.MAX_CONNECTIONS > 1:
                # Leave one connection for synchronous calls
                max_workers = self.MAX_CONNECTIONS - 1
            else:
                max_workers = 1

            self.tasks = TaskRunner(max_workers=max_workers)

    def close(self) -> None:
        """
        Close the httpx client and release any resources.
        This method should be called when the client is no longer needed.
        It is automatically called when exiting the context manager.
        """
        if self.client:
            self.client.close()
            logger.debug("Closed API client")
            self.client = None

        if self.tasks:
            self.tasks.close()
            self.tasks = None

    def __enter__(self):
        """
        Enter the runtime context of a `with` statement.

        Returns
        -------
        self
            The instance of the class itself.
        """
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        """
        Close the client when leaving the runtime context.

        Returns
        -------
        bool
            Always `False`, so exceptions raised inside the context are propagated.
        """
        self.close()
        if exc_type is not None:
            logger.error(f"Exception occurred: {exc_value}")
        return False
