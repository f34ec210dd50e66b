# SPDX-License-Identifier: GPL-3.0-or-later
#
# Copyright (C) 2025 The qaympy contributors
# This file is part of qaympy, distributed under the terms of the GNU GPLv3.
from dataclasses import dataclass
from typing import Any

import httpx
from rich import traceback

from qaympy.interfaces import ApiClient


@dataclass
class QaympyException(Exception):
    """
    Base exception class for all qaympy exceptions.
    """

    message: str = ""

    def __post_init__(self):
        traceback.install()


@dataclass
class TransportError(QaympyException):
    """
    Raised when the HTTP transport fails before a response is received.

    Connection failures, DNS resolution errors, timeouts and URLs that httpx
    refuses to send all end up here.
    The request is not retried.
    """

    url: str | None = None
    """The URL of the failed request."""

    error: httpx.HTTPError | httpx.InvalidURL | None = None
    """The underlying httpx exception."""

    def __str__(self) -> str:
        msg = self.message

        if self.url:
            msg += f"\nRequest to {self.url} failed"
        if self.error is not None:
            msg += f"\n{self.error.__class__.__name__}: {self.error}"

        return msg


@dataclass
class HttpStatusError(QaympyException):
    """
    Raised when the API responds with a status code outside the 2xx range.
    """

    response: httpx.Response | None = None
    """The HTTP response returned by the API."""

    @property
    def status_code(self) -> int | None:
        """The HTTP status code, if a response is attached."""
        if self.response is None:
            return None
        return self.response.status_code

    @property
    def body(self) -> bytes:
        """The raw response body."""
        if self.response is None:
            return b""
        return self.response.content

    def __str__(self) -> str:
        msg = self.message

        if self.response is not None:
            msg += f"\nRequest to {self.response.request.url} failed with status code: {self.response.status_code}"
            msg += f"\nResponse content: {self.response.text}"

        return msg


@dataclass
class DecodeError(QaympyException):
    """
    Raised when the API response body is not valid JSON.

    An empty body is treated as invalid JSON.
    """

    response: httpx.Response | None = None
    """The HTTP response returned by the API."""

    @property
    def body(self) -> bytes:
        """The raw response body that failed to decode."""
        if self.response is None:
            return b""
        return self.response.content

    def __str__(self) -> str:
        msg = self.message

        if self.response is not None:
            if self.response.content:
                msg += f"\nUndecodable response: {self.response.text}"
            else:
                msg += "\nResponse body is empty"

        return msg


@dataclass
class InvalidIdentifierError(QaympyException):
    """
    Raised when a resource identifier is not a positive integer.

    No request is sent when this is raised.
    """

    parameter: str | None = None
    """The name of the offending argument."""

    value: Any = None
    """The rejected value."""

    client: ApiClient | None = None
    """The client the identifier was passed to."""

    def __str__(self) -> str:
        msg = self.message

        if isinstance(self.client, ApiClient):
            msg += f"{self.client.__class__.__name__}: Invalid identifier."

        if self.parameter:
            msg += f"\n{self.parameter} must be a positive integer, got {self.value!r}"

        return msg


@dataclass
class URLSchemaError(QaympyException):
    """
    Raised when the provided base URL does not include a valid schema (http or https).
    """

    base_url: str | None = None
    """The invalid base URL."""

    def __str__(self) -> str:
        msg = self.message

        if self.base_url:
            msg += f"\nInvalid base URL: {self.base_url}"
            msg += "\nThe base URL must start with 'http://' or 'https://'."

        return msg


@dataclass
class URLNetlocError(QaympyException):
    """
    Raised when the provided base URL does not include a valid network location.
    """

    base_url: str | None = None
    """The invalid base URL."""

    def __str__(self) -> str:
        msg = self.message

        if self.base_url:
            msg += f"\nInvalid base URL: {self.base_url}"
            msg += "\nThe base URL must include a valid network location."

        return msg


@dataclass
class URLPathError(QaympyException):
    """
    Raised when the provided base URL path ends with a forward slash (/).
    """

    base_url: str | None = None
    """The invalid base URL."""

    def __str__(self) -> str:
        msg = self.message

        if self.base_url:
            msg += f"Invalid base URL. Must not end with a '/': {self.base_url}"

        return msg
