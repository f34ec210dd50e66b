# SPDX-License-Identifier: GPL-3.0-or-later
#
# Copyright (C) 2025 The qaympy contributors
# This file is part of qaympy, distributed under the terms of the GNU GPLv3.

import os
from typing import Any

import httpx

from qaympy.base import RestApiBaseClass
from qaympy.exceptions import InvalidIdentifierError
from qaympy.logger import log_exception, logger

API_URL = "http://api.qaym.com/0.1"
"""The base URL of the Qaym API v0.1."""


class QaymAPI(RestApiBaseClass):
    """
    Interact with the Qaym restaurant directory API v0.1.

    Every request is a GET to `<base_url>/<resource>[/<id>][/<subresource>]/key=<api_key>`
    and every method returns the JSON-decoded response body as is.

    Parameters
    ----------
    api_key : str | None, default=None
        Qaym API key. May be an empty string.

        Overrides the environment variable `QAYMPY_API_KEY`.

    base_url : str, default="http://api.qaym.com/0.1"
        Base URL of the API. Must not end with a `/`.

    timeout : int, default=10
        Number of seconds to wait for HTTP responses before raising `TransportError`.

    transport : httpx.BaseTransport | None, default=None
        Custom httpx transport, e.g. `httpx.MockTransport` in tests.

    Examples
    --------
    ```python
    from qaympy import QaymAPI
    qaym = QaymAPI(api_key="abc")
    qaym.list_city_top_items(42)
    qaym.get_last_url()
    # 'http://api.qaym.com/0.1/cities/42/items/top/key=abc'
    ```
    """

    MAX_CONNECTIONS = 4
    """
    The maximum number of concurrent connections opened to Qaym.

    1 connection will be used for general synchronous requests.

    3 connections will be used for `fetch_many`.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str = API_URL,
        timeout: int = 10,
        transport: httpx.BaseTransport | None = None,
    ):
        super().__init__(
            base_url=base_url,
            headers={"Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )

        # Allow the key to be passed directly or fallback to environment variables
        if api_key is None:
            api_key = os.getenv("QAYMPY_API_KEY", "")

        self.set_api_key(api_key)

    def set_api_key(self, api_key: str) -> None:
        """
        Set the API key used by all subsequent requests.

        The URL of a previous call, as returned by `get_last_url`, is not changed.
        """
        if not api_key:
            logger.warning("No Qaym API key set, requests will likely be rejected")
        self.api_key = api_key

    def build_url(
        self,
        origin: str,
        resource_id: int | None = None,
        subresource: str | None = None,
        *,
        parameter: str | None = None,
    ) -> str:
        """
        Constructs the full URL for an API request.

        Parameters
        ----------
        origin
            The resource collection: `countries`, `cities`, `items` or `tags`.
        resource_id
            The ID of the concerned country, city, item or tag.
        subresource
            The related collection, e.g. `cities`, `items/top` or `reviews`.
        parameter
            The argument name of a required identifier. When given, `resource_id`
            is always verified, so a missing identifier is rejected as well.

        Returns
        -------
        str
            The full URL, ending with `/key=<api_key>`.

        Raises
        ------
        InvalidIdentifierError
            If `resource_id` is given, or required through `parameter`, and is
            not a positive integer.
        """
        url = f"{self.base_url}/{origin}"

        if resource_id is not None or parameter is not None:
            self._verify_identifier(resource_id, parameter or "resource_id")
            url += f"/{resource_id}"

        if subresource:
            url += f"/{subresource}"

        url += f"/key={self.api_key}"

        return url

    def _verify_identifier(self, resource_id: Any, parameter: str = "resource_id"):
        if (
            isinstance(resource_id, bool)
            or not isinstance(resource_id, int)
            or resource_id < 1
        ):
            error = InvalidIdentifierError(
                parameter=parameter, value=resource_id, client=self
            )
            log_exception(error, severity="ERROR")
            raise error

    def list_countries(self) -> Any:
        """
        Returns all the available countries.
        """
        return self.call(self.build_url("countries"))

    def get_country(self, country_id: int) -> Any:
        """
        Returns the information about a country.

        Parameters
        ----------
        country_id : int
            The ID of the country.
        """
        return self.call(
            self.build_url("countries", country_id, parameter="country_id")
        )

    def list_country_cities(self, country_id: int) -> Any:
        """
        Returns all the available cities in a country.

        Parameters
        ----------
        country_id : int
            The ID of the country.
        """
        return self.call(
            self.build_url("countries", country_id, "cities", parameter="country_id")
        )

    def list_cities(self) -> Any:
        """
        Returns all the available cities.
        """
        return self.call(self.build_url("cities"))

    def get_city(self, city_id: int) -> Any:
        """
        Returns the information about a city.
        """
        return self.call(self.build_url("cities", city_id, parameter="city_id"))

    def list_city_items(self, city_id: int) -> Any:
        """
        Returns all the available restaurants in a city.
        """
        return self.call(
            self.build_url("cities", city_id, "items", parameter="city_id")
        )

    def list_city_top_items(self, city_id: int) -> Any:
        """
        Returns the top rated restaurants in a city.

        The API returns at most 50 restaurants.

        Parameters
        ----------
        city_id : int
            The ID of the city.
        """
        return self.call(
            self.build_url("cities", city_id, "items/top", parameter="city_id")
        )

    def get_item(self, item_id: int) -> Any:
        """
        Returns the information about a restaurant.
        """
        return self.call(self.build_url("items", item_id, parameter="item_id"))

    def list_item_locations(self, item_id: int) -> Any:
        """
        Returns all the branches of a restaurant.
        """
        return self.call(
            self.build_url("items", item_id, "locations", parameter="item_id")
        )

    def list_item_reviews(self, item_id: int) -> Any:
        """
        Returns all the reviews of a restaurant.
        """
        return self.call(
            self.build_url("items", item_id, "reviews", parameter="item_id")
        )

    def list_item_images(self, item_id: int) -> Any:
        """
        Returns all the images of a restaurant.
        """
        return self.call(
            self.build_url("items", item_id, "images", parameter="item_id")
        )

    def list_item_votes(self, item_id: int) -> Any:
        """
        Returns all the votes cast for a restaurant.
        """
        return self.call(
            self.build_url("items", item_id, "votes", parameter="item_id")
        )

    def list_tags(self) -> Any:
        """
        Returns all the available tags.
        """
        return self.call(self.build_url("tags"))

    def list_tag_items(self, tag_id: int) -> Any:
        """
        Returns all the restaurants tagged with a tag.

        Parameters
        ----------
        tag_id : int
            The ID of the tag.
        """
        return self.call(
            self.build_url("tags", tag_id, "items", parameter="tag_id")
        )
