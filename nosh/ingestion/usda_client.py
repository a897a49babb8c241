"""USDA FoodData Central search client.

API Reference: https://fdc.nal.usda.gov/api-guide.html

The client only fetches and maps search results; choosing which result
to keep is left to the caller.
"""

import logging
from typing import Any, Dict, List

import requests

from nosh.data_layer.exceptions import SearchError
from nosh.data_layer.models import FoodRecord
from nosh.ingestion.search_mapper import food_from_search_result

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_URL = "https://api.nal.usda.gov/fdc/v1/foods/search"
DEFAULT_API_KEY = "DEMO_KEY"


class USDAClient:
    """Client for the FoodData Central food search endpoint.

    Usage:
        client = USDAClient()
        for food in client.search("potato"):
            print(food.name)
    """

    def __init__(
        self,
        api_key: str = DEFAULT_API_KEY,
        search_url: str = DEFAULT_SEARCH_URL,
        timeout: float = 10.0,
    ):
        """Initialize USDA client.

        Args:
            api_key: FoodData Central API key (DEMO_KEY works with low rate limits)
            search_url: Search endpoint URL, overridable for testing
            timeout: Request timeout in seconds

        Raises:
            ValueError: If API key is empty
        """
        if not api_key or not api_key.strip():
            raise ValueError("API key is required. Get one at https://fdc.nal.usda.gov/api-key-signup.html")
        self.api_key = api_key.strip()
        self.search_url = search_url
        self.timeout = timeout

    def search(self, term: str) -> List[FoodRecord]:
        """Search for foods matching *term*.

        Returns:
            FoodRecords in the order the API ranked them

        Raises:
            SearchError: If the request fails or the response is malformed
        """
        query = term.strip() if term else ""
        if not query:
            raise SearchError("search", "search term cannot be empty")

        payload = self._make_request(query)
        foods = payload.get("foods")
        if not isinstance(foods, list):
            raise SearchError("search", "response has no 'foods' list")

        logger.debug("Search for %r returned %d foods", query, len(foods))
        return [food_from_search_result(food) for food in foods]

    def _make_request(self, query: str) -> Dict[str, Any]:
        """Make API request to the search endpoint.

        Raises:
            SearchError: If API request fails
        """
        logger.debug("Sending search request to %s for %r", self.search_url, query)
        try:
            response = requests.get(
                self.search_url,
                params={"query": query},
                headers={"X-Api-Key": self.api_key},
                timeout=self.timeout,
            )

            if response.status_code == 429:
                raise SearchError(
                    "search",
                    "too many requests, please wait before trying again",
                    status_code=429
                )

            if response.status_code != 200:
                raise SearchError(
                    "search",
                    "unexpected response status",
                    status_code=response.status_code
                )

        except requests.exceptions.Timeout:
            raise SearchError("search", "request timed out")
        except requests.exceptions.ConnectionError:
            raise SearchError("search", "failed to connect to FoodData Central")
        except requests.exceptions.RequestException as e:
            raise SearchError("search", f"request failed: {e}")

        # Decoded outside the request block: requests.JSONDecodeError is also a
        # RequestException.
        try:
            payload = response.json()
        except ValueError as e:
            raise SearchError("search", f"response is not valid JSON: {e}")

        if not isinstance(payload, dict):
            raise SearchError("search", "response is not a JSON object")
        return payload
