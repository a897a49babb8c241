"""Tests for the FoodData Central search client.

Tests use mocked API responses to avoid hitting real endpoints.
"""
from unittest.mock import Mock, patch

import pytest
import requests

from nosh.data_layer.exceptions import NoshErrorCode, SearchError
from nosh.ingestion.usda_client import DEFAULT_API_KEY, DEFAULT_SEARCH_URL, USDAClient

SEARCH_RESPONSE = {
    "totalHits": 2,
    "foods": [
        {
            "description": "Potatoes, raw",
            "foodNutrients": [{"nutrientId": 2047, "value": 77.0}],
        },
        {
            "description": "Potato chips",
            "servingSize": 28.0,
            "servingSizeUnit": "g",
            "householdServingFullText": "15 chips",
            "foodNutrients": [{"nutrientId": 1008, "value": 150.0}],
        },
    ],
}


def mock_response(status_code=200, payload=None):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload if payload is not None else SEARCH_RESPONSE
    return response


class TestUSDAClientInit:
    """Tests for USDAClient construction."""

    def test_defaults(self):
        client = USDAClient()

        assert client.api_key == DEFAULT_API_KEY
        assert client.search_url == DEFAULT_SEARCH_URL

    def test_empty_api_key_rejected(self):
        with pytest.raises(ValueError):
            USDAClient(api_key="  ")


class TestUSDAClientSearch:
    """Tests for USDAClient.search."""

    def test_request_shape(self):
        client = USDAClient(api_key="secret", search_url="http://localhost/search", timeout=5.0)

        with patch("nosh.ingestion.usda_client.requests.get", return_value=mock_response()) as get:
            client.search(" potato ")

        get.assert_called_once_with(
            "http://localhost/search",
            params={"query": "potato"},
            headers={"X-Api-Key": "secret"},
            timeout=5.0,
        )

    def test_results_mapped_in_order(self):
        client = USDAClient()

        with patch("nosh.ingestion.usda_client.requests.get", return_value=mock_response()):
            foods = client.search("potato")

        assert [f.key for f in foods] == ["potatoes_raw", "potato_chips"]
        assert foods[0].reference_serving.amount == 100.0
        assert foods[1].reference_serving.amount == 28.0
        assert [s.unit for s in foods[1].servings] == ["serving", "g", "chips"]

    def test_no_results(self):
        client = USDAClient()

        with patch(
            "nosh.ingestion.usda_client.requests.get",
            return_value=mock_response(payload={"foods": []}),
        ):
            assert client.search("zzz") == []

    def test_empty_term(self):
        with pytest.raises(SearchError):
            USDAClient().search("   ")

    def test_rate_limited(self):
        client = USDAClient()

        with patch(
            "nosh.ingestion.usda_client.requests.get",
            return_value=mock_response(status_code=429),
        ):
            with pytest.raises(SearchError) as exc_info:
                client.search("potato")

        assert exc_info.value.status_code == 429
        assert exc_info.value.code == NoshErrorCode.SEARCH_FAILURE

    def test_server_error(self):
        client = USDAClient()

        with patch(
            "nosh.ingestion.usda_client.requests.get",
            return_value=mock_response(status_code=503),
        ):
            with pytest.raises(SearchError) as exc_info:
                client.search("potato")

        assert exc_info.value.context["status_code"] == 503

    def test_timeout(self):
        client = USDAClient()

        with patch(
            "nosh.ingestion.usda_client.requests.get",
            side_effect=requests.exceptions.Timeout(),
        ):
            with pytest.raises(SearchError) as exc_info:
                client.search("potato")

        assert "timed out" in exc_info.value.reason

    def test_connection_error(self):
        client = USDAClient()

        with patch(
            "nosh.ingestion.usda_client.requests.get",
            side_effect=requests.exceptions.ConnectionError(),
        ):
            with pytest.raises(SearchError):
                client.search("potato")

    def test_invalid_json(self):
        response = mock_response()
        response.json.side_effect = ValueError("No JSON object could be decoded")

        with patch("nosh.ingestion.usda_client.requests.get", return_value=response):
            with pytest.raises(SearchError) as exc_info:
                USDAClient().search("potato")

        assert "JSON" in exc_info.value.reason

    def test_missing_foods_list(self):
        with patch(
            "nosh.ingestion.usda_client.requests.get",
            return_value=mock_response(payload={"totalHits": 0}),
        ):
            with pytest.raises(SearchError):
                USDAClient().search("potato")

    def test_requests_json_decode_error(self):
        response = mock_response()
        response.json.side_effect = requests.exceptions.JSONDecodeError("Expecting value", "<html>", 0)

        with patch("nosh.ingestion.usda_client.requests.get", return_value=response):
            with pytest.raises(SearchError) as exc_info:
                USDAClient().search("potato")

        assert "not valid JSON" in exc_info.value.reason

    def test_non_object_payload(self):
        with patch(
            "nosh.ingestion.usda_client.requests.get",
            return_value=mock_response(payload=[{"description": "Potato"}]),
        ):
            with pytest.raises(SearchError) as exc_info:
                USDAClient().search("potato")

        assert "not a JSON object" in exc_info.value.reason
