"""Integration tests for DAWA and PostNord routes."""

from typing import Any
from unittest.mock import MagicMock, patch

import httpx
from fastapi.testclient import TestClient

CUSTOMER = {
    "fullName": "Jens Hansen",
    "email": "jens@example.dk",
    "address": "Vinkelvej",
    "streetNumber": "12D",
    "postalCode": "2800",
    "city": "Lyngby",
}


def recording_client(payload: Any, status_code: int = 200, calls: list | None = None) -> httpx.AsyncClient:
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(status_code, json=payload)

    return httpx.AsyncClient(base_url="https://upstream.test", transport=httpx.MockTransport(handler))


class TestDatavask:
    """Tests for POST /api/dawa/datavask."""

    @patch("storefront.services.address_service.get_dawa_client")
    def test_precise_match(self, mock_get_client: MagicMock, client: TestClient) -> None:
        payload = {"kategori": "A", "resultater": [{"kategori": "A", "adresse": {"postnr": "2800"}}]}
        mock_get_client.return_value = recording_client(payload)

        response = client.post("/api/dawa/datavask", json=CUSTOMER)

        assert response.status_code == 200
        data = response.json()
        assert data["customerDetails"]["fullName"] == "Jens Hansen"
        assert data["dawaResponse"] == payload

    @patch("storefront.services.address_service.get_dawa_client")
    def test_imprecise_match_returns_400_with_dawa_payload(self, mock_get_client: MagicMock, client: TestClient) -> None:
        """Test that a non-A match is rejected and the DAWA response passed through."""
        payload = {"kategori": "B", "resultater": [{"kategori": "B"}]}
        mock_get_client.return_value = recording_client(payload)

        response = client.post("/api/dawa/datavask", json=CUSTOMER)

        assert response.status_code == 400
        data = response.json()
        assert data["message"] == "Address validation failed."
        assert data["upstream"] == payload

    @patch("storefront.services.address_service.get_dawa_client")
    def test_missing_city_never_calls_dawa(self, mock_get_client: MagicMock, client: TestClient) -> None:
        calls: list[httpx.Request] = []
        mock_get_client.return_value = recording_client({}, calls=calls)

        response = client.post("/api/dawa/datavask", json={**CUSTOMER, "city": None})

        assert response.status_code == 400
        assert response.json()["detail"] == "Address, city, and postalCode are required fields."
        assert calls == []

    @patch("storefront.services.address_service.get_dawa_client")
    def test_dawa_down_returns_500(self, mock_get_client: MagicMock, client: TestClient) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        mock_get_client.return_value = httpx.AsyncClient(
            base_url="https://upstream.test", transport=httpx.MockTransport(handler)
        )

        response = client.post("/api/dawa/datavask", json=CUSTOMER)

        assert response.status_code == 500
        assert response.json()["error"] == "upstream_error"


class TestValidateAddress:
    """Tests for POST /api/dawa/validate-address."""

    @patch("storefront.services.address_service.get_dawa_client")
    def test_validate_address(self, mock_get_client: MagicMock, client: TestClient) -> None:
        top = {"kategori": "A", "adresse": {"postnr": "2800"}}
        mock_get_client.return_value = recording_client({"resultater": [top]})

        response = client.post("/api/dawa/validate-address", json={"address": "Vinkelvej 12D, 2800 Lyngby"})

        assert response.status_code == 200
        assert response.json() == {"data": top}

    def test_empty_address(self, client: TestClient) -> None:
        response = client.post("/api/dawa/validate-address", json={"address": ""})

        assert response.status_code == 422


class TestServicePoints:
    """Tests for GET /api/postnord/servicepoints."""

    PARAMS = {"city": "Lyngby", "postalCode": "2800", "streetName": "Vinkelvej", "streetNumber": "12"}

    @patch("storefront.services.pickup_point_service.get_postnord_client")
    def test_returns_postnord_response(self, mock_get_client: MagicMock, client: TestClient) -> None:
        payload = {"servicePointInformationResponse": {"servicePoints": [{"servicePointId": "96150"}]}}
        calls: list[httpx.Request] = []
        mock_get_client.return_value = recording_client(payload, calls=calls)

        response = client.get("/api/postnord/servicepoints", params=self.PARAMS)

        assert response.status_code == 200
        assert response.json() == payload
        assert calls[0].url.params["postalCode"] == "2800"

    @patch("storefront.services.pickup_point_service.get_postnord_client")
    def test_postnord_error_passed_through(self, mock_get_client: MagicMock, client: TestClient) -> None:
        error_body = {"message": "Invalid apikey"}
        mock_get_client.return_value = recording_client(error_body, status_code=403)

        response = client.get("/api/postnord/servicepoints", params=self.PARAMS)

        assert response.status_code == 500
        data = response.json()
        assert data["message"] == "Error fetching data from PostNord"
        assert data["upstream"] == error_body

    def test_missing_query_params(self, client: TestClient) -> None:
        response = client.get("/api/postnord/servicepoints", params={"city": "Lyngby"})

        assert response.status_code == 422
