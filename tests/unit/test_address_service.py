"""Unit tests for DAWA address validation."""

from typing import Any

import httpx
import pytest

from storefront.api.middleware.error_handler import BadRequestError, UpstreamServiceError
from storefront.services.address_service import AddressService, format_betegnelse, top_precise_result

DAWA_BASE = "https://api.dataforsyningen.dk"

CUSTOMER = {
    "fullName": "Jens Hansen",
    "email": "jens@example.dk",
    "mobileNumber": "12345678",
    "address": "Vinkelvej",
    "streetNumber": "12D",
    "postalCode": "2800",
    "city": "Lyngby",
    "country": "Danmark",
}


def dawa_client(payload: Any, status_code: int = 200, calls: list | None = None) -> httpx.AsyncClient:
    """Build a client whose transport answers every request with ``payload``."""

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(status_code, json=payload)

    return httpx.AsyncClient(base_url=DAWA_BASE, transport=httpx.MockTransport(handler))


def result_with_category(category: str) -> dict[str, Any]:
    return {
        "kategori": category,
        "resultater": [
            {"kategori": category, "adresse": {"vejnavn": "Vinkelvej", "husnr": "12D", "postnr": "2800"}},
        ],
    }


class TestHelpers:
    """Tests for address helper functions."""

    def test_format_betegnelse(self) -> None:
        assert format_betegnelse("Vinkelvej", "12D", "2800", "Lyngby") == "Vinkelvej 12D, 2800 Lyngby"

    def test_format_betegnelse_without_number(self) -> None:
        assert format_betegnelse("Vinkelvej 12D", None, "2800", "Lyngby") == "Vinkelvej 12D, 2800 Lyngby"

    def test_top_precise_result(self) -> None:
        assert top_precise_result(result_with_category("A"))["kategori"] == "A"
        assert top_precise_result(result_with_category("B")) is None
        assert top_precise_result({"resultater": []}) is None
        assert top_precise_result(["not", "a", "dict"]) is None


class TestDatavask:
    """Tests for AddressService.datavask."""

    @pytest.mark.asyncio
    async def test_precise_match_returns_customer_details(self) -> None:
        calls: list[httpx.Request] = []
        service = AddressService(client=dawa_client(result_with_category("A"), calls=calls))

        result = await service.datavask(CUSTOMER)

        assert result["customerDetails"]["address"] == "Vinkelvej"
        assert result["customerDetails"]["email"] == "jens@example.dk"
        assert result["dawaResponse"]["resultater"][0]["kategori"] == "A"
        assert calls[0].url.params["betegnelse"] == "Vinkelvej 12D, 2800 Lyngby"
        assert calls[0].url.path == "/datavask/adresser"

    @pytest.mark.asyncio
    async def test_imprecise_match_raises_bad_request_with_upstream(self) -> None:
        """Test that a category B match is rejected with the DAWA payload attached."""
        payload = result_with_category("B")
        service = AddressService(client=dawa_client(payload))

        with pytest.raises(BadRequestError) as exc_info:
            await service.datavask(CUSTOMER)

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Address validation failed."
        assert exc_info.value.upstream == payload

    @pytest.mark.asyncio
    async def test_upstream_error_status_raises_bad_request(self) -> None:
        service = AddressService(client=dawa_client({"type": "QueryParameterFormatError"}, status_code=400))

        with pytest.raises(BadRequestError) as exc_info:
            await service.datavask(CUSTOMER)

        assert exc_info.value.upstream == {"type": "QueryParameterFormatError"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["address", "city", "postalCode"])
    async def test_missing_field_makes_no_request(self, missing: str) -> None:
        """Test that missing required fields fail before DAWA is called."""
        calls: list[httpx.Request] = []
        service = AddressService(client=dawa_client(result_with_category("A"), calls=calls))
        details = {**CUSTOMER, missing: "  "}

        with pytest.raises(ValueError) as exc_info:
            await service.datavask(details)

        assert str(exc_info.value) == "Address, city, and postalCode are required fields."
        assert calls == []

    @pytest.mark.asyncio
    async def test_network_error_raises_upstream_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.AsyncClient(base_url=DAWA_BASE, transport=httpx.MockTransport(handler))
        service = AddressService(client=client)

        with pytest.raises(UpstreamServiceError) as exc_info:
            await service.datavask(CUSTOMER)

        assert exc_info.value.service == "DAWA"
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_invalid_json_raises_upstream_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>maintenance</html>")

        client = httpx.AsyncClient(base_url=DAWA_BASE, transport=httpx.MockTransport(handler))
        service = AddressService(client=client)

        with pytest.raises(UpstreamServiceError):
            await service.datavask(CUSTOMER)


class TestValidateAddress:
    """Tests for AddressService.validate_address."""

    @pytest.mark.asyncio
    async def test_returns_top_result(self) -> None:
        service = AddressService(client=dawa_client(result_with_category("A")))

        top = await service.validate_address("Vinkelvej 12D, 2800 Lyngby")

        assert top["adresse"]["postnr"] == "2800"

    @pytest.mark.asyncio
    async def test_blank_address_raises(self) -> None:
        service = AddressService(client=dawa_client(result_with_category("A")))

        with pytest.raises(ValueError):
            await service.validate_address("   ")

    @pytest.mark.asyncio
    async def test_imprecise_match_raises(self) -> None:
        service = AddressService(client=dawa_client(result_with_category("C")))

        with pytest.raises(BadRequestError):
            await service.validate_address("Vinkelvej, Lyngby")
