"""Address validation against DAWA datavask (Danish address cleansing)."""

import logging
from typing import Any

import httpx

from storefront.api.middleware.error_handler import BadRequestError, UpstreamServiceError
from storefront.core.http import get_dawa_client

logger = logging.getLogger(__name__)

DATAVASK_PATH = "/datavask/adresser"

# DAWA category for an unambiguous, exact match
PRECISE_MATCH = "A"

CUSTOMER_FIELDS = (
    "address",
    "city",
    "country",
    "customerType",
    "email",
    "fullName",
    "mobileNumber",
    "postalCode",
    "streetNumber",
)


def format_betegnelse(address: str, street_number: str | None, postal_code: str, city: str) -> str:
    """Build the single-line address DAWA expects, e.g. "Vinkelvej 12D, 2800 Lyngby"."""
    street = f"{address} {street_number}".strip() if street_number else address.strip()
    return f"{street}, {postal_code} {city}"


def top_precise_result(data: Any) -> dict[str, Any] | None:
    """Return the first datavask result if it is a precise match."""
    if not isinstance(data, dict):
        return None
    results = data.get("resultater") or []
    if not results:
        return None
    top = results[0]
    if not isinstance(top, dict) or top.get("kategori") != PRECISE_MATCH:
        return None
    return top


class AddressService:
    """Service wrapping the DAWA datavask endpoint."""

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        """Initialize address service.

        Args:
            client: Optional HTTP client for testing.
        """
        self.client = client or get_dawa_client()

    async def _datavask(self, betegnelse: str) -> tuple[int, Any]:
        try:
            response = await self.client.get(DATAVASK_PATH, params={"betegnelse": betegnelse})
            data = response.json()
        except httpx.HTTPError as e:
            logger.error("DAWA request failed: %s", e)
            raise UpstreamServiceError("DAWA", "Fejl ved validering af adresse") from e
        except ValueError as e:
            logger.error("DAWA returned invalid JSON: %s", e)
            raise UpstreamServiceError("DAWA", "Fejl ved validering af adresse") from e
        return response.status_code, data

    async def datavask(self, customer_details: dict[str, Any]) -> dict[str, Any]:
        """Validate a customer's address.

        Args:
            customer_details: Customer fields; address, city and postalCode
                are required.

        Returns:
            dict: ``customerDetails`` echoed back and the raw ``dawaResponse``.

        Raises:
            ValueError: If a required field is missing. No request is made.
            BadRequestError: If DAWA has no precise match.
            UpstreamServiceError: If DAWA cannot be reached or parsed.
        """
        address = (customer_details.get("address") or "").strip()
        city = (customer_details.get("city") or "").strip()
        postal_code = (customer_details.get("postalCode") or "").strip()
        if not address or not city or not postal_code:
            raise ValueError("Address, city, and postalCode are required fields.")

        betegnelse = format_betegnelse(address, customer_details.get("streetNumber"), postal_code, city)
        status_code, data = await self._datavask(betegnelse)

        if status_code >= 400 or top_precise_result(data) is None:
            logger.info("Address not precisely matched: %s (HTTP %s)", betegnelse, status_code)
            raise BadRequestError("Address validation failed.", upstream=data)

        return {
            "customerDetails": {field: customer_details.get(field) for field in CUSTOMER_FIELDS},
            "dawaResponse": data,
        }

    async def validate_address(self, address: str) -> dict[str, Any]:
        """Validate a free-text address and return the precise top match.

        Raises:
            ValueError: If the address is blank.
            BadRequestError: If DAWA has no precise match.
            UpstreamServiceError: If DAWA cannot be reached or parsed.
        """
        if not address or not address.strip():
            raise ValueError("Adresse er påkrævet")

        status_code, data = await self._datavask(address.strip())
        top = top_precise_result(data)
        if status_code >= 400 or top is None:
            raise BadRequestError("Adresse ikke fundet eller ikke præcis.", upstream=data)
        return top
