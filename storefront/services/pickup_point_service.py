"""PostNord service point lookup."""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

import httpx

from storefront.api.middleware.error_handler import UpstreamServiceError
from storefront.core.config import get_settings
from storefront.core.http import get_postnord_client

logger = logging.getLogger(__name__)

NEAREST_BY_ADDRESS_PATH = "/rest/businesslocation/v5/servicepoints/nearest/byaddress"

FIXTURE_PATH = Path(__file__).resolve().parent.parent / "data" / "servicepoints.json"

# Fixed query parameters for Danish pickup points
BASE_PARAMS = {
    "returnType": "json",
    "countryCode": "DK",
    "agreementCountry": "DK",
    "numberOfServicePoints": "5",
    "srId": "EPSG:4326",
    "context": "optionalservicepoint",
    "responseFilter": "public",
    "located": "all",
    "whiteLabelName": "false",
}


@lru_cache
def load_fixture() -> dict[str, Any]:
    """Load the bundled service point response used in local development."""
    with FIXTURE_PATH.open(encoding="utf-8") as f:
        return json.load(f)


class PickupPointService:
    """Service for finding the nearest PostNord pickup points."""

    def __init__(self, client: httpx.AsyncClient | None = None, use_fixture: bool | None = None) -> None:
        settings = get_settings()
        self.api_key = settings.postnord_api_key
        self.use_fixture = settings.postnord_use_fixture if use_fixture is None else use_fixture
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = get_postnord_client()
        return self._client

    async def find_nearest(
        self,
        city: str,
        postal_code: str,
        street_name: str,
        street_number: str,
    ) -> dict[str, Any]:
        """Find service points near an address.

        Args:
            city: City name.
            postal_code: Danish postal code.
            street_name: Street name.
            street_number: House number.

        Returns:
            dict: PostNord response JSON, unmodified.

        Raises:
            UpstreamServiceError: On network failure or an error response.
        """
        if self.use_fixture:
            logger.info("Serving service points from fixture for %s %s", postal_code, city)
            return load_fixture()

        params = {
            **BASE_PARAMS,
            "city": city,
            "postalCode": postal_code,
            "streetName": street_name,
            "streetNumber": street_number,
            "apikey": self.api_key,
        }

        try:
            response = await self.client.get(NEAREST_BY_ADDRESS_PATH, params=params)
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("PostNord request failed: %s", e)
            raise UpstreamServiceError("PostNord", "Error fetching data from PostNord") from e

        if response.is_error:
            logger.error("PostNord returned HTTP %s: %s", response.status_code, data)
            raise UpstreamServiceError("PostNord", "Error fetching data from PostNord", upstream=data)

        return data
