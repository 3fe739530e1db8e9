"""Shared httpx clients for the upstream REST APIs (QuickPay, DAWA, PostNord)."""

import logging

import httpx

from storefront.core.config import get_settings

logger = logging.getLogger(__name__)

QUICKPAY_API_VERSION = "v10"

_clients: dict[str, httpx.AsyncClient] = {}


def _get_or_create(name: str, **kwargs) -> httpx.AsyncClient:
    client = _clients.get(name)
    if client is None or client.is_closed:
        settings = get_settings()
        kwargs.setdefault("timeout", settings.http_timeout_seconds)
        client = httpx.AsyncClient(**kwargs)
        _clients[name] = client
    return client


def get_quickpay_client() -> httpx.AsyncClient:
    """Get the QuickPay API client.

    QuickPay uses HTTP basic auth with an empty user name and the API
    key as password, and requires the Accept-Version header on every call.

    Returns:
        httpx.AsyncClient: Client bound to the QuickPay base URL.
    """
    settings = get_settings()
    if not settings.quickpay_api_key:
        logger.warning("QuickPay API key not configured. Payment calls will be rejected upstream.")
    return _get_or_create(
        "quickpay",
        base_url=settings.quickpay_base_url,
        auth=("", settings.quickpay_api_key),
        headers={"Accept-Version": QUICKPAY_API_VERSION, "Accept": "application/json"},
    )


def get_dawa_client() -> httpx.AsyncClient:
    """Get the DAWA (address lookup) client."""
    settings = get_settings()
    return _get_or_create("dawa", base_url=settings.dawa_base_url)


def get_postnord_client() -> httpx.AsyncClient:
    """Get the PostNord business location client."""
    settings = get_settings()
    return _get_or_create(
        "postnord",
        base_url=settings.postnord_base_url,
        headers={"accept": "application/json"},
    )


async def shutdown_http_clients() -> None:
    """Close all open upstream clients. Called from the application lifespan."""
    for name, client in list(_clients.items()):
        await client.aclose()
        logger.debug("Closed %s HTTP client", name)
    _clients.clear()
