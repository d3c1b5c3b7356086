"""
Scryfall card-metadata provider.

Looks up a single printing by exact name (optionally within a set) and
converts the payload into CardMetadata. Used only when a card is first
added to the catalog.

Failures are reported as UpstreamUnavailableError and never retried here.

API: https://scryfall.com/docs/api/cards/named
"""

import logging
from typing import Any

import httpx

from cardledger.config import settings
from cardledger.models.card import CardMetadata
from cardledger.models.failure import UpstreamUnavailableError

logger = logging.getLogger(__name__)

USER_AGENT = "CardLedger/1.0"


def _image_url(data: dict[str, Any]) -> str | None:
    """Normal-size image, falling back to the front face of double-faced cards."""
    image_uris = data.get("image_uris")
    if image_uris:
        return image_uris.get("normal")

    faces = data.get("card_faces") or []
    if faces and faces[0].get("image_uris"):
        return faces[0]["image_uris"].get("normal")
    return None


def parse_card_payload(data: dict[str, Any]) -> CardMetadata:
    """
    Convert a Scryfall card object to CardMetadata.

    Prices are copied verbatim; missing prices stay None.
    """
    prices = data.get("prices") or {}
    return CardMetadata(
        id=str(data["id"]),
        name=str(data["name"]),
        set_code=data.get("set"),
        collector_number=data.get("collector_number"),
        image_url=_image_url(data),
        usd_price=prices.get("usd") or None,
        eur_price=prices.get("eur") or None,
        raw_data=data,
    )


class ScryfallClient:
    """
    Async Scryfall client.

    Args:
        base_url: Scryfall API root
        timeout: Per-request timeout in seconds
        client: Optional httpx client for connection reuse (and tests)
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = (base_url or settings.scryfall_api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.scryfall_timeout
        self._client = client

    async def _get(self, url: str, params: dict[str, str]) -> httpx.Response:
        headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        if self._client is not None:
            return await self._client.get(url, params=params, headers=headers)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(url, params=params, headers=headers)

    async def lookup_by_exact_name(self, name: str, set_code: str | None = None) -> CardMetadata:
        """
        Fetch the printing of a card with exactly this name.

        Raises:
            UpstreamUnavailableError: retryable=False when Scryfall has no
                such card, retryable=True on transport or server failures
        """
        params = {"exact": name}
        if set_code:
            params["set"] = set_code.lower()

        try:
            response = await self._get(f"{self.base_url}/cards/named", params)
        except httpx.RequestError as e:
            logger.warning("Scryfall request for '%s' failed: %s", name, e)
            raise UpstreamUnavailableError(
                "The card-metadata provider could not be reached.",
                detail=type(e).__name__,
                suggestion="Try again later.",
            ) from e

        if response.status_code == httpx.codes.NOT_FOUND:
            raise UpstreamUnavailableError(
                f"Card '{name}' not found at the card-metadata provider.",
                detail=f"set={set_code}" if set_code else None,
                suggestion="Check the spelling of the exact card name.",
                retryable=False,
            )

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning("Scryfall returned HTTP %d for '%s'", response.status_code, name)
            raise UpstreamUnavailableError(
                "The card-metadata provider failed.",
                detail=f"HTTP {response.status_code}",
                suggestion="Try again later.",
            ) from e

        try:
            return parse_card_payload(response.json())
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Unreadable Scryfall card for '%s': %r", name, e)
            raise UpstreamUnavailableError(
                "The card-metadata provider returned an unreadable card.",
                detail=type(e).__name__,
                suggestion="Try again later.",
            ) from e
