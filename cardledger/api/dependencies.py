"""
Request-scoped dependencies shared by the routers.
"""

from cardledger.config import settings
from cardledger.services.card_ingest import CardMetadataProvider
from cardledger.services.scryfall_client import ScryfallClient


def get_owner_id() -> int:
    """
    Owner of the containers touched by this request.

    Authentication is handled outside this service; until it supplies a
    user, every request acts for the configured default owner.
    """
    return settings.default_owner_id


def get_card_provider() -> CardMetadataProvider:
    """Card-metadata provider used when ingesting new cards."""
    return ScryfallClient()
