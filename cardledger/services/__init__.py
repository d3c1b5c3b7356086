from cardledger.services.card_ingest import (
    CardMetadataProvider,
    delete_card_by_reference,
    ingest_card,
    update_card_by_reference,
)
from cardledger.services.card_resolver import (
    CardReference,
    is_card_id,
    resolve_card,
    resolve_card_reference,
)
from cardledger.services.scryfall_client import ScryfallClient

__all__ = [
    "CardMetadataProvider",
    "CardReference",
    "ScryfallClient",
    "delete_card_by_reference",
    "ingest_card",
    "is_card_id",
    "resolve_card",
    "resolve_card_reference",
    "update_card_by_reference",
]
