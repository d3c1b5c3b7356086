from cardledger.db.catalog import (
    count_card_references,
    create_card,
    delete_card,
    find_cards_by_exact_name,
    get_card_by_exact_name,
    get_card_by_id,
    get_card_by_set_and_number,
    search_cards,
    update_card,
)
from cardledger.db.containers import ContainerRegistry, ContainerSummary, binders, decks
from cardledger.db.database import get_session, init_db
from cardledger.db.ledger import (
    LedgerEngine,
    LedgerRemoval,
    LedgerTable,
    binder_ledger,
    deck_ledger,
)

__all__ = [
    "ContainerRegistry",
    "ContainerSummary",
    "LedgerEngine",
    "LedgerRemoval",
    "LedgerTable",
    "binder_ledger",
    "binders",
    "count_card_references",
    "create_card",
    "deck_ledger",
    "decks",
    "delete_card",
    "find_cards_by_exact_name",
    "get_card_by_exact_name",
    "get_card_by_id",
    "get_card_by_set_and_number",
    "get_session",
    "init_db",
    "search_cards",
    "update_card",
]
