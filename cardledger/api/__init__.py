from cardledger.api.binders import router as binders_router
from cardledger.api.cards import router as cards_router
from cardledger.api.decks import router as decks_router
from cardledger.api.errors import register_error_handlers
from cardledger.api.health import router as health_router

__all__ = [
    "binders_router",
    "cards_router",
    "decks_router",
    "health_router",
    "register_error_handlers",
]
