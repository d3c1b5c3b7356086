from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="CARDLEDGER_")

    app_name: str = "CardLedger"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/cardledger"

    scryfall_api_url: str = "https://api.scryfall.com"
    scryfall_timeout: float = 10.0

    # Single owner used by the HTTP layer until authentication is wired in.
    # Core operations always take the owner explicitly.
    default_owner_id: int = 1


settings = Settings()


# =============================================================================
# LEDGER DEFAULTS
# =============================================================================

DEFAULT_QUANTITY = 1

DEFAULT_CONDITION = "NM"
