"""
Bulk ingestion of cards into the catalog.

Reads one card per line from a text file and adds each to the catalog from
the card-metadata provider. A line may pin a printing with "Name|set".
Blank lines and lines starting with "#" are ignored.

Each card is committed on its own; a failure only skips that card.
"""

import argparse
import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path

import httpx

from cardledger.config import settings
from cardledger.db.database import async_session_factory, init_db
from cardledger.models.failure import CardLedgerError, ConflictError
from cardledger.services.card_ingest import CardMetadataProvider, ingest_card
from cardledger.services.scryfall_client import USER_AGENT, ScryfallClient

logger = logging.getLogger(__name__)

# Scryfall asks for 50-100ms between requests
REQUEST_DELAY = 0.1


@dataclass
class IngestReport:
    """Outcome counts of a bulk ingestion run."""

    created: int = 0
    existing: int = 0
    failed: list[str] = field(default_factory=list)


def parse_card_lines(text: str) -> list[tuple[str, str | None]]:
    """
    Parse "Name" / "Name|set" lines into (name, set_code) pairs.

    >>> parse_card_lines("Lightning Bolt|lea\\n# comment\\nShock")
    [('Lightning Bolt', 'lea'), ('Shock', None)]
    """
    entries: list[tuple[str, str | None]] = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        name, _, set_code = line.partition("|")
        entries.append((name.strip(), set_code.strip() or None))
    return entries


async def ingest_entries(
    entries: list[tuple[str, str | None]],
    provider: CardMetadataProvider,
    delay: float = REQUEST_DELAY,
) -> IngestReport:
    """
    Ingest cards one at a time, each in its own transaction.

    Cards already in the catalog are counted, not treated as failures.
    """
    report = IngestReport()

    for index, (name, set_code) in enumerate(entries):
        if index and delay:
            await asyncio.sleep(delay)

        async with async_session_factory() as session:
            try:
                card = await ingest_card(session, provider, name, set_code)
                await session.commit()
            except ConflictError:
                await session.rollback()
                logger.info("Already catalogued: %s", name)
                report.existing += 1
                continue
            except CardLedgerError as e:
                await session.rollback()
                logger.warning("Failed to ingest %s: %s", name, e.message)
                report.failed.append(name)
                continue

        logger.info("Ingested %s (%s)", card.name, card.set_code)
        report.created += 1

    logger.info(
        "Ingestion complete: %d created, %d existing, %d failed",
        report.created,
        report.existing,
        len(report.failed),
    )
    return report


async def run_ingest(path: Path) -> IngestReport:
    """Ingest every card listed in a file."""
    entries = parse_card_lines(path.read_text(encoding="utf-8"))
    logger.info("Ingesting %d card(s) from %s", len(entries), path)

    await init_db()
    async with httpx.AsyncClient(
        headers={"User-Agent": USER_AGENT},
        timeout=settings.scryfall_timeout,
    ) as client:
        provider = ScryfallClient(client=client)
        return await ingest_entries(entries, provider)


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Add cards to the catalog from Scryfall.")
    parser.add_argument("path", type=Path, help="File with one card name (or Name|set) per line")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    report = asyncio.run(run_ingest(args.path))
    if report.failed:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
