#!/usr/bin/env python3
"""CLI for Quotations API management tasks.

Usage:
    python -m cli <command>

Commands:
    migrate    Run database migrations (upgrade to head)
    seed       Insert sample quotations through the service layer
"""

import argparse
import asyncio
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config

from core.database import (
    create_engine,
    create_session_maker,
    dispose_engine,
    transaction,
)
from core.logger import configure_logging, get_logger
from repositories.quotation_repository import QuotationRepository
from schemas import AuthorData, QuotationInput
from services.quotations_service import QuotationService
from services.results import ErrorKind, Ok, ServiceError

logger = get_logger(__name__)

SAMPLE_QUOTATIONS: list[tuple[str, str, str]] = [
    ("The only way to do great work is to love what you do.", "Steve", "Jobs"),
    ("Simplicity is prerequisite for reliability.", "Edsger", "Dijkstra"),
    ("Talk is cheap. Show me the code.", "Linus", "Torvalds"),
    ("Premature optimization is the root of all evil.", "Donald", "Knuth"),
    ("Programs must be written for people to read.", "Harold", "Abelson"),
    ("Make it work, make it right, make it fast.", "Kent", "Beck"),
]


def _get_alembic_config() -> Config:
    api_dir = Path(__file__).resolve().parent
    cfg = Config(str(api_dir / "alembic.ini"))
    # Make script_location absolute so it works from any working directory.
    cfg.set_main_option("script_location", str(api_dir / "alembic"))
    return cfg


def cmd_migrate(target: str) -> int:
    """Run database migrations."""
    logger.info("migrations.start", target=target)
    command.upgrade(_get_alembic_config(), target)
    logger.info("migrations.complete", target=target)
    return 0


async def seed_quotations(
    samples: list[tuple[str, str, str]] = SAMPLE_QUOTATIONS,
) -> tuple[int, int]:
    """Create each sample quotation in one transaction; existing ones are skipped.

    Returns (created, skipped).
    """
    engine = create_engine()
    created = skipped = 0
    try:
        async with transaction(create_session_maker(engine)) as session:
            service = QuotationService(QuotationRepository(session))
            for content, first_name, last_name in samples:
                data = QuotationInput(
                    content=content,
                    author=AuthorData(first_name=first_name, last_name=last_name),
                )
                match await service.create_quotation(data):
                    case Ok():
                        created += 1
                    case ServiceError(kind=ErrorKind.ALREADY_EXISTS):
                        skipped += 1
                    case ServiceError(message=message):
                        raise RuntimeError(message)
    finally:
        await dispose_engine(engine)
    return created, skipped


def cmd_seed() -> int:
    """Insert sample quotations."""
    created, skipped = asyncio.run(seed_quotations())
    logger.info("seed.complete", created=created, skipped=skipped)
    return 0


def main(argv: list[str] | None = None) -> int:
    configure_logging()

    parser = argparse.ArgumentParser(
        description="Quotations API CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    migrate = subparsers.add_parser("migrate", help="Run database migrations")
    migrate.add_argument(
        "target",
        nargs="?",
        default="head",
        help="Target revision (default: head)",
    )
    subparsers.add_parser("seed", help="Insert sample quotations")

    args = parser.parse_args(argv)

    match args.command:
        case "migrate":
            return cmd_migrate(args.target)
        case "seed":
            return cmd_seed()
        case _:
            parser.print_help()
            return 1


if __name__ == "__main__":
    sys.exit(main())
