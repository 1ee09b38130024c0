"""Entry point for the carsharing console."""

from __future__ import annotations

import logging

from carsharing.carsharing_app import CarSharingApp
from carsharing.config import resolve_db_path, resolve_log_level, resolve_log_path
from carsharing.console import ConsoleIO
from carsharing.log import configure_logging
from carsharing.persistence import CarRepository, CompanyRepository, CustomerRepository, bootstrap_schema
from carsharing.session import Session

logger = logging.getLogger(__name__)


def build_app(io: ConsoleIO, db_path: str) -> CarSharingApp:
    """Prepare the database and wire the menu tree against it."""
    bootstrap_schema(db_path)
    session = Session(
        io=io,
        companies=CompanyRepository(db_path),
        cars=CarRepository(db_path),
        customers=CustomerRepository(db_path),
    )
    return CarSharingApp(session)


def main() -> None:
    configure_logging(resolve_log_path(), resolve_log_level())
    db_path = resolve_db_path()
    logger.info("Starting carsharing, database %s", db_path)
    try:
        build_app(ConsoleIO(), db_path).run()
    except (EOFError, KeyboardInterrupt):
        logger.info("Input closed, exiting")
    except Exception:
        logger.exception("Fatal error, exiting")
        raise SystemExit(1)
    logger.info("Bye")


if __name__ == "__main__":
    main()
