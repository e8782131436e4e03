"""Idempotent schema migration, run once per deploy outside the request path

Usage:
    python -m tally_gateway.infrastructure.database.migrate
"""

import logging
from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from tally_gateway.infrastructure.database.models import Base

logger = logging.getLogger(__name__)


def run_migrations(engine: Engine) -> list[str]:
    """Create any missing tables; existing tables are left untouched. Returns the tables created."""
    existing = set(inspect(engine).get_table_names())
    Base.metadata.create_all(bind=engine, checkfirst=True)
    created = sorted(set(Base.metadata.tables) - existing)
    logger.info("Schema migration complete", extra={"tables_created": created})
    return created


def main() -> None:
    from tally_gateway.config import settings
    from tally_gateway.infrastructure.database.session import engine
    from tally_gateway.infrastructure.observability.logging import setup_logging

    setup_logging(settings.log_level)
    run_migrations(engine)


if __name__ == "__main__":
    main()
