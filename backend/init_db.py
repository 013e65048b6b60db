import logging
import sys

from dotenv import load_dotenv

load_dotenv()

from contact_access.core.auth import SqlAuthorizedUserStore
from contact_access.core.config import settings
from contact_access.db.session import engine, Base, SessionLocal
from contact_access.utils.logger import configure_logging

# Import all models before create_all
from contact_access import models  # noqa: F401

logger = logging.getLogger("contact_access.init_db")


def create_missing_tables():
    logger.info("Creating missing tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("Tables created successfully (if missing).", extra={"tables": sorted(Base.metadata.tables)})


def seed_authorized_users(emails):
    """Copy configured emails into the authorized_users table."""
    store = SqlAuthorizedUserStore(SessionLocal)
    for email in emails:
        store.add(email, notes="seeded from AUTHORIZED_EMAILS")
    logger.info("Authorized users seeded.", extra={"count": len(emails)})


if __name__ == "__main__":
    configure_logging(settings.LOG_LEVEL)
    logger.info("Syncing database...")
    try:
        create_missing_tables()
        if settings.authorized_emails:
            seed_authorized_users(settings.authorized_emails)
    except Exception:
        logger.exception("Database sync failed.")
        sys.exit(1)
    logger.info("Database sync complete.")
