import logging

from core.db import Base, engine
from core.logger import setup_logging
from models.audit_log import AuditLog  # noqa: F401  (registers the table)

logger = logging.getLogger(__name__)


def init_db():
    logger.info("Rebuilding database (drop/create)...")
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    logger.info("Tables created: %s", ", ".join(sorted(Base.metadata.tables)))


if __name__ == "__main__":
    setup_logging()
    init_db()
