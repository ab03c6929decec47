# core/logger.py
import logging
from datetime import datetime, timezone

from core.db import SessionLocal
from models.audit_log import AuditLog

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: int = logging.INFO):
    """Configure console logging once at start-up."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # Silence noisy third-party loggers
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


def log_action(admin_email: str, resource: str, action: str, resource_id=None, session_factory=SessionLocal):
    """Record an admin action into the audit log."""
    session = session_factory()
    try:
        entry = AuditLog(
            admin_email=admin_email or "unknown",
            resource=resource,
            resource_id=None if resource_id is None else str(resource_id),
            action=action,
            timestamp=datetime.now(timezone.utc),
        )
        session.add(entry)
        session.commit()
    except Exception as e:
        logger.error("Audit log error: %s", e)
        session.rollback()
    finally:
        session.close()


def get_recent_actions(limit: int = 20, session_factory=SessionLocal):
    """Return the latest audit entries, newest first."""
    session = session_factory()
    try:
        return (
            session.query(AuditLog)
            .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
            .limit(limit)
            .all()
        )
    finally:
        session.close()
