# core/db.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from core.config import DATABASE_URL

# Use future flag and disable check_same_thread only for SQLite
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, future=True, connect_args=connect_args)

# expire_on_commit=False keeps audit rows readable after the session closes
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)

Base = declarative_base()


def init_models():
    """Create the local tables if they don't exist yet."""
    # Import models so they register on Base.metadata
    from models.audit_log import AuditLog  # noqa: F401
    Base.metadata.create_all(bind=engine)
