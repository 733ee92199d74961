"""
Database connection, session management and reference data.
"""
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event, select, text
from sqlalchemy.orm import sessionmaker, Session, declarative_base

from chat.core.config import get_settings
from chat.core.logging import get_logger

logger = get_logger(__name__)

# Create base class for models
Base = declarative_base()

# Static reference data: name -> stable identifier
MESSAGE_TYPES = {"text": 1, "image": 2, "video": 3}
VIDEO_SOURCES = {"youtube": 1}

# Engine and session factory (initialized lazily)
_engine = None
_SessionLocal = None


def enable_sqlite_foreign_keys(engine) -> None:
    """Turn on FK enforcement for every new SQLite connection."""

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_engine():
    """Get or create the database engine."""
    global _engine
    if _engine is None:
        settings = get_settings()

        connect_args = {}
        if settings.is_sqlite:
            connect_args["check_same_thread"] = False

            # Extract file path from sqlite:///./path/to/db.db and ensure directory exists
            db_path = settings.database_url.replace("sqlite:///", "")
            if db_path.startswith("./"):
                db_path = db_path[2:]
            db_dir = Path(db_path).parent
            if db_dir and not db_dir.exists():
                db_dir.mkdir(parents=True, exist_ok=True)
                logger.info(f"Created database directory: {db_dir}")

        _engine = create_engine(
            settings.database_url,
            connect_args=connect_args,
            echo=settings.debug,
            pool_pre_ping=True,
        )

        if settings.is_sqlite:
            enable_sqlite_foreign_keys(_engine)

        logger.info("Database engine created", extra={"extra_data": {"database_url": settings.database_url}})

    return _engine


def get_session_factory():
    """Get or create the session factory."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=get_engine()
        )
    return _SessionLocal


def get_db() -> Generator[Session, None, None]:
    """Dependency to get database session."""
    SessionLocal = get_session_factory()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """Context manager to get database session."""
    SessionLocal = get_session_factory()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def seed_reference_data(db: Session) -> None:
    """Insert any missing message types and video sources."""
    from chat.models.message import MessageType, VideoSource

    for model, rows in ((MessageType, MESSAGE_TYPES), (VideoSource, VIDEO_SOURCES)):
        existing = set(db.scalars(select(model.name)).all())
        for name, ident in rows.items():
            if name not in existing:
                db.add(model(id=ident, name=name))
    db.commit()


def init_db(engine=None) -> None:
    """Create tables and seed reference data."""
    from chat.models import message, user  # noqa: F401 - Import to register models

    engine = engine or get_engine()
    Base.metadata.create_all(bind=engine)

    with Session(bind=engine) as db:
        seed_reference_data(db)
    logger.info("Database tables created")


def drop_db(engine=None) -> None:
    """Drop every table owned by the service."""
    from chat.models import message, user  # noqa: F401

    engine = engine or get_engine()
    Base.metadata.drop_all(bind=engine)
    logger.info("Database tables dropped")


def check_db_connection() -> bool:
    """Check if database is reachable."""
    try:
        engine = get_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False
