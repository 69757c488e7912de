import logging
from datetime import datetime, timezone
from typing import Generator, List, Optional

from sqlalchemy import create_engine, func, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base

from app.config import settings
from app.utils import mask_database_url

logger = logging.getLogger(__name__)

# Process-wide engine, created by init_db() at startup and released by close_db()
engine: Optional[Engine] = None

# Create SessionLocal class for creating database sessions; bound in init_db()
SessionLocal = sessionmaker(autocommit=False, autoflush=False)

# Base class for SQLAlchemy models
Base = declarative_base()

RECENT_MESSAGES_LIMIT = 50


def _build_engine(database_url: str) -> Engine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        # check_same_thread=False is required for SQLite to work with FastAPI's threadpool
        connect_args["check_same_thread"] = False
    return create_engine(database_url, connect_args=connect_args, echo=False)


def init_db() -> Engine:
    """
    Create the engine (once) and all tables.
    Called during application startup.
    """
    global engine

    masked_url = mask_database_url(settings.DATABASE_URL)
    logger.debug(f"Initializing database with URL: {masked_url}")
    try:
        # Import models to register them with Base.metadata
        from app.models import Message  # noqa: F401

        if engine is None:
            engine = _build_engine(settings.DATABASE_URL)
            SessionLocal.configure(bind=engine)

        logger.debug("Creating database tables...")
        Base.metadata.create_all(bind=engine)
        logger.info(f"Connected to database: {masked_url}")
        return engine
    except Exception as e:
        logger.error(f"Database connection error: {e}")
        raise


def close_db() -> None:
    """Dispose of the engine's connection pool. Called during shutdown."""
    global engine

    if engine is not None:
        engine.dispose()
        engine = None
        logger.info("Database connection closed")


def get_db() -> Generator[Session, None, None]:
    """
    Dependency to get database session.
    Yields a session and ensures it's closed after use.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_health() -> bool:
    """
    Check if the database is reachable and schema is applied.

    Returns:
        True if DB is healthy and schema exists, False otherwise.
    """
    logger.debug("Checking database health...")
    if engine is None:
        logger.error("Database not initialized")
        return False
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
            logger.debug("Database connectivity OK")

        if not inspect(engine).has_table("messages"):
            logger.error("Database schema not applied: 'messages' table not found")
            return False
        logger.debug("Database health check passed")
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False


# =============================================================================
# Message Repository Functions
# =============================================================================

def create_message(
    db: Session,
    content: str,
    ip_address: str,
    location: Optional[dict] = None,
    device_info: Optional[dict] = None,
):
    """
    Insert a new message with a server-assigned timestamp.

    Args:
        db: Database session
        content: Trimmed message text
        ip_address: Resolved client IP
        location: Location sub-record
        device_info: Device sub-record

    Returns:
        The stored Message, or None if the insert failed
    """
    from app.models import Message

    logger.info(f"Creating message from {ip_address}")
    logger.debug(f"Message length: {len(content)} characters")

    try:
        message = Message(
            content=content,
            ip_address=ip_address,
            location=location,
            device_info=device_info,
            timestamp=datetime.now(timezone.utc),
        )

        db.add(message)
        db.commit()
        db.refresh(message)
        logger.info(f"Message created successfully: {message.id}")
        return message

    except Exception:
        db.rollback()
        logger.exception(f"Failed to save message from {ip_address}")
        return None


def get_recent_messages(db: Session, limit: int = RECENT_MESSAGES_LIMIT) -> List:
    """
    Retrieve the most recent messages, newest first.

    Args:
        db: Database session
        limit: Maximum number of messages to return

    Returns:
        List of Message objects
    """
    from app.models import Message

    logger.info(f"Querying {limit} most recent messages")
    messages = (
        db.query(Message)
        .order_by(Message.timestamp.desc(), Message.id.desc())
        .limit(limit)
        .all()
    )
    logger.info(f"Retrieved {len(messages)} messages")
    return messages


def count_messages(db: Session) -> int:
    """Total number of stored messages."""
    from app.models import Message

    total = db.query(func.count(Message.id)).scalar() or 0
    logger.debug(f"Total messages: {total}")
    return total
