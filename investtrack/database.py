import logging
import re
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.orm.exc import StaleDataError

from investtrack.config import settings
from investtrack.core.exceptions import (
    ConflictException,
    DuplicateKeyException,
    InvestTrackException,
    ValidationException,
)

logger = logging.getLogger(__name__)

engine_kwargs: dict = {"echo": settings.DEBUG}  # Log SQL queries in debug mode
if settings.DATABASE_URL.startswith("sqlite"):
    engine_kwargs["connect_args"] = {"check_same_thread": False}
else:
    engine_kwargs.update(
        pool_pre_ping=True,  # Verify connections before using
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
    )

# Create SQLAlchemy engine
engine = create_engine(settings.DATABASE_URL, **engine_kwargs)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Iterator[Session]:
    """
    FastAPI dependency for database sessions.

    Yields a database session and ensures it's closed after use.

    Usage:
        @app.get("/items")
        def get_items(db: Session = Depends(get_db)):
            return db.query(Item).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables() -> None:
    """Create all tables that don't exist yet."""
    # Import every model module so its table is registered on Base.metadata
    from investtrack.models import (  # noqa: F401
        coverage,
        event,
        file,
        firm,
        interaction,
        member,
        token,
        user,
    )
    from investtrack.models.base import Base

    Base.metadata.create_all(bind=engine)


# SQLite: "UNIQUE constraint failed: members.email"
_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: (?P<cols>.+)$", re.MULTILINE)
# PostgreSQL: 'DETAIL:  Key (email)=(x@y.z) already exists.'
_POSTGRES_UNIQUE = re.compile(r"Key \((?P<cols>[^)]+)\)=")


def duplicate_field(error: IntegrityError) -> str | None:
    """
    Name of the column(s) behind a unique-constraint violation.

    Returns None when the IntegrityError is not a uniqueness violation.
    """
    message = str(error.orig)
    match = _SQLITE_UNIQUE.search(message) or _POSTGRES_UNIQUE.search(message)
    if match is None:
        if "unique" in message.lower() or "duplicate" in message.lower():
            return "value"
        return None
    columns = [col.strip().split(".")[-1] for col in match.group("cols").split(",")]
    return ",".join(columns)


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """
    Run a multi-step write as one database transaction.

    Commits when the block finishes. Any failure rolls back every write made
    inside the block, and storage errors are translated into domain exceptions:

    - unique violation -> DuplicateKeyException
    - other integrity error (NOT NULL, FK) -> ValidationException
    - stale version counter -> ConflictException
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        field = duplicate_field(e)
        logger.warning("Transaction rolled back on integrity error: %s", e.orig)
        if field is not None:
            raise DuplicateKeyException(field) from e
        raise ValidationException(f"Integrity constraint violated: {e.orig}") from e
    except InvestTrackException:
        db.rollback()
        raise
    except StaleDataError as e:
        db.rollback()
        logger.warning("Transaction rolled back on stale write: %s", e)
        raise ConflictException("Record has been modified. Please try again.") from e
    except Exception:
        db.rollback()
        logger.warning("Transaction rolled back", exc_info=True)
        raise
