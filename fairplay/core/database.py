"""Database configuration and session management for SQLite.

Event instances and user profiles live in two tables that stand in for the
``eventInstances`` and ``users`` document collections. Embedded documents
(participant lists, attendance history maps) are stored as JSON columns.

SQLite Configuration Choices:
    - **WAL (Write-Ahead Logging)**: Readers are not blocked while a batch
      job commits, so the status routes keep answering during a run.

    - **Foreign Keys**: Enabled for consistency with the rest of the schema
      even though the two collections only reference each other by id.

    - **check_same_thread=False**: The scheduler runs jobs on worker threads
      while FastAPI serves requests on its own threads.
"""

from sqlalchemy import event as sa_event
from sqlmodel import SQLModel, create_engine

from fairplay.core.config import settings

connect_args = {"check_same_thread": False}

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.debug,  # Log SQL statements when DEBUG=true
)


@sa_event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas on each new connection.

    These settings are connection-level, not database-level, so they must
    be set each time a new connection is established from the pool.
    """
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_and_tables():
    """Create all database tables."""
    # Import models so their tables are registered on the metadata
    import fairplay.models  # noqa: F401

    SQLModel.metadata.create_all(engine)

