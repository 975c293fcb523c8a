"""
core/database.py -- Shared SQLAlchemy Core schema and engine owner.

Uses SQLAlchemy Core (not ORM) so the domain dataclasses in auth/models.py
and inventory/models.py remain the authoritative domain representation.
Swapping SQLite for PostgreSQL is a connection string change, not a rewrite.

All four tables live in one MetaData because the tenant foreign keys cross
what would otherwise be separate stores: users, categories and assets all
point at organizations, and assets point at categories. Every foreign key is
ON DELETE RESTRICT -- deleting an organization that still owns rows fails.

Database is the single storage client. It is constructed explicitly (by the
API lifespan, the CLI, or a test fixture) and passed to each repository;
there is no module-level engine.

Usage:
    db = Database("sqlite:///./assettrack.db")
    users = UserStore(db)
    assets = AssetStore(db)
    ...
    db.close()
"""

from __future__ import annotations

import logging

from sqlalchemy import (
    Column,
    ForeignKey,
    MetaData,
    String,
    Table,
    UniqueConstraint,
    create_engine,
    event,
    text,
)
from sqlalchemy.engine import Engine

logger = logging.getLogger("assettrack.database")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

organizations = Table(
    "organizations",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("slug", String(100), nullable=False, unique=True),
)

users = Table(
    "users",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password", String(255), nullable=False),  # bcrypt digest
    Column("role", String(30), nullable=False, server_default="member"),
    Column(
        "organization_id",
        String(36),
        ForeignKey("organizations.id", ondelete="RESTRICT"),
        nullable=False,
    ),
)

categories = Table(
    "categories",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(255), nullable=False),
    Column(
        "organization_id",
        String(36),
        ForeignKey("organizations.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    ),
)

assets = Table(
    "assets",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("serial_number", String(255), nullable=False),
    Column("status", String(20), nullable=False, server_default="active"),
    Column(
        "organization_id",
        String(36),
        ForeignKey("organizations.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    ),
    Column(
        "category_id",
        String(36),
        ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=False,
    ),
    # Per-tenant uniqueness. Two organizations may track the same serial.
    UniqueConstraint("organization_id", "serial_number", name="uq_asset_org_serial"),
)


# ---------------------------------------------------------------------------
# SQLite connection pragmas
# ---------------------------------------------------------------------------


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode and foreign key enforcement.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool. SQLite ignores FOREIGN KEY clauses unless
    foreign_keys is switched on for the connection.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# ---------------------------------------------------------------------------
# Engine owner
# ---------------------------------------------------------------------------


class Database:
    """Owns the Engine (and so the connection pool) for one database URL.

    Creating a Database creates any missing tables. close() disposes the
    pool; call it once on shutdown.
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            # FastAPI runs sync routes in a thread pool, so one pooled
            # SQLite connection may be used from several threads.
            connect_args["check_same_thread"] = False
        self.url = db_url
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_sqlite_pragmas)
        metadata.create_all(self.engine)
        logger.debug("Schema ready on %s", self.engine.url.render_as_string(hide_password=True))

    def ping(self) -> bool:
        """Return True if a trivial query succeeds. Used by the health check."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception:
            logger.exception("Database ping failed")
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()
