"""
PostgreSQL repository adapter - Implements UserRepository protocol.

This module provides the PostgreSQL implementation of the domain's
repository port using psycopg3 with raw SQL over an async pool.

Concurrency Design - Unique Constraint as Arbiter:
-------------------------------------------------
The domain pre-checks email existence with find_by_email(), but two
concurrent registrations for the same email can both pass that read.
The UNIQUE constraints on users.email and users.api_key make the INSERT
the authoritative check: the losing insert raises UniqueViolation, which
is reported as DuplicateKeyError so the domain can tell it apart from
every other storage failure.

The AsyncConnectionPool bounds simultaneously open connections at
max_size; callers beyond that wait in the pool queue instead of failing.
"""

import logging
from pathlib import Path

import psycopg
from psycopg import errors
from psycopg_pool import AsyncConnectionPool

from fmdb_keys.domain.exceptions import DuplicateKeyError, PersistenceError
from fmdb_keys.domain.ports import UserRecord

logger = logging.getLogger(__name__)


class PostgresUserRepository:
    """
    Implements UserRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 AsyncConnectionPool for database connections
        """
        self._pool = pool

    async def find_by_email(self, email: str) -> UserRecord | None:
        """
        Fetch the user registered under an email address.

        Args:
            email: Normalized email address (lowercase, stripped)

        Returns:
            UserRecord if found, None otherwise

        Raises:
            PersistenceError: Database unreachable or query failed
        """
        sql = """
            SELECT first_name, last_name, email, api_key, use_case
            FROM users
            WHERE email = %s
        """

        try:
            async with self._pool.connection() as conn, conn.cursor() as cursor:
                await cursor.execute(sql, (email,))
                row = await cursor.fetchone()
        except psycopg.Error as e:
            raise PersistenceError(f"User lookup failed: {e}") from e

        if row is None:
            return None
        return UserRecord(
            first_name=row[0],
            last_name=row[1],
            email=row[2],
            api_key=row[3],
            use_case=row[4],
        )

    async def insert(self, record: UserRecord) -> None:
        """
        Insert a new user record.

        Args:
            record: Fully populated record including the generated api_key

        Raises:
            DuplicateKeyError: email or api_key violates a UNIQUE constraint
            PersistenceError: Any other database failure
        """
        sql = """
            INSERT INTO users (first_name, last_name, email, api_key, use_case)
            VALUES (%s, %s, %s, %s, %s)
        """

        try:
            async with self._pool.connection() as conn, conn.cursor() as cursor:
                await cursor.execute(
                    sql,
                    (
                        record.first_name,
                        record.last_name,
                        record.email,
                        record.api_key,
                        record.use_case,
                    ),
                )
                await conn.commit()
        except errors.UniqueViolation as e:
            constraint = e.diag.constraint_name or "unique constraint"
            raise DuplicateKeyError(f"{record.email} rejected by {constraint}") from e
        except psycopg.Error as e:
            raise PersistenceError(f"User insert failed: {e}") from e


async def check_connection(pool: AsyncConnectionPool, timeout: float = 5.0) -> bool:
    """
    Verify the database is reachable and log the outcome.

    Waits at most ``timeout`` seconds for a connection so an unreachable
    database does not hold up startup.

    A failure is logged but not raised; the server keeps running and
    registrations report a server error until the database is back.
    """
    try:
        async with pool.connection(timeout=timeout) as conn:
            await conn.execute("SELECT 1")
    except psycopg.Error:
        logger.exception("Database connection error")
        return False
    logger.info("Connected to database")
    return True


async def run_migrations(pool: AsyncConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 AsyncConnectionPool instance
    """
    # Structure: fmdb_keys/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            async with pool.connection() as conn:
                await conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
