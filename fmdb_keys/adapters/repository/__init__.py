"""Repository adapters - Database implementations."""

from .postgres import PostgresUserRepository, check_connection, run_migrations

__all__ = ["PostgresUserRepository", "check_connection", "run_migrations"]
