"""Repository adapters - Database implementations."""

from .postgres import PostgresAdminRepository, PostgresMemberRepository, run_migrations

__all__ = ["PostgresAdminRepository", "PostgresMemberRepository", "run_migrations"]
