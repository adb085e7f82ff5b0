"""Database migrations."""

from pharmapos.infrastructure.storage.sqlite.migrations.migrator import (
    get_migration_status,
    initialize_database,
    run_migrations,
    verify_schema_integrity,
)

__all__ = [
    "get_migration_status",
    "initialize_database",
    "run_migrations",
    "verify_schema_integrity",
]
