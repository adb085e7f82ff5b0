"""Unit tests for database migrator."""

from pathlib import Path

import aiosqlite
import pytest

from pharmapos.infrastructure.storage.sqlite.migrations.migrator import (
    REQUIRED_TABLES,
    MigrationInfo,
    create_backup,
    discover_migrations,
    get_migration_status,
    initialize_database,
    restore_backup,
    verify_schema_integrity,
)


class TestMigrationInfo:
    """Tests for MigrationInfo dataclass."""

    def test_from_file_parses_filename(self, tmp_path: Path):
        """from_file() parses version and name from filename."""
        migration_file = tmp_path / "v001_initial_schema.sql"
        migration_file.write_text("SELECT 1;")

        info = MigrationInfo.from_file(migration_file)

        assert info.version == "001"
        assert info.name == "initial_schema"
        assert len(info.checksum) == 16

    def test_from_file_invalid_filename_raises(self, tmp_path: Path):
        """from_file() raises ValueError for invalid filename."""
        invalid_file = tmp_path / "invalid_migration.sql"
        invalid_file.write_text("SELECT 1;")

        with pytest.raises(ValueError, match="Invalid migration filename"):
            MigrationInfo.from_file(invalid_file)


class TestDiscoverMigrations:
    def test_ships_schema_migration(self):
        versions = [m.version for m in discover_migrations()]
        assert versions[:2] == ["001", "002"]
        assert versions == sorted(versions)


class TestInitializeDatabase:
    """Tests for initialize_database()."""

    async def test_creates_all_tables(self, temp_db_path: Path):
        results = await initialize_database(temp_db_path, create_backup_before=False)

        assert results and all(r.success for r in results)
        async with aiosqlite.connect(temp_db_path) as conn:
            cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = {row[0] for row in await cursor.fetchall()}
        assert set(REQUIRED_TABLES) <= tables

    async def test_second_run_is_noop(self, temp_db_path: Path):
        """Already-applied migrations are skipped."""
        await initialize_database(temp_db_path, create_backup_before=False)
        assert await initialize_database(temp_db_path, create_backup_before=False) == []

    async def test_backup_removed_after_success(self, temp_db_path: Path):
        await initialize_database(temp_db_path, create_backup_before=False)
        await initialize_database(temp_db_path)

        assert list(temp_db_path.parent.glob("*.backup_*")) == []


class TestBackup:
    def test_create_and_restore(self, tmp_path: Path):
        db_path = tmp_path / "app.db"
        db_path.write_bytes(b"original")

        backup = create_backup(db_path)
        db_path.write_bytes(b"changed")
        restore_backup(db_path, backup)

        assert db_path.read_bytes() == b"original"


class TestStatusAndVerify:
    async def test_status_missing_database(self, temp_db_path: Path):
        status = await get_migration_status(temp_db_path)

        assert status["exists"] is False
        assert "001" in status["pending_migrations"]

    async def test_status_after_migration(self, initialized_db: Path):
        status = await get_migration_status(initialized_db)

        assert status["exists"] is True
        assert status["pending_migrations"] == []
        assert status["current_version"] == max(m.version for m in discover_migrations())

    async def test_verify_passes(self, initialized_db: Path):
        checks = await verify_schema_integrity(initialized_db)

        assert {c["check"] for c in checks} == {"foreign_keys", "integrity", "required_tables"}
        assert all(c["status"] == "PASS" for c in checks)

    async def test_verify_reports_missing_tables(self, temp_db_path: Path):
        async with aiosqlite.connect(temp_db_path) as conn:
            await conn.execute("CREATE TABLE products (id INTEGER PRIMARY KEY)")
            await conn.commit()

        checks = {c["check"]: c for c in await verify_schema_integrity(temp_db_path)}

        assert checks["required_tables"]["status"] == "FAIL"
        assert "sales" in checks["required_tables"]["missing"]
