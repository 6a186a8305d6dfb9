"""Tests for warden CLI commands."""

import json
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog
from typer.testing import CliRunner

from warden import __version__
from warden.cli import app


runner = CliRunner()

ROLES_YAML = """\
roles:
  admin:
    name: Administrator
    permissions: [create, read, update, delete]
  viewer:
    name: Viewer
    permissions: [read]
"""

VIEWER_ONLY_YAML = """\
roles:
  viewer:
    name: Viewer
    permissions: [read]
"""


def _report(stdout: str) -> dict:
    """Extract the JSON report line from command output."""
    for line in stdout.splitlines():
        if line.startswith('{"command"'):
            return json.loads(line)
    raise AssertionError(f"No JSON report in output: {stdout!r}")


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Commands configure logging on the runner's streams; undo that."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def database_url(temp_dir: Path) -> str:
    """SQLite file database with tables created."""
    url = f"sqlite+aiosqlite:///{temp_dir / 'warden.db'}"
    result = runner.invoke(app, ["db:init", "--database-url", url])
    assert result.exit_code == 0, result.stdout
    return url


@pytest.fixture
def roles_file(temp_dir: Path) -> Path:
    """Example roles configuration."""
    path = temp_dir / "roles.yaml"
    path.write_text(ROLES_YAML)
    return path


def _invoke(command: str, roles_file: Path, database_url: str, *extra: str):
    return runner.invoke(
        app,
        [command, "--config", str(roles_file), "--database-url", database_url, *extra],
    )


class TestVersion:
    """Tests for the --version option."""

    def test_version(self) -> None:
        """Verify the version is printed."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestDbInit:
    """Tests for warden db:init."""

    def test_init_is_repeatable(self, database_url: str) -> None:
        """Verify running init on an existing database succeeds."""
        result = runner.invoke(app, ["db:init", "--database-url", database_url])

        assert result.exit_code == 0
        assert "Tables are ready" in result.stdout


class TestRolesSeed:
    """Tests for warden roles:seed."""

    def test_seed_reports_added_items(self, roles_file: Path, database_url: str) -> None:
        """Verify the first seed adds every role and permission."""
        result = _invoke("roles:seed", roles_file, database_url, "--json")

        assert result.exit_code == 0, result.stdout
        report = _report(result.stdout)
        assert report["command"] == "roles:seed"
        assert report["roles"]["added"] == 2
        assert report["permissions"]["added"] == 4
        assert report["attached"] == 5

    def test_seed_is_idempotent(self, roles_file: Path, database_url: str) -> None:
        """Verify a second seed adds nothing."""
        _invoke("roles:seed", roles_file, database_url)

        result = _invoke("roles:seed", roles_file, database_url, "--json")

        assert result.exit_code == 0
        report = _report(result.stdout)
        for kind in ("roles", "permissions"):
            counts = report[kind]
            assert counts["added"] == counts["updated"] == counts["restored"] == 0

    def test_human_output(self, roles_file: Path, database_url: str) -> None:
        """Verify per-item lines and a summary are printed."""
        result = _invoke("roles:seed", roles_file, database_url)

        assert result.exit_code == 0
        assert "Added role: Administrator (admin)" in result.stdout
        assert "Added permission: Delete (delete)" in result.stdout
        assert "Added: 2 roles" in result.stdout
        assert "Added: 4 permissions" in result.stdout

    def test_empty_config_exits_1(self, temp_dir: Path, database_url: str) -> None:
        """Verify an empty configuration is a failure."""
        path = temp_dir / "empty.yaml"
        path.write_text("roles: {}\n")

        result = _invoke("roles:seed", path, database_url)

        assert result.exit_code == 1
        assert "No roles found in configuration" in result.stdout

    def test_missing_config_exits_1(self, temp_dir: Path, database_url: str) -> None:
        """Verify a missing configuration file is a failure."""
        result = _invoke("roles:seed", temp_dir / "missing.yaml", database_url)

        assert result.exit_code == 1
        assert "not found" in result.stdout

    def test_missing_tables_exits_1(self, roles_file: Path, temp_dir: Path) -> None:
        """Verify a database error is reported as a failure."""
        url = f"sqlite+aiosqlite:///{temp_dir / 'uninitialized.db'}"

        result = _invoke("roles:seed", roles_file, url)

        assert result.exit_code == 1
        assert "Error" in result.stdout


class TestRolesSync:
    """Tests for warden roles:sync."""

    def test_sync_removes_undeclared_role(
        self, roles_file: Path, database_url: str
    ) -> None:
        """Verify a role dropped from the file is deleted."""
        _invoke("roles:seed", roles_file, database_url)
        roles_file.write_text(VIEWER_ONLY_YAML)

        result = _invoke("roles:sync", roles_file, database_url, "--json")

        assert result.exit_code == 0, result.stdout
        report = _report(result.stdout)
        deleted = {
            (e["kind"], e["slug"]) for e in report["events"] if e["action"] == "deleted"
        }
        assert deleted == {
            ("role", "admin"),
            ("permission", "create"),
            ("permission", "update"),
            ("permission", "delete"),
        }

        listing = runner.invoke(
            app, ["roles:list", "--database-url", database_url, "--json"]
        )
        roles = json.loads(listing.stdout.strip().splitlines()[-1])
        assert [r["slug"] for r in roles] == ["viewer"]

    def test_sync_purge(self, roles_file: Path, database_url: str) -> None:
        """Verify --purge is accepted and removes permissions."""
        _invoke("roles:seed", roles_file, database_url)
        roles_file.write_text(VIEWER_ONLY_YAML)

        result = _invoke("roles:sync", roles_file, database_url, "--purge", "--json")

        assert result.exit_code == 0
        report = _report(result.stdout)
        assert report["roles"]["deleted"] == 1
        assert report["permissions"]["deleted"] == 3

    def test_sync_summary_counts_each_kind(
        self, roles_file: Path, database_url: str
    ) -> None:
        """Verify the summary reports removed roles and permissions separately."""
        _invoke("roles:seed", roles_file, database_url)
        roles_file.write_text(VIEWER_ONLY_YAML)

        result = _invoke("roles:sync", roles_file, database_url)

        assert result.exit_code == 0, result.stdout
        assert "Removed: 1 roles" in result.stdout
        assert "Removed: 3 permissions" in result.stdout


class TestPermissionCommands:
    """Tests for warden permissions:seed and permissions:sync."""

    def test_permissions_seed(self, roles_file: Path, database_url: str) -> None:
        """Verify only permissions are created."""
        result = _invoke("permissions:seed", roles_file, database_url, "--json")

        assert result.exit_code == 0
        assert _report(result.stdout)["permissions"]["added"] == 4

        listing = runner.invoke(app, ["roles:list", "--database-url", database_url])
        assert "No roles found" in listing.stdout

    def test_permissions_sync(self, roles_file: Path, database_url: str) -> None:
        """Verify undeclared permissions are removed."""
        _invoke("permissions:seed", roles_file, database_url)
        roles_file.write_text(VIEWER_ONLY_YAML)

        result = _invoke("permissions:sync", roles_file, database_url, "--json")

        assert result.exit_code == 0
        assert _report(result.stdout)["permissions"]["deleted"] == 3

    def test_permissions_seed_without_permissions_exits_1(
        self, temp_dir: Path, database_url: str
    ) -> None:
        """Verify a configuration without permissions is a failure."""
        path = temp_dir / "roles.yaml"
        path.write_text("roles:\n  guest:\n    name: Guest\n")

        result = _invoke("permissions:seed", path, database_url)

        assert result.exit_code == 1
        assert "No permissions found" in result.stdout


class TestRoleAssignmentCommands:
    """Tests for warden roles:assign, roles:revoke and roles:list."""

    def test_assign_and_revoke(self, roles_file: Path, database_url: str) -> None:
        """Verify a user can be given a role and have it removed."""
        _invoke("roles:seed", roles_file, database_url)

        assigned = runner.invoke(
            app, ["roles:assign", "42", "admin", "--database-url", database_url]
        )
        assert assigned.exit_code == 0, assigned.stdout

        listing = runner.invoke(
            app, ["roles:list", "--database-url", database_url, "--json"]
        )
        roles = {r["slug"]: r for r in json.loads(listing.stdout.strip().splitlines()[-1])}
        assert roles["admin"]["users"] == 1
        assert roles["admin"]["permissions"] == ["create", "delete", "read", "update"]

        revoked = runner.invoke(app, ["roles:revoke", "42", "--database-url", database_url])
        assert revoked.exit_code == 0
        assert "Removed role" in revoked.stdout

        again = runner.invoke(app, ["roles:revoke", "42", "--database-url", database_url])
        assert again.exit_code == 0
        assert "has no role" in again.stdout

    def test_assign_unknown_role_exits_1(
        self, roles_file: Path, database_url: str
    ) -> None:
        """Verify assigning a missing role fails."""
        _invoke("roles:seed", roles_file, database_url)

        result = runner.invoke(
            app, ["roles:assign", "42", "superhero", "--database-url", database_url]
        )

        assert result.exit_code == 1
        assert "Role [superhero] not found." in result.stdout
