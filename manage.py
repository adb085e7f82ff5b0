#!/usr/bin/env python3
"""
PharmaPOS management CLI.

Usage:
    python manage.py start       Start server (migrates on startup)
    python manage.py stop        Graceful shutdown
    python manage.py restart     Stop + start
    python manage.py dev         Server with auto-reload (foreground)
    python manage.py status      Check if server is running
    python manage.py migrate     Apply pending schema migrations
    python manage.py migrate-status  Show applied and pending migrations
    python manage.py verify      Run integrity and required-table checks
"""

import argparse
import asyncio
import os
import signal
import socket
import subprocess
import sys
import time
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent
PID_FILE = ROOT_DIR / ".pharmapos.pid"
APP_PATH = "pharmapos.api.main:app"


def _read_pid() -> int | None:
    """Read PID from .pharmapos.pid, return None if missing or stale."""
    if not PID_FILE.exists():
        return None
    try:
        pid = int(PID_FILE.read_text().strip())
    except (ValueError, OSError):
        return None
    if _is_pid_alive(pid):
        return pid
    # Stale PID file
    PID_FILE.unlink(missing_ok=True)
    return None


def _is_pid_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
        return True
    except OSError:
        return False


def _is_port_free(port: int) -> bool:
    """Check if a port is available for binding."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind(("127.0.0.1", port))
        return True
    except OSError:
        return False


def _uvicorn_cmd(args: argparse.Namespace, reload: bool = False) -> list[str]:
    # One worker only: stock updates are serialized by an in-process lock
    cmd = [
        sys.executable, "-m", "uvicorn",
        APP_PATH,
        "--host", args.host,
        "--port", str(args.port),
    ]
    if reload:
        cmd.append("--reload")
    return cmd


def cmd_migrate(args: argparse.Namespace) -> None:
    """Apply pending migrations."""
    from pharmapos.infrastructure.storage.sqlite.migrations.migrator import run_migrations

    results = asyncio.run(run_migrations(create_backup_before=not args.no_backup))
    if not results:
        print("Database is up to date.")
        return
    for result in results:
        state = "ok" if result.success else f"FAILED: {result.error}"
        print(f"  v{result.version}: {state}")
    if not all(r.success for r in results):
        sys.exit(1)


def cmd_migrate_status(args: argparse.Namespace) -> None:
    """Print applied and pending migration versions."""
    from pharmapos.infrastructure.storage.sqlite.migrations.migrator import get_migration_status

    status = asyncio.run(get_migration_status())
    if not status["exists"]:
        print("No database yet. Run 'migrate' or start the server.")
    print(f"Current version: {status['current_version'] or 'N/A'}")
    print(f"Applied: {', '.join(status['applied_migrations']) or 'none'}")
    print(f"Pending: {', '.join(status['pending_migrations']) or 'none'}")


def cmd_verify(args: argparse.Namespace) -> None:
    """Report schema check results."""
    from pharmapos.infrastructure.storage.sqlite.migrations.migrator import (
        verify_schema_integrity,
    )

    checks = asyncio.run(verify_schema_integrity())
    for check in checks:
        print(f"[{check['status']}] {check['check']}")
    if any(c["status"] != "PASS" for c in checks):
        sys.exit(1)


def cmd_start(args: argparse.Namespace) -> None:
    """Migrate and start the server in the background."""
    existing_pid = _read_pid()
    if existing_pid is not None:
        print(f"Server already running (PID {existing_pid}). Use 'restart' or 'stop' first.")
        sys.exit(1)

    if not _is_port_free(args.port):
        print(f"Error: Port {args.port} is in use.")
        sys.exit(1)

    print(f"Starting server on {args.host}:{args.port}...")
    proc = subprocess.Popen(_uvicorn_cmd(args), cwd=str(ROOT_DIR))
    PID_FILE.write_text(str(proc.pid))

    print(f"Server started (PID {proc.pid}).")
    print(f"  API:      http://{args.host}:{args.port}/api")
    print(f"  PID file: {PID_FILE}")


def cmd_stop(args: argparse.Namespace) -> None:
    """Stop the running server."""
    pid = _read_pid()
    if pid is None:
        print("Server is not running.")
        return

    print(f"Stopping server (PID {pid})...")
    try:
        os.kill(pid, signal.SIGTERM)
    except OSError:
        pass
    for _ in range(30):
        if not _is_pid_alive(pid):
            break
        time.sleep(0.1)
    else:
        print("Warning: Process did not exit within 3 seconds.")

    PID_FILE.unlink(missing_ok=True)
    print("Server stopped." if not _is_pid_alive(pid) else "Warning: Server may still be running.")


def cmd_restart(args: argparse.Namespace) -> None:
    """Stop then start the server."""
    cmd_stop(args)
    deadline = time.monotonic() + 5.0
    while not _is_port_free(args.port) and time.monotonic() < deadline:
        time.sleep(0.25)
    cmd_start(args)


def cmd_dev(args: argparse.Namespace) -> None:
    """Run the server in the foreground with auto-reload."""
    print(f"Starting server on {args.host}:{args.port} (reload mode)...")
    try:
        subprocess.run(_uvicorn_cmd(args, reload=True), cwd=str(ROOT_DIR))
    except KeyboardInterrupt:
        print("\nServer stopped.")


def cmd_status(args: argparse.Namespace) -> None:
    """Check if the server is running."""
    pid = _read_pid()
    if pid is not None:
        print(f"Server is running (PID {pid}).")
    elif not _is_port_free(args.port):
        print(f"No PID file. Port {args.port} is in use by another process.")
    else:
        print(f"Server is not running (port {args.port} is free).")


def _add_bind_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="PharmaPOS management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_start = sub.add_parser("start", help="Start server in the background")
    _add_bind_args(p_start)
    p_start.set_defaults(func=cmd_start)

    p_stop = sub.add_parser("stop", help="Stop the server")
    p_stop.set_defaults(func=cmd_stop)

    p_restart = sub.add_parser("restart", help="Restart the server")
    _add_bind_args(p_restart)
    p_restart.set_defaults(func=cmd_restart)

    p_dev = sub.add_parser("dev", help="Run server with auto-reload")
    _add_bind_args(p_dev)
    p_dev.set_defaults(func=cmd_dev)

    p_status = sub.add_parser("status", help="Check if server is running")
    p_status.add_argument("--port", type=int, default=8000, help="Port to check (default: 8000)")
    p_status.set_defaults(func=cmd_status)

    p_migrate = sub.add_parser("migrate", help="Apply pending schema migrations")
    p_migrate.add_argument("--no-backup", action="store_true", help="Skip the pre-migration backup")
    p_migrate.set_defaults(func=cmd_migrate)

    p_mstatus = sub.add_parser("migrate-status", help="Show applied and pending migrations")
    p_mstatus.set_defaults(func=cmd_migrate_status)

    p_verify = sub.add_parser("verify", help="Check schema integrity")
    p_verify.set_defaults(func=cmd_verify)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
