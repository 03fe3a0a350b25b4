#!/usr/bin/env python3
"""
Diary Operations CLI.

Runs and inspects the diary backend: the API server, the database schema
and the accounts and notes stored in it. The diary itself is tui.py.

Usage:
    python cli.py --help
    python cli.py --service server --reload
    python cli.py --service server --action status
    python cli.py --service health
    python cli.py --service stats --top 3
    python cli.py --service migrate --migrate-action upgrade
"""

import asyncio
import os
import signal
import subprocess
import sys
from pathlib import Path

import click
import httpx
import structlog
from rich.console import Console
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from diary.backend.core.logging import get_logger, setup_logging

ALEMBIC_INI = PROJECT_ROOT / "diary" / "backend" / "migrations" / "alembic.ini"

console = Console()


def validate_project_root() -> Path:
    """Validate that we're running from the project root."""
    if not (PROJECT_ROOT / ".project_root").exists():
        click.echo(
            click.style("Error: .project_root not found. Run from project root.", fg="red"),
            err=True,
        )
        sys.exit(1)
    return PROJECT_ROOT


def _find_process_on_port(port: int) -> list[int]:
    """Find PIDs listening on a port."""
    result = subprocess.run(
        ["lsof", "-ti", f":{port}"],
        capture_output=True, text=True,
    )
    return [int(p) for p in result.stdout.split() if p.strip()]


def migration_head() -> str | None:
    """Newest revision shipped under diary/backend/migrations/versions."""
    from alembic.config import Config
    from alembic.script import ScriptDirectory

    return ScriptDirectory.from_config(Config(str(ALEMBIC_INI))).get_current_head()


async def database_report(top: int = 5) -> dict:
    """
    Read schema revision and row counts from the configured database.

    Raises:
        SQLAlchemyError: Tables missing or query failed
        OSError: Database server unreachable
    """
    from diary.backend.core.database import Database
    from diary.backend.repositories.note import NoteRepository
    from diary.backend.repositories.user import UserRepository

    database = Database.from_config()
    try:
        revision = await database.schema_revision()
        async with database.session() as session:
            notes = NoteRepository(session)
            return {
                "revision": revision,
                "users": await UserRepository(session).count(),
                "notes": await notes.count(),
                "writers": await notes.count_by_owner(limit=top),
            }
    finally:
        await database.dispose()


def describe_schema(revision: str | None, head: str | None, tables_on_startup: bool) -> tuple[bool, str]:
    """Judge whether the stamped revision matches the shipped migrations."""
    if revision == head:
        return True, f"at revision {head}"
    if revision is None and tables_on_startup:
        return True, "unstamped, tables created at startup"
    if revision is None:
        return False, f"not migrated (head is {head})"
    return False, f"at revision {revision}, head is {head}"


@click.command()
@click.option(
    "--service", "-s",
    type=click.Choice(["info", "server", "health", "stats", "config", "migrate"]),
    default="info",
    help="Service or command to run.",
)
@click.option(
    "--action", "-a",
    type=click.Choice(["start", "stop", "status"]),
    default="start",
    help="Lifecycle action for the server.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output (INFO level logging).")
@click.option("--debug", "-d", is_flag=True, help="Enable debug output (DEBUG level logging).")
@click.option("--host", default=None, help="Server host.")
@click.option("--port", default=None, type=int, help="Server port.")
@click.option("--reload", is_flag=True, help="Enable auto-reload (server only).")
@click.option("--top", default=5, type=click.IntRange(min=1), help="Writers listed by stats.")
@click.option(
    "--migrate-action",
    type=click.Choice(["upgrade", "downgrade", "current", "history"]),
    default="current",
    help="Migration action.",
)
@click.option("--revision", default="head", help="Target revision for upgrade/downgrade.")
def main(
    service: str,
    action: str,
    verbose: bool,
    debug: bool,
    host: str | None,
    port: int | None,
    reload: bool,
    top: int,
    migrate_action: str,
    revision: str,
) -> None:
    """
    Diary Operations CLI.

    \b
    Examples:
        python cli.py --service server --reload
        python cli.py --service server --action stop
        python cli.py --service health
        python cli.py --service stats --top 3
        python cli.py --service migrate --migrate-action upgrade
        python cli.py --service migrate --migrate-action downgrade --revision base
    """
    validate_project_root()

    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    setup_logging(level=log_level, format_type="console")
    structlog.contextvars.bind_contextvars(source="cli")
    logger = get_logger(__name__)
    logger.debug("CLI invoked", extra={"service": service, "action": action})

    if service == "server":
        manage_server(logger, action, host, port, reload)
    elif service == "health":
        check_health(logger)
    elif service == "stats":
        show_stats(logger, top)
    elif service == "config":
        show_config(logger)
    elif service == "migrate":
        run_migrations(logger, migrate_action, revision)
    else:
        show_info()


def manage_server(logger, action: str, host: str | None, port: int | None, reload: bool) -> None:
    """Start the API under uvicorn, or stop/report the process on its port."""
    from diary.backend.core.config import get_app_config

    server_config = get_app_config().application.server
    server_host = host or server_config.host
    server_port = port or server_config.port

    if action != "start":
        pids = _find_process_on_port(server_port)
        listed = ", ".join(str(p) for p in pids)
        if not pids:
            click.echo(f"Server is not running on port {server_port}.")
        elif action == "status":
            click.echo(f"Server is running on port {server_port} (PID: {listed}).")
        else:
            for pid in pids:
                os.kill(pid, signal.SIGINT)
                logger.info("Sent SIGINT", extra={"pid": pid, "port": server_port})
            click.echo(f"Server on port {server_port} stopped (PID: {listed}).")
        return

    cmd = [
        sys.executable, "-m", "uvicorn",
        "diary.backend.main:app",
        "--host", server_host,
        "--port", str(server_port),
    ]
    if reload:
        cmd.append("--reload")

    logger.info("Starting server", extra={"host": server_host, "port": server_port, "reload": reload})
    click.echo(f"Diary API at http://{server_host}:{server_port}  (Ctrl+C to stop)")

    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        logger.info("Server stopped")
    except subprocess.CalledProcessError as e:
        logger.error("Server failed to start", extra={"exit_code": e.returncode})
        sys.exit(e.returncode)


def check_health(logger) -> None:
    """Check configuration, startup security, database schema and a running server."""
    from diary.backend.core.config import get_app_config, get_server_base_url, get_settings
    from diary.backend.core.startup_checks import StartupSecurityError, run_startup_checks

    app_config = get_app_config()
    checks: list[tuple[str, bool, str]] = [
        ("Configuration", True, f"{app_config.application.name} ({app_config.application.environment})"),
    ]

    try:
        run_startup_checks()
        detail = "development secret" if get_settings().uses_insecure_jwt_secret else "passed"
        checks.append(("Startup security", True, detail))
    except StartupSecurityError as e:
        checks.append(("Startup security", False, str(e).splitlines()[0]))

    try:
        report = asyncio.run(database_report())
        checks.append(("Database", True, f"{report['users']} users, {report['notes']} notes"))
        checks.append(("Schema", *describe_schema(
            report["revision"],
            migration_head(),
            app_config.database.create_tables_on_startup,
        )))
    except (SQLAlchemyError, OSError) as e:
        logger.debug("Database check failed", extra={"error": str(e)})
        checks.append(("Database", False, type(e).__name__))

    base_url, timeout = get_server_base_url()
    try:
        response = httpx.get(f"{base_url}/health/ready", timeout=timeout)
        checks.append(("Running server", response.status_code == 200, f"{base_url} -> {response.status_code}"))
    except httpx.HTTPError as e:
        checks.append(("Running server", False, f"{base_url} not reachable ({type(e).__name__})"))

    table = Table(title="Diary Health", show_header=True)
    table.add_column("Check", style="cyan")
    table.add_column("Status")
    table.add_column("Details")
    for name, passed, detail in checks:
        table.add_row(name, "[green]PASS[/green]" if passed else "[red]FAIL[/red]", detail)
    console.print(table)

    failed = [name for name, passed, _ in checks if not passed]
    if failed:
        logger.warning("Health checks failed", extra={"failed": failed})
        console.print(f"[yellow]Failing: {', '.join(failed)}[/yellow]")
        sys.exit(1)
    console.print("[green]All checks passed[/green]")


def show_stats(logger, top: int) -> None:
    """Report how many users and notes the database holds."""
    try:
        report = asyncio.run(database_report(top))
    except (SQLAlchemyError, OSError) as e:
        logger.error("Could not read diary database", extra={"error": str(e)})
        click.echo(
            click.style("Error: database not readable. Try --service migrate --migrate-action upgrade.", fg="red"),
            err=True,
        )
        sys.exit(1)

    console.print(f"Users: {report['users']}")
    console.print(f"Notes: {report['notes']}")

    if not report["writers"]:
        console.print("[dim]No notes written yet.[/dim]")
        return

    table = Table(title=f"Top {top} writers")
    table.add_column("Email", style="cyan")
    table.add_column("Notes", justify="right")
    for email, count in report["writers"]:
        table.add_row(email, str(count))
    console.print(table)


def show_config(logger) -> None:
    """Display loaded YAML configuration. Secrets come from the environment and are never printed."""
    from diary.backend.core.config import get_app_config

    app_config = get_app_config()
    for title, section in (
        ("application", app_config.application),
        ("database", app_config.database),
        ("logging", app_config.logging),
        ("features", app_config.features),
        ("security", app_config.security),
    ):
        table = Table(title=f"{title}.yaml", show_header=False)
        table.add_column("Key", style="cyan")
        table.add_column("Value")
        for key, value in section.model_dump().items():
            table.add_row(key, str(value))
        console.print(table)

    logger.debug("Configuration displayed")


def run_migrations(logger, migrate_action: str, revision: str) -> None:
    """Inspect or move the database schema with Alembic."""
    if migrate_action == "current":
        try:
            current = asyncio.run(database_report())["revision"]
        except (SQLAlchemyError, OSError):
            current = None
        click.echo(f"Database revision: {current or 'none'}")
        click.echo(f"Latest migration: {migration_head()}")
        return

    cmd = [sys.executable, "-m", "alembic", "-c", str(ALEMBIC_INI)]
    if migrate_action == "history":
        cmd.extend(["history", "--verbose"])
    else:
        cmd.extend([migrate_action, revision])
        click.echo(f"{migrate_action.capitalize()} database to revision: {revision}")

    logger.info("Running migrations", extra={"action": migrate_action, "revision": revision})
    result = subprocess.run(cmd, cwd=PROJECT_ROOT)
    if result.returncode != 0:
        logger.error("Migration failed", extra={"exit_code": result.returncode})
        sys.exit(result.returncode)


def show_info() -> None:
    """Display application information."""
    from diary.backend.core.config import get_app_config

    app = get_app_config().application
    click.echo(f"Name: {app.name} {app.version}")
    click.echo(f"Environment: {app.environment}")
    click.echo(f"API: http://{app.server.host}:{app.server.port}{app.api_prefix}")
    click.echo(f"Latest migration: {migration_head()}")
    click.echo()
    click.echo("Services (--service): info, server, health, stats, config, migrate")
    click.echo("Server actions (--action): start, stop, status")
    click.echo()
    click.echo("Terminal diary: python tui.py")


if __name__ == "__main__":
    main()
