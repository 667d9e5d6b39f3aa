#!/usr/bin/env python3
"""
Apply SQL migrations to the Supabase Postgres database.

Files in migrations/ run in name order, each inside its own transaction,
and are recorded in a tracking table together with a checksum so edited
migrations can be spotted.

Usage:
    python run_migrations.py             # Apply pending migrations
    python run_migrations.py --status    # Show applied and pending migrations
    python run_migrations.py --dry-run   # List what would be applied

Configuration:
    SUPABASE_DB_URL=postgresql://postgres.[project-ref]:[password]@[host]:6543/postgres
"""

import argparse
import hashlib
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

import psycopg2
from psycopg2 import sql
from rich.console import Console
from rich.table import Table

from shared.config import get_settings

console = Console()

MIGRATIONS_DIR = Path(__file__).parent / "migrations"
TRACKING_TABLE = "schema_migrations"


@dataclass
class Migration:
    """A migration file on disk and, once applied, when that happened."""

    name: str
    path: Path
    checksum: str
    applied_at: Optional[datetime] = None
    applied_checksum: Optional[str] = None

    @property
    def is_applied(self) -> bool:
        return self.applied_at is not None

    @property
    def is_modified(self) -> bool:
        return self.is_applied and self.applied_checksum != self.checksum


def checksum_of(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()[:16]


def connect():
    settings = get_settings()
    if not settings.supabase_db_url:
        console.print("[red]Error:[/red] SUPABASE_DB_URL is not set.")
        console.print("Find it under Project Settings → Database → Connection string.")
        sys.exit(1)

    try:
        return psycopg2.connect(settings.supabase_db_url)
    except psycopg2.Error as e:
        console.print(f"[red]Database connection failed:[/red] {e}")
        sys.exit(1)


def ensure_tracking_table(conn) -> None:
    with conn.cursor() as cur:
        cur.execute(
            sql.SQL(
                "CREATE TABLE IF NOT EXISTS {} ("
                " name TEXT PRIMARY KEY,"
                " checksum TEXT NOT NULL,"
                " applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW())"
            ).format(sql.Identifier(TRACKING_TABLE))
        )
    conn.commit()


def load_migrations(conn) -> list[Migration]:
    """All migration files, annotated with their applied state."""
    with conn.cursor() as cur:
        cur.execute(
            sql.SQL("SELECT name, checksum, applied_at FROM {}").format(
                sql.Identifier(TRACKING_TABLE)
            )
        )
        applied = {name: (checksum, applied_at) for name, checksum, applied_at in cur.fetchall()}

    migrations = []
    for path in sorted(MIGRATIONS_DIR.glob("*.sql")):
        migration = Migration(name=path.name, path=path, checksum=checksum_of(path))
        if path.name in applied:
            migration.applied_checksum, migration.applied_at = applied[path.name]
        migrations.append(migration)
    return migrations


def apply(conn, migration: Migration) -> None:
    console.print(f"[blue]Applying[/blue] {migration.name}")
    try:
        with conn.cursor() as cur:
            cur.execute(migration.path.read_text())
            cur.execute(
                sql.SQL("INSERT INTO {} (name, checksum) VALUES (%s, %s)").format(
                    sql.Identifier(TRACKING_TABLE)
                ),
                (migration.name, migration.checksum),
            )
        conn.commit()
    except psycopg2.Error as e:
        conn.rollback()
        console.print(f"[red]✗[/red] {migration.name}: {e}")
        raise
    console.print(f"[green]✓[/green] {migration.name}")


def print_status(migrations: list[Migration]) -> None:
    if not migrations:
        console.print("[dim]No migrations found.[/dim]")
        return

    table = Table(title="Migrations")
    table.add_column("Name", style="cyan")
    table.add_column("State")
    table.add_column("Applied at")
    table.add_column("Checksum")

    for m in migrations:
        if m.is_modified:
            state = "[yellow]Modified[/yellow]"
        elif m.is_applied:
            state = "[green]Applied[/green]"
        else:
            state = "[yellow]Pending[/yellow]"
        applied_at = m.applied_at.strftime("%Y-%m-%d %H:%M:%S") if m.applied_at else ""
        table.add_row(m.name, state, applied_at, m.checksum)

    console.print(table)


def main():
    parser = argparse.ArgumentParser(description="Apply Hackboard database migrations")
    parser.add_argument("--status", action="store_true", help="Show migration state and exit")
    parser.add_argument("--dry-run", action="store_true", help="List pending migrations only")
    args = parser.parse_args()

    conn = connect()
    try:
        ensure_tracking_table(conn)
        migrations = load_migrations(conn)

        if args.status:
            print_status(migrations)
            return

        for m in migrations:
            if m.is_modified:
                console.print(f"[yellow]Warning:[/yellow] {m.name} changed after it was applied")

        pending = [m for m in migrations if not m.is_applied]
        if not pending:
            console.print("[green]Database is up to date.[/green]")
            return

        for m in pending:
            if args.dry_run:
                console.print(f"[cyan]Would apply[/cyan] {m.name}")
            else:
                apply(conn, m)
    finally:
        conn.close()


if __name__ == "__main__":
    main()
