import json
import os
import click
from flask import current_app
from flask.cli import with_appcontext
from flask_migrate import upgrade as alembic_upgrade, stamp as alembic_stamp, migrate as alembic_migrate

from app.services.alerts import evaluate_alerts
from app.utils.jwt import create_access_token


def _assert_safe_for_upgrade():
    # Prevent accidental prod upgrades unless explicitly allowed
    env = (current_app.config.get("ENV") or "").lower()
    app_env = (os.getenv("APP_ENV") or "").lower()
    if app_env == "production" or env == "production":
        if (os.getenv("ALLOW_DB_MIGRATIONS") or "").lower() not in ("1", "true", "yes"):
            raise click.ClickException("Refusing to run DB migration in production without ALLOW_DB_MIGRATIONS=true")


@click.command("db-migrate-safe")
@click.option("-m", "--message", default="auto migration", help="Migration message")
@with_appcontext
def db_migrate_safe(message):
    """Generate a new migration script from current models."""
    alembic_migrate(message=message)
    click.echo("Migration script generated.")


@click.command("db-upgrade-safe")
@with_appcontext
def db_upgrade_safe():
    """Apply migrations to the configured database."""
    _assert_safe_for_upgrade()
    alembic_upgrade()
    click.echo("Database upgraded.")


@click.command("db-stamp-safe")
@click.option("--revision", default="head", help="Revision to stamp, default 'head'")
@with_appcontext
def db_stamp_safe(revision):
    """Mark the database at a given revision without running migrations."""
    _assert_safe_for_upgrade()
    alembic_stamp(revision)
    click.echo(f"Database stamped at {revision}.")


@click.command("issue-token")
@click.argument("owner_id")
@click.option("--minutes", type=int, default=None, help="Token lifetime in minutes")
@with_appcontext
def issue_token(owner_id, minutes):
    """Print a bearer token for a shop account."""
    click.echo(create_access_token(owner_id, minutes=minutes))


@click.command("stock-alerts")
@click.argument("owner_id")
@click.option("--json", "as_json", is_flag=True, help="Print alerts as JSON")
@with_appcontext
def stock_alerts(owner_id, as_json):
    """List items at or below their low-stock limit."""
    alerts = evaluate_alerts(owner_id)
    if as_json:
        click.echo(json.dumps([a.to_dict() for a in alerts]))
        return
    if not alerts:
        click.echo("No stock alerts.")
        return
    for alert in alerts:
        click.echo(f"[{alert.severity}] {alert.message}")


def register_cli(app):
    app.cli.add_command(db_migrate_safe)
    app.cli.add_command(db_upgrade_safe)
    app.cli.add_command(db_stamp_safe)
    app.cli.add_command(issue_token)
    app.cli.add_command(stock_alerts)
