# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/estoque_facil/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Use: flask --app wsgi <group> <command> [options]
#
# System bootstrap/repair:
# - flask --app wsgi system init
#   Idempotent bootstrap: creates tables, default settings, and promotes the
#   first registered account to administrator if no admin exists.
# - flask --app wsgi system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection:
# - flask --app wsgi users list
#   List all accounts with admin/approval/block state.
# - flask --app wsgi users approve <username>
#   Approve a pending account without going through the API.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User
from .services import account_service, settings_service
from .validation import NotFoundError


def bootstrap_database() -> User | None:
    """Create tables, default settings and the first admin. Safe to re-run."""
    db.create_all()
    settings_service.ensure_default_settings()
    return account_service.ensure_first_admin()


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize the database.

    Creates:
    - All tables (if missing)
    - Default settings (profitMargin = 0.5)
    - Administrator: the earliest registered account, if no admin exists yet
    """
    click.echo("START Initializing Estoque Fácil...")

    bootstrap_database()
    click.echo("PASS Tables and default settings ready")

    admin = db.session.query(User).filter(User.is_admin.is_(True)).order_by(User.created_at.asc()).first()
    if admin:
        click.echo(f"PASS Administrator: {admin.username}")
    else:
        click.echo("WARN No accounts yet. The first account to register becomes administrator.")

    click.echo("DONE")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()
    settings_service.ensure_default_settings()

    click.echo("PASS Database reset complete.")


@click.group('users')
def users_group():
    """User inspection and approval commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    """List all accounts, newest first."""
    users = account_service.list_all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*100)
    click.echo(f"{'Username':<20} {'Nome':<30} {'Doc':<6} {'Admin':<7} {'Approved':<10} {'Blocked'}")
    click.echo("="*100)

    for user in users:
        admin_str = "Yes" if user.is_admin else "No"
        approved_str = "Yes" if user.is_approved else "No"
        blocked_str = f"Yes ({user.block_reason})" if user.is_blocked and user.block_reason else (
            "Yes" if user.is_blocked else "No"
        )
        click.echo(
            f"{user.username:<20} {user.full_name[:30]:<30} {user.document_type:<6} "
            f"{admin_str:<7} {approved_str:<10} {blocked_str}"
        )

    click.echo("="*100 + "\n")


@users_group.command('approve')
@click.argument('username')
@with_appcontext
def approve_user_cli(username):
    """Approve a pending account. The first administrator is recorded as approver."""
    user = db.session.query(User).filter_by(username=username).first()
    if not user:
        click.echo(f"FAIL User '{username}' not found")
        return

    admin = db.session.query(User).filter(User.is_admin.is_(True)).order_by(User.created_at.asc()).first()

    try:
        account_service.approve_user(admin.id if admin else None, user.id)
    except NotFoundError as e:
        click.echo(f"FAIL {e}")
        return

    click.echo(f"PASS Approved '{username}'")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
