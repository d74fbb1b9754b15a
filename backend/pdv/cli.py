# Overview: Flask CLI command groups for bootstrap and inspection.

# backend/pdv/cli.py
# Commands Legend (run from the backend directory):
# - flask --app pdv system init-db
#   Create all tables (idempotent).
# - flask --app pdv system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - flask --app pdv users create --name "Admin" --login admin --password "Password123!" --role ADMIN
#   Create a user (prompts if options are omitted). The only way to create ADMIN accounts.
# - flask --app pdv users list [--inactive]
#   List users with role and active status.

import click
from flask.cli import with_appcontext

from .errors import ServiceError
from .extensions import db
from .models import ROLES
from .services import user_service


@click.group('system')
def system_group():
    """Database bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Confirm destructive reset')
@with_appcontext
def reset_db(yes):
    """Drop and recreate every table."""
    if not yes:
        click.echo("FAIL Refusing to reset without --yes")
        raise SystemExit(1)
    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset")


@click.group('users')
def users_group():
    """Staff account commands."""


@users_group.command('create')
@click.option('--name', prompt=True, help='Display name')
@click.option('--login', prompt=True, help='Login')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(ROLES, case_sensitive=False), default='SELLER', show_default=True)
@with_appcontext
def create_user_cmd(name, login, password, role):
    """Create a user (ADMIN allowed here only)."""
    try:
        user = user_service.create_user(name, login, password, role.upper(), allow_admin=True)
    except ServiceError as e:
        click.echo(f"FAIL {e.message}")
        raise SystemExit(1)
    click.echo(f"PASS Created user {user.login} (ID: {user.id}, role: {user.role})")


@users_group.command('list')
@click.option('--inactive', is_flag=True, help='List voided users instead of active ones')
@with_appcontext
def list_users_cmd(inactive):
    """List users."""
    result = user_service.list_users(active=not inactive)
    if not result["items"]:
        click.echo("No users found")
        return
    for user in result["items"]:
        state = "voided" if user["voided_at"] else "active"
        click.echo(f"{user['id']:>4}  {user['login']:<20} {user['role']:<8} {state}  {user['name']}")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
