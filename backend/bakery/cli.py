# Overview: Flask CLI command groups for bootstrap, staff accounts, and developer maintenance.

# backend/bakery/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create tables and the default Manager and Developer accounts (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Staff accounts:
# - python -m flask staff list [--role "Delivery Staff"]
#   List staff members with role and active status.
# - python -m flask staff create --name "Ada" --role "Storekeeper" --password "bread1234"
#   Create a staff member (prompts if options are omitted).
#
# Developer maintenance (bypasses the normal workflows):
# - python -m flask dev reset-run <run_id>
#   Delete a run's orders and confirmations, reverse customer balances, reactivate it.
# - python -m flask dev remove-stock <staff_id> <product_id> <quantity>
#   Unchecked decrement of a staff member's personal stock.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Staff
from .models.staff import ROLE_DEVELOPER, ROLE_MANAGER, VALID_ROLES
from .services import transfer_service
from .services.auth_service import create_staff
from .services.errors import ValidationError


DEFAULT_PASSWORD = "bakery1234"


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Create tables and default accounts.

    Creates:
    - Manager account "manager" / bakery1234
    - Developer account "developer" / bakery1234

    SECURITY: Change passwords immediately in production!
    """
    click.echo("START Initializing bakery back-office...")
    db.create_all()

    default_accounts = [
        ("manager", "Manager", ROLE_MANAGER),
        ("developer", "Developer", ROLE_DEVELOPER),
    ]
    for staff_id, name, role in default_accounts:
        if db.session.get(Staff, staff_id):
            click.echo(f"WARN  Staff '{staff_id}' already exists, skipping...")
            continue
        try:
            create_staff(name=name, role=role, password=DEFAULT_PASSWORD, staff_id=staff_id)
            click.echo(f"PASS Created {role} account: {staff_id}")
        except ValidationError as e:
            db.session.rollback()
            click.echo(f"FAIL Failed to create '{staff_id}': {e}")

    click.echo("\nDefault Credentials (CHANGE IN PRODUCTION!):")
    click.echo(f"   manager   / {DEFAULT_PASSWORD}")
    click.echo(f"   developer / {DEFAULT_PASSWORD}")


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

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


# =============================================================================
# STAFF COMMANDS
# =============================================================================

@click.group('staff')
def staff_group():
    """Staff account commands."""


@staff_group.command('list')
@click.option('--role', help='Filter by role')
@with_appcontext
def list_staff(role):
    """List all staff members."""
    query = db.session.query(Staff)
    if role:
        query = query.filter_by(role=role)
    staff_members = query.order_by(Staff.name).all()

    if not staff_members:
        click.echo("No staff found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'Staff ID':<12} {'Name':<30} {'Role':<18} {'Active'}")
    click.echo("="*80)
    for staff in staff_members:
        active_str = "Yes" if staff.is_active else "No"
        click.echo(f"{staff.staff_id:<12} {staff.name:<30} {staff.role:<18} {active_str}")
    click.echo("="*80 + "\n")


@staff_group.command('create')
@click.option('--name', prompt=True, help='Full name')
@click.option('--role', prompt=True, type=click.Choice(VALID_ROLES), help='Role')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--email', default=None, help='Email (optional)')
@click.option('--staff-id', default=None, help='Staff ID (random if omitted)')
@with_appcontext
def create_staff_cli(name, role, password, email, staff_id):
    """Create a staff member."""
    try:
        staff = create_staff(name=name, role=role, password=password, email=email, staff_id=staff_id)
    except ValidationError as e:
        db.session.rollback()
        click.echo(f"FAIL {e}")
        return
    click.echo(f"PASS Created {staff.role} '{staff.name}' with staff ID {staff.staff_id}")


# =============================================================================
# DEVELOPER COMMANDS
# =============================================================================

@click.group('dev')
def dev_group():
    """Developer maintenance commands."""


@dev_group.command('reset-run')
@click.argument('run_id')
@with_appcontext
def reset_run(run_id):
    """Reset a sales run to active and delete its sales activity."""
    result = transfer_service.reset_sales_run(run_id)
    if not result.success:
        click.echo(f"FAIL {result.error}")
        return
    click.echo(
        f"PASS Run {run_id} reset: {result['deletedOrders']} orders, "
        f"{result['deletedConfirmations']} confirmations deleted"
    )


@dev_group.command('remove-stock')
@click.argument('staff_id')
@click.argument('product_id')
@click.argument('quantity', type=int)
@with_appcontext
def remove_stock(staff_id, product_id, quantity):
    """Decrement a staff member's personal stock without checks."""
    result = transfer_service.remove_stock_from_staff(staff_id, product_id, quantity)
    if not result.success:
        click.echo(f"FAIL {result.error}")
        return
    click.echo(f"PASS {staff_id} now holds {result['stock']} of {product_id}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(staff_group)
    app.cli.add_command(dev_group)
