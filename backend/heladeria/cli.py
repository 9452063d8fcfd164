# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/heladeria/cli.py
# Commands Legend (run from the repository root):
# Prereqs:
# - Activate your virtualenv and `pip install -e .`.
# - Set FLASK_APP (PowerShell: $env:FLASK_APP="heladeria:create_app").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent bootstrap: creates tables and seeds the default flavor catalog.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Catalog:
# - python -m flask catalog list
#   List flavors with price and catalog-level active flag.
# - python -m flask catalog seed [--price 12.00]
#   Insert any missing default flavors.
#
# Stores:
# - python -m flask stores show puesto2
#   Show every flavor and whether it is active at the store (bootstraps derived stores).
# - python -m flask stores copy puesto puesto3
#   Add the source store's assignments that the target lacks.
#
# Orders:
# - python -m flask orders list --limit 10 [--asc] [--legacy]
#   Print recent orders; --legacy parses items out of ticket-only orders.

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .services import get_services
from .validation import ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create tables and seed the default flavor catalog."""
    click.echo("START Initializing database...")
    db.create_all()
    created = get_services().catalog.seed_defaults(price=current_app.config["DEFAULT_FLAVOR_PRICE"])
    click.echo(f"PASS Schema ready; {created} default flavors added.")


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

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to seed the catalog.")


@click.group('catalog')
def catalog_group():
    """Flavor catalog commands."""


@catalog_group.command('list')
@with_appcontext
def list_flavors_cli():
    """List all flavors."""
    flavors = get_services().catalog.list_flavors()
    if not flavors:
        click.echo("No flavors found.")
        return

    click.echo("\n" + "=" * 70)
    click.echo(f"{'ID':<5} {'Name':<40} {'Price':>10} {'Active':>8}")
    click.echo("=" * 70)
    for flavor in flavors:
        active_str = "Yes" if flavor.active else "No"
        click.echo(f"{flavor.id:<5} {flavor.name:<40} {flavor.price_cents / 100:>10.2f} {active_str:>8}")
    click.echo("=" * 70 + "\n")


@catalog_group.command('seed')
@click.option('--price', default=None, help='Price for newly seeded flavors (defaults to DEFAULT_FLAVOR_PRICE)')
@with_appcontext
def seed_flavors_cli(price):
    """Insert any missing default flavors."""
    try:
        created = get_services().catalog.seed_defaults(price=price or current_app.config["DEFAULT_FLAVOR_PRICE"])
    except ValidationError as exc:
        raise click.BadParameter(str(exc), param_hint="--price")
    click.echo(f"PASS {created} default flavors added.")


@click.group('stores')
def stores_group():
    """Per-store flavor activation commands."""


@stores_group.command('show')
@click.argument('store')
@with_appcontext
def show_store_cli(store):
    """Show every flavor and whether it is active at STORE."""
    rows = get_services().store_flavors.get_active_flavors(store)
    active = [row for row in rows if row["store_active"]]

    click.echo(f"\nStore {store}: {len(active)} of {len(rows)} flavors active")
    click.echo("-" * 50)
    for row in rows:
        marker = "[x]" if row["store_active"] else "[ ]"
        click.echo(f"{marker} {row['name']}")
    click.echo("-" * 50 + "\n")


@stores_group.command('copy')
@click.argument('source')
@click.argument('target')
@with_appcontext
def copy_store_cli(source, target):
    """Add SOURCE's flavor assignments that TARGET lacks."""
    try:
        copied = get_services().store_flavors.copy_assignments(source, target)
    except ValidationError as exc:
        raise click.UsageError(str(exc))
    click.echo(f"PASS Copied {copied} assignments from {source} to {target}.")


@click.group('orders')
def orders_group():
    """Order inspection commands."""


@orders_group.command('list')
@click.option('--limit', type=int, default=20, show_default=True)
@click.option('--asc', is_flag=True, help='Oldest first')
@click.option('--legacy', is_flag=True, help='Parse items from ticket-only orders')
@with_appcontext
def list_orders_cli(limit, asc, legacy):
    """Print recent orders with their items."""
    orders = get_services().orders.list_orders(
        limit=limit,
        direction="ASC" if asc else "DESC",
        legacy_tickets=legacy,
    )
    if not orders:
        click.echo("No orders found.")
        return

    for order in orders:
        store = order["store"] or "-"
        click.echo(f"#{order['id']:<6} {order['timestamp']}  store={store}  total={order['total']:.2f}")
        for item in order["items"]:
            click.echo(f"        {item['quantity']} x {item['flavor']} @ {item['price']:.2f}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(catalog_group)
    app.cli.add_command(stores_group)
    app.cli.add_command(orders_group)
