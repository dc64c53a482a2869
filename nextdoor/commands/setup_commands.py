import os

import click
from flask import current_app
from flask.cli import with_appcontext
from flask_migrate import upgrade as alembic_upgrade

from nextdoor.extensions import db

from .seed_commands import seed_postal_sectors


@click.command("setup")
@click.option("--seed/--no-seed", default=True, help="Load postal sectors after the schema is in place")
@with_appcontext
def setup_command(seed: bool):
    """One-shot project setup for fresh systems.

    - Upgrades the schema with Alembic when a migrations directory exists,
      otherwise creates the tables directly
    - Seeds the postal sector table

    Safe to run multiple times; all steps are idempotent.
    """
    engine_name = getattr(db.engine, "name", "").lower()
    current_app.logger.info("setup: starting (engine=%s)", engine_name)

    migrations_dir = os.path.join(current_app.root_path, "..", "migrations")
    try:
        if os.path.isdir(migrations_dir):
            alembic_upgrade(directory=migrations_dir)
            click.echo("✔ Database upgraded to head")
        else:
            db.create_all()
            click.echo("✔ Tables created")
    except Exception as e:
        current_app.logger.exception("setup: schema step failed: %s", e)
        raise click.ClickException(f"Schema setup failed: {e}")

    if seed:
        added = seed_postal_sectors()
        click.echo(f"✔ Postal sectors ready ({added} added)")

    current_app.logger.info("setup: complete")
