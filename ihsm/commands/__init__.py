"""CLI commands for IHSM."""

import click
from flask.cli import with_appcontext

from ihsm.extensions import db

from .seed import seed_commands
from .user import user_commands


@click.command('init-db')
@with_appcontext
def init_db():
    """Create all tables for a fresh database."""
    import ihsm.models  # noqa: F401

    db.create_all()
    click.echo(click.style('Database initialised.', fg='green'))


def register_commands(app):
    """Register all CLI command groups with the Flask app."""
    app.cli.add_command(init_db)
    app.cli.add_command(seed_commands)
    app.cli.add_command(user_commands)
