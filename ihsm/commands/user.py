"""User management CLI commands."""

import click
from flask.cli import with_appcontext

from ihsm.extensions import db
from ihsm.models import MAX_PASSWORD_BYTES, User


def _get_user_by_email(email: str) -> User | None:
    return db.session.query(User).filter(User.email.ilike(email.strip())).first()


def _password_too_long(password: str) -> bool:
    if len(password.encode('utf-8')) > MAX_PASSWORD_BYTES:
        click.echo(click.style(f'Error: Password cannot be longer than {MAX_PASSWORD_BYTES} bytes', fg='red'))
        return True
    return False


@click.group('user')
def user_commands():
    """User management commands."""
    pass


@user_commands.command('create')
@click.option('--email', required=True, help='User email')
@click.option('--password', required=True, help='User password')
@click.option('--name', 'display_name', default=None, help='Display name')
@with_appcontext
def create_user(email, password, display_name):
    """Create an event manager account."""
    if _get_user_by_email(email):
        click.echo(click.style(f'Error: User with email "{email}" already exists', fg='red'))
        return
    if _password_too_long(password):
        return

    user = User(email=email.strip().lower(), display_name=display_name)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()

    click.echo(click.style('User created successfully!', fg='green'))
    click.echo(f'  Email: {user.email}')
    click.echo(f'  Id: {user.id}')


@user_commands.command('set-password')
@click.option('--email', required=True, help='User email')
@click.option('--password', required=True, help='New password')
@with_appcontext
def set_password(email, password):
    """Set or reset a user's password."""
    user = _get_user_by_email(email)
    if not user:
        click.echo(click.style(f'Error: No user {email} found', fg='red'))
        return
    if _password_too_long(password):
        return

    user.set_password(password)
    db.session.commit()
    click.echo(click.style('Password updated.', fg='green'))
