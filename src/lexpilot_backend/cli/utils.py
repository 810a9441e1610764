import click
from functools import wraps
from lexpilot_backend.repositories.base import RepositoryError

database_url_option = click.option(
    "--database-url",
    "database_url",
    envvar="DATABASE_URL",
    default=None,
    help="Database to operate on (defaults to the configured database)",
)


def handle_repository_errors(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except RepositoryError as e:
            click.echo(f"[{click.style(type(e).__name__, fg='red')}] {e}")
            raise SystemExit(1)

    return wrapper
