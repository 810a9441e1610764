import click

from lexpilot_backend.settings import configure_logging
from .roles import roles
from .routes import routes
from .access import access

@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL")
def cli(log_level):
    configure_logging(log_level)

cli.add_command(roles, "roles")
cli.add_command(routes, "routes")
cli.add_command(access, "access")

if __name__ == '__main__':
    cli()
