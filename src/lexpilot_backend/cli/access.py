import click
from lexpilot_backend.cli.utils import database_url_option, handle_repository_errors
from lexpilot_backend.database import session_scope
from lexpilot_backend.permissions.resolver import PrincipalBuilder


@click.command()
@click.option("--user-id", "-u", "user_id", required=True)
@click.option("--path", "-p", "paths", multiple=True, help="Route path to check")
@click.option("--permission", "-P", "permissions", multiple=True, help="resource.action key to check")
@database_url_option
@handle_repository_errors
def access(user_id, paths, permissions, database_url):
    """Explain what a user may access."""

    with session_scope(database_url) as db:
        principal = PrincipalBuilder.build(user_id, db)

    click.echo(f"User: {user_id}")
    click.echo(f"Decision source: {click.style(principal.kind, fg='green')}")
    click.echo(f"Roles: {', '.join(principal.role_names) or '-'}")

    for path in paths:
        click.echo(f"route {path}: {_verdict(principal.can_access_route(path))}")

    for permission in permissions:
        click.echo(f"permission {permission}: {_verdict(principal.has_permission(permission))}")

    if not paths and not permissions:
        click.echo("Accessible routes:")
        for path in principal.accessible_routes():
            click.echo(f"  {path}")


def _verdict(granted: bool) -> str:
    return click.style("allowed", fg="green") if granted else click.style("denied", fg="red")
