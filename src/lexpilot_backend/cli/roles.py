import click
from lexpilot_backend.cli.utils import database_url_option, handle_repository_errors
from lexpilot_backend.database import session_scope
from lexpilot_backend.model.base import Base
from lexpilot_backend.permissions.role_setup import seed_canonical_roles
from lexpilot_backend.repositories.role import RoleRepository


@click.command()
@click.option("--update", "update_existing", is_flag=True, help="Reset the permission matrix of existing canonical roles")
@click.option("--create-tables", is_flag=True, help="Create missing tables before seeding")
@database_url_option
@handle_repository_errors
def seed_roles(update_existing, create_tables, database_url):

    with session_scope(database_url) as db:
        if create_tables:
            Base.metadata.create_all(db.get_bind())

        changed = seed_canonical_roles(db, update_existing=update_existing)

        if not changed:
            click.echo("Canonical roles are up to date.")
        for role in changed:
            click.echo(f"Seeded [{click.style(role.name, fg='green')}]")


@click.command()
@click.option("--active", "active_only", is_flag=True, help="Only list active roles")
@database_url_option
@handle_repository_errors
def list_roles(active_only, database_url):

    with session_scope(database_url) as db:
        repository = RoleRepository(db)
        roles = repository.list_active() if active_only else repository.list_all()

        for role in roles:
            state = click.style("active", fg="green") if role.is_active else click.style("inactive", fg="yellow")
            click.echo(f"{role.name} ({state}) - {role.id}")


@click.group()
def roles():
    pass

roles.add_command(seed_roles, "seed")
roles.add_command(list_roles, "list")
