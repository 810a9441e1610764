import click
from lexpilot_backend.permissions.routes import RouteTable, load_route_table


def _table(table_file) -> RouteTable:
    return RouteTable.from_yaml(table_file) if table_file else load_route_table()


@click.command()
@click.option("--file", "-f", "table_file", type=click.Path(exists=True, dir_okay=False), default=None)
def list_routes(table_file):

    table = _table(table_file)

    for rule in table.rules:
        roles = ", ".join(rule.roles) if rule.roles else "-"
        permissions = ", ".join(rule.permissions) if rule.permissions else "-"
        mode = "all" if rule.require_all else "any"
        click.echo(f"{click.style(rule.path, fg='green')} key={rule.route_key or '-'} roles=[{roles}] permissions({mode})=[{permissions}]")

    click.echo(f"Unmatched paths: {'allowed' if table.default_allow else 'denied'}")


@click.command()
@click.option("--file", "-f", "table_file", type=click.Path(exists=True, dir_okay=False), default=None)
def check_routes(table_file):

    overlaps = _table(table_file).overlaps()

    if not overlaps:
        click.echo("No ambiguous route patterns.")
        return

    for left, right in overlaps:
        click.echo(f"[{click.style('overlap', fg='red')}] {left.path} <-> {right.path}")
    raise SystemExit(1)


@click.group()
def routes():
    pass

routes.add_command(list_routes, "list")
routes.add_command(check_routes, "check")
