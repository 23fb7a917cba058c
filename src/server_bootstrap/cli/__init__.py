"""CLI module for server bootstrap."""

import click


@click.group()
@click.version_option(package_name="server-bootstrap")
def main() -> None:
    """server-bootstrap - Start and stop the server daemon."""


# Defer import to avoid circular dependency
def _register_commands() -> None:
    from server_bootstrap.cli.serve import serve_command
    from server_bootstrap.cli.variants import variants_command

    main.add_command(serve_command)
    main.add_command(variants_command)


_register_commands()
