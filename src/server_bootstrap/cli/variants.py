"""CLI variants command listing installed bootstrap variants."""

import click

from server_bootstrap.bootstrap.selector import discover_variants, select_variant
from server_bootstrap.bootstrap.variants import COMMUNITY_VARIANT


@click.command("variants")
def variants_command() -> None:
    """List installed bootstrap variants and the one serve would run."""
    candidates = discover_variants()
    winner = select_variant(candidates)

    for variant in [COMMUNITY_VARIANT, *candidates]:
        marker = "*" if variant is winner else " "
        capabilities = ", ".join(sorted(variant.capabilities)) or "-"
        click.echo(f"{marker} {variant.name}: {capabilities}")
        if variant.description:
            click.echo(f"    {variant.description}")
