#!/usr/bin/python3

from itertools import groupby
from pathlib import Path

import click
from ape.cli import ConnectedProviderCommand

from auditsign_deploy.constants import ARTIFACTS_DIR
from auditsign_deploy.registry import read_registry
from auditsign_deploy.utils import get_chain_name


def _format_chain_name(chain_name: str) -> str:
    """Format the chain name to capitalize each word and join with slashes."""
    return "/".join(word.capitalize() for word in chain_name.split())


@click.command(cls=ConnectedProviderCommand, name="list-contracts")
@click.option(
    "--registry-filepath",
    "-f",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    help="Registry filepath",
    default=ARTIFACTS_DIR / "auditsign.json",
)
def cli(registry_filepath):
    """List all auditSign deployments in the registry, grouped by chain."""
    entries = read_registry(filepath=registry_filepath)
    entries.sort(key=lambda e: (e.chain_id, e.name))
    for chain_id, chain_entries in groupby(entries, key=lambda e: e.chain_id):
        try:
            chain_name = _format_chain_name(get_chain_name(chain_id))
        except ValueError:
            chain_name = f"Chain {chain_id}"
        click.secho(f"    {chain_name}", fg="yellow")

        for index, entry in enumerate(chain_entries, start=1):
            click.secho(f"        {index}. {entry.name} {entry.address}", fg="cyan")


if __name__ == "__main__":
    cli()
