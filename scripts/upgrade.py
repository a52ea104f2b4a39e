#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, network_option

from auditsign_deploy.constants import AUDITSIGN_CONTRACTS, AUDITSIGN_PARAMS_FILEPATH
from auditsign_deploy.params import Deployer
from auditsign_deploy.types import ChecksumAddress
from auditsign_deploy.utils import get_contract_container


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@click.option(
    "--contract-name",
    "-c",
    help="Contract type of the new implementation",
    type=click.Choice(AUDITSIGN_CONTRACTS),
    required=True,
)
@click.option(
    "--proxy-address",
    "-p",
    help="Address of the deployed proxy",
    type=ChecksumAddress(),
    required=True,
)
@click.option("--verify/--no-verify", default=False, help="Publish the implementation source")
def cli(network, contract_name, proxy_address, verify):
    """Upgrade an auditSign proxy to a freshly deployed implementation."""
    deployer = Deployer.from_yaml(
        filepath=AUDITSIGN_PARAMS_FILEPATH, verify=verify, guard_redeploy=False
    )
    container = get_contract_container(contract_name)
    upgraded = deployer.upgrade(container, proxy_address)
    print(f"{contract_name} proxy at {upgraded.address} upgraded.")


if __name__ == "__main__":
    cli()
