#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, network_option

from auditsign_deploy.constants import AUDITSIGN_PARAMS_FILEPATH, PROXY_ADMIN_CONTRACT_NAME
from auditsign_deploy.params import Deployer
from auditsign_deploy.types import ChecksumAddress
from auditsign_deploy.utils import get_oz_contract_container


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@click.option(
    "--proxy-admin",
    "-a",
    "proxy_admin_address",
    help="Address of the ProxyAdmin still owned by the deployer",
    type=ChecksumAddress(),
    required=True,
)
def cli(network, proxy_admin_address):
    """
    Hands an existing ProxyAdmin over to the configured proxy_admin_owner.
    Used to finish a deployment that stopped before the ownership transfer.
    """
    deployer = Deployer.from_yaml(
        filepath=AUDITSIGN_PARAMS_FILEPATH, verify=False, guard_redeploy=False
    )
    proxy_admin = get_oz_contract_container(PROXY_ADMIN_CONTRACT_NAME).at(proxy_admin_address)
    new_owner = deployer.parameters.resolve_proxy_admin_owner()
    deployer.transfer_proxy_admin_ownership(proxy_admin, new_owner=new_owner)
    print(f"{PROXY_ADMIN_CONTRACT_NAME} {proxy_admin.address} now owned by {proxy_admin.owner()}")


if __name__ == "__main__":
    cli()
