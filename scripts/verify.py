#!/usr/bin/python3

from pathlib import Path

import click
from ape import networks
from ape.cli import ConnectedProviderCommand, network_option

from auditsign_deploy.constants import ARTIFACTS_DIR
from auditsign_deploy.registry import read_registry
from auditsign_deploy.utils import get_contract_container, verify_contracts


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@click.option(
    "--contract-name",
    "-c",
    "contract_names",
    help="Contract to verify",
    type=click.STRING,
    required=True,
    multiple=True,
)
@click.option(
    "--registry-filepath",
    "-f",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    help="Registry filepath",
    default=ARTIFACTS_DIR / "auditsign.json",
)
def cli(network, contract_names, registry_filepath):
    """Verify a deployed contract."""
    chain_id = networks.active_provider.chain_id
    entries = {
        entry.name: entry
        for entry in read_registry(filepath=registry_filepath)
        if entry.chain_id == chain_id
    }

    contract_instances = []
    for contract_name in contract_names:
        try:
            entry = entries[contract_name]
        except KeyError:
            raise ValueError(
                f"Contract '{contract_name}' not found in registry, '{registry_filepath}', "
                f"for chain {chain_id}"
            )
        contract_container = get_contract_container(contract_name)
        contract_instance = contract_container.at(entry.address)

        # check whether contract is a proxy
        proxy_info = networks.provider.network.ecosystem.get_proxy_info(contract_instance.address)
        if proxy_info:
            # we have an instance of a proxy contract, but need the underlying implementation
            print(
                f"Proxy contract detected; verifying implementation contract at {proxy_info.target}"
            )
            contract_instance = contract_container.at(proxy_info.target)

        contract_instances.append(contract_instance)

    verify_contracts(contract_instances)


if __name__ == "__main__":
    cli()
