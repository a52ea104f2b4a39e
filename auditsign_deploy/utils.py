import json
import os
from pathlib import Path
from typing import Dict, List

import yaml
from ape import networks, project
from ape.contracts import ContractContainer, ContractInstance

from auditsign_deploy.constants import (
    ARTIFACTS_DIR,
    AUDITSIGN_CONTRACTS,
    ETHERSCAN_ENVVAR,
    INFURA_ENVVAR,
    OZ_DEPENDENCY_NAME,
    OZ_DEPENDENCY_VERSION,
)
from auditsign_deploy.networks import is_local_network


class DeploymentConfigError(ValueError):
    pass


def _load_yaml(filepath: Path) -> dict:
    """Loads a YAML file."""
    with open(filepath, "r") as file:
        return yaml.safe_load(file)


def _load_json(filepath: Path) -> dict:
    """Loads a JSON file."""
    with open(filepath, "r") as file:
        return json.load(file)


def get_artifact_filepath(config: Dict) -> Path:
    """Returns the filepath of the artifact file."""
    artifact_config = config.get("artifacts", {})
    artifact_dir = Path(artifact_config.get("dir", ARTIFACTS_DIR))
    filename = artifact_config.get("filename")
    if not filename:
        raise DeploymentConfigError("artifact filename is not set in params file.")
    return artifact_dir / filename


def validate_config(config: Dict) -> Path:
    """Checks the params file structure and returns the registry filepath."""
    print("Validating parameters YAML...")

    if not config:
        raise DeploymentConfigError("params file is empty.")

    for field in ("deployment", "constants", "initializer", "proxy_admin_owner"):
        if not config.get(field):
            raise DeploymentConfigError(f"{field} is not set in params file.")

    root_chain_id = config["deployment"].get("root_chain_id")
    if root_chain_id is None:
        raise DeploymentConfigError("root_chain_id is not set in params file.")
    if not isinstance(root_chain_id, int):
        raise DeploymentConfigError(f"root_chain_id must be an integer, got {root_chain_id!r}.")

    if not isinstance(config["initializer"], list):
        raise DeploymentConfigError("initializer must be a list of arguments.")

    mirror = config.get("mirror") or dict()
    if "root_address" not in mirror:
        raise DeploymentConfigError("mirror.root_address is not set in params file.")

    return get_artifact_filepath(config=config)


def check_not_published(registry_filepath: Path, chain_id: int) -> None:
    """
    Refuses to continue when an auditSign contract has already been
    published to the registry for chain_id; re-running would deploy a second proxy.
    """
    if not registry_filepath.exists():
        return

    published = _load_json(registry_filepath).get(str(chain_id), {})
    if any(name in published for name in AUDITSIGN_CONTRACTS):
        raise ValueError(f"Deployment is already published for chain_id {chain_id}.")


def check_etherscan_plugin() -> None:
    """
    Checks that the ape-etherscan plugin is installed and that
    the appropriate API key environment variable is set.
    """
    if is_local_network():
        # unnecessary for local deployment
        return
    try:
        from ape_etherscan.utils import API_KEY_ENV_KEY_MAP
    except ImportError:
        raise ImportError("Please install the ape-etherscan plugin to use this script.")
    ecosystem_name = networks.provider.network.ecosystem.name
    explorer_envvar = API_KEY_ENV_KEY_MAP.get(ecosystem_name, ETHERSCAN_ENVVAR)
    api_key = os.environ.get(explorer_envvar)
    if not api_key:
        raise ValueError(f"{explorer_envvar} is not set.")


def check_infura_plugin() -> None:
    """Checks that the ape-infura plugin is installed."""
    if is_local_network():
        return  # unnecessary for local deployment
    if networks.provider.name != "infura":
        return  # unnecessary when using a provider different than infura
    try:
        import ape_infura  # noqa: F401
    except ImportError:
        raise ImportError("Please install the ape-infura plugin to use this script.")
    if not os.environ.get(INFURA_ENVVAR):
        raise ValueError(f"{INFURA_ENVVAR} is not set.")


def check_plugins() -> None:
    print("Checking plugins...")
    check_etherscan_plugin()
    check_infura_plugin()


def verify_contracts(contracts: List[ContractInstance]) -> None:
    explorer = networks.provider.network.explorer
    if explorer is None:
        print("(i) No block explorer configured for this network; skipping verification.")
        return
    for instance in contracts:
        print(f"(i) Verifying {instance.contract_type.name}...")
        explorer.publish_contract(instance.address)


def get_oz_contract_container(contract: str) -> ContractContainer:
    """Returns a contract container from the pinned OpenZeppelin dependency."""
    dependency = project.dependencies[OZ_DEPENDENCY_NAME][OZ_DEPENDENCY_VERSION]
    try:
        return getattr(dependency, contract)
    except AttributeError:
        raise ValueError(
            f"No contract named '{contract}' in {OZ_DEPENDENCY_NAME}@{OZ_DEPENDENCY_VERSION}."
        )


def get_contract_container(contract: str) -> ContractContainer:
    try:
        contract_container = getattr(project, contract)
    except AttributeError:
        # not in root project; check dependencies
        contract_container = get_oz_contract_container(contract)

    return contract_container


def get_chain_name(chain_id: int) -> str:
    """Returns the name of the chain given its chain ID."""
    for ecosystem_name, ecosystem in networks.ecosystems.items():
        for network_name, network in ecosystem.networks.items():
            if network.chain_id == chain_id:
                return f"{ecosystem_name} {network_name}"
    raise ValueError(f"Chain ID {chain_id} not found in networks.")
