from typing import List

from ape.contracts.base import ContractInstance

from auditsign_deploy.selector import VariantSelection, is_root_chain, select_variant
from auditsign_deploy.utils import get_contract_container


def select_for_chain(deployer, chain_id: int) -> VariantSelection:
    parameters = deployer.parameters
    initializer = parameters.resolve_initializer()
    if is_root_chain(chain_id, root_chain_id=parameters.root_chain_id):
        # the root contract does not reference itself; skip the registry lookup
        root_address = None
    else:
        root_address = deployer.resolve_root_address()
    return select_variant(
        chain_id=chain_id,
        initializer=initializer,
        root_address=root_address,
        root_chain_id=parameters.root_chain_id,
    )


def deploy_audit_sign(deployer) -> List[ContractInstance]:
    """
    Deploys the auditSign variant for the deployer's chain behind a transparent proxy
    and hands the ProxyAdmin over to the configured cold wallet.

    Returns the newly deployed contracts, ready for `Deployer.finalize`.
    """
    selection = select_for_chain(deployer, chain_id=deployer.chain_id)
    print(
        f"\nSelected {selection.contract_name} ({selection.variant.name.lower()} variant) "
        f"for chain_id {deployer.chain_id}."
    )

    proxy_admin = deployer.deploy_proxy_admin()
    deployments = [proxy_admin]

    container = get_contract_container(selection.contract_name)
    audit_sign = deployer.deploy_proxy(
        container, proxy_admin=proxy_admin, initializer_args=selection.initializer_args
    )
    deployments.append(audit_sign)

    deployer.transfer_proxy_admin_ownership(
        proxy_admin, new_owner=deployer.parameters.resolve_proxy_admin_owner()
    )
    return deployments
