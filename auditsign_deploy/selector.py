from enum import Enum
from typing import Any, NamedTuple, Sequence, Tuple

from auditsign_deploy.constants import (
    MAINNET_CHAIN_ID,
    MIRROR_CONTRACT_NAME,
    ROOT_CONTRACT_NAME,
)


class ContractVariant(Enum):
    ROOT = ROOT_CONTRACT_NAME
    MIRROR = MIRROR_CONTRACT_NAME


class VariantSelection(NamedTuple):
    variant: ContractVariant
    contract_name: str
    initializer_args: Tuple[Any, ...]

    @property
    def is_mirror(self) -> bool:
        return self.variant is ContractVariant.MIRROR


def is_root_chain(chain_id: int, root_chain_id: int = MAINNET_CHAIN_ID) -> bool:
    if isinstance(chain_id, bool) or not isinstance(chain_id, int):
        raise TypeError(f"chain_id must be an integer, got {chain_id!r}")
    return chain_id == root_chain_id


def select_variant(
    chain_id: int,
    initializer: Sequence[Any],
    root_address: Any,
    root_chain_id: int = MAINNET_CHAIN_ID,
) -> VariantSelection:
    """
    Chooses which auditSign contract to deploy on chain_id.

    The root chain gets auditSign initialized with the shared initializer arguments
    (metadata base URI plus the two governance addresses). Every other chain gets
    auditSignMirror with the same arguments followed by the root contract address.
    """
    shared_args = tuple(initializer)
    if is_root_chain(chain_id, root_chain_id=root_chain_id):
        return VariantSelection(
            variant=ContractVariant.ROOT,
            contract_name=ContractVariant.ROOT.value,
            initializer_args=shared_args,
        )
    return VariantSelection(
        variant=ContractVariant.MIRROR,
        contract_name=ContractVariant.MIRROR.value,
        initializer_args=shared_args + (root_address,),
    )
