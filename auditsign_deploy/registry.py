import json
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional

from ape import chain
from ape.api import ReceiptAPI
from ape.contracts import ContractInstance
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address, to_hex
from eth_typing import ABI

from auditsign_deploy.utils import _load_json

ChainId = int
ContractName = str


STANDARD_REGISTRY_JSON_FORMAT = {"indent": 4, "separators": (",", ": ")}


class RegistryEntry(NamedTuple):
    """Represents a single deployed contract in the registry."""

    chain_id: ChainId
    name: ContractName
    address: ChecksumAddress
    abi: ABI
    tx_hash: str
    block_number: int
    deployer: str


def _get_abi(contract_instance: ContractInstance) -> ABI:
    """Returns the ABI of a contract instance."""
    contract_abi = list()
    for entry in contract_instance.contract_type.abi:
        contract_abi.append(entry.model_dump(mode="json", by_alias=True))
    return contract_abi


def _get_receipt(
    contract_instance: ContractInstance, receipts: Optional[Dict[str, ReceiptAPI]] = None
) -> ReceiptAPI:
    """
    Returns the receipt of the transaction that deployed contract_instance.
    Proxies wrapped as their logic contract type carry no txn_hash of their own,
    so their deployment receipt has to be supplied through receipts.
    """
    receipts = receipts or dict()
    address = to_checksum_address(contract_instance.address)
    if address in receipts:
        return receipts[address]

    txn_hash = contract_instance.txn_hash
    if not txn_hash:
        raise ValueError(
            f"No deployment transaction known for {contract_instance.contract_type.name} "
            f"at {address}."
        )
    return chain.get_receipt(txn_hash)


def _get_entry(contract_instance: ContractInstance, receipt: ReceiptAPI) -> RegistryEntry:
    txn_hash = receipt.txn_hash
    if not isinstance(txn_hash, str):
        txn_hash = to_hex(txn_hash)
    entry = RegistryEntry(
        name=contract_instance.contract_type.name,
        address=to_checksum_address(contract_instance.address),
        abi=_get_abi(contract_instance),
        chain_id=chain.chain_id,
        tx_hash=txn_hash,
        block_number=receipt.block_number,
        deployer=to_checksum_address(receipt.transaction.sender),
    )
    return entry


def read_registry(filepath: Path) -> List[RegistryEntry]:
    data = _load_json(filepath)
    registry_entries = list()
    for chain_id, entries in data.items():
        for contract_name, artifacts in entries.items():
            registry_entry = RegistryEntry(
                chain_id=int(chain_id),
                name=contract_name,
                address=artifacts["address"],
                abi=artifacts["abi"],
                tx_hash=artifacts["tx_hash"],
                block_number=artifacts["block_number"],
                deployer=artifacts["deployer"],
            )
            registry_entries.append(registry_entry)
    return registry_entries


def find_registry_entry(
    filepath: Path, chain_id: ChainId, name: ContractName
) -> Optional[RegistryEntry]:
    """Returns the registry entry for name on chain_id, if there is one."""
    if not filepath.exists():
        return None
    for entry in read_registry(filepath=filepath):
        if entry.chain_id == chain_id and entry.name == name:
            return entry
    return None


def write_registry(entries: List[RegistryEntry], filepath: Path) -> Path:
    """
    Writes registry entries to a file, merging them into an existing registry.

    Entries are grouped by chain ID. If any (chain ID, contract name) pair is
    already present in the existing file, nothing is overwritten; the new data
    goes to a sibling ``.unmerged.json`` file instead.
    """

    if not entries:
        print("No entries provided.")
        return filepath

    entries = sorted(entries, key=lambda entry: (str(entry.chain_id), entry.name))

    data: Dict[str, Dict] = defaultdict(dict)
    for entry in entries:
        entry_abi = sorted(entry.abi, key=lambda d: (d["type"], d.get("name", "")))
        data[str(entry.chain_id)][entry.name] = {
            "address": entry.address,
            "abi": entry_abi,
            "tx_hash": entry.tx_hash,
            "block_number": int(entry.block_number),
            "deployer": entry.deployer,
        }

    filepath.parent.mkdir(parents=True, exist_ok=True)

    if filepath.exists():
        print(f"Updating existing registry at {filepath}.")
        existing_data = _load_json(filepath)

        overlapping = [
            (chain_id, name)
            for chain_id, contracts in data.items()
            for name in contracts
            if name in existing_data.get(chain_id, {})
        ]
        if overlapping:
            filepath = filepath.with_suffix(".unmerged.json")
            print(
                f"Cannot merge registry entries already present: {overlapping}.\n"
                f"Writing to {filepath} to avoid overwriting existing data."
            )
            merged = data
        else:
            merged = existing_data
            for chain_id, contracts in data.items():
                merged.setdefault(chain_id, {}).update(contracts)
        data = merged
    else:
        print(f"Creating new registry at {filepath}.")

    with open(filepath, "w") as file:
        json.dump(dict(sorted(data.items())), file, **STANDARD_REGISTRY_JSON_FORMAT)

    return filepath


def registry_from_ape_deployments(
    deployments: List[ContractInstance],
    output_filepath: Path,
    receipts: Optional[Dict[str, ReceiptAPI]] = None,
) -> Path:
    """
    Creates or extends a contract registry from ape deployments.
    receipts maps checksum addresses to deployment receipts for instances
    that do not carry their own txn_hash (e.g. proxies wrapped via `at`).
    """
    entries = [
        _get_entry(contract_instance=instance, receipt=_get_receipt(instance, receipts))
        for instance in deployments
    ]
    output_filepath = write_registry(entries=entries, filepath=output_filepath)
    print(f"(i) Registry written to {output_filepath}!")
    return output_filepath
