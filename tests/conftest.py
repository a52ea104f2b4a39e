import json
from copy import deepcopy

import pytest
from ethpm_types import MethodABI

from auditsign_deploy.constants import AUDITSIGN_PARAMS_FILEPATH
from auditsign_deploy.params import Deployer
from auditsign_deploy.utils import _load_yaml

# Common constants
IPFS_BASE = "https://gateway.pinata.cloud/ipfs/"
BYTEROCKET_ETH = "0xee680e5c2C5251261061F12BA3a5c470D2B6AE83"
SAFE_BYTEROCKET_ETH = "0xb9Edd24591De55dB94A0e7fB2939D8F2eF49bf3E"
ROOT_ADDRESS = "0x1111111111111111111111111111111111111111"
DEPLOYER_ADDRESS = "0x2222222222222222222222222222222222222222"


# Utility functions
def method_abi(name, *input_types):
    inputs = [{"name": f"arg{i}", "type": t} for i, t in enumerate(input_types)]
    return MethodABI.model_validate(
        {
            "type": "function",
            "name": name,
            "stateMutability": "nonpayable",
            "inputs": inputs,
            "outputs": [],
        }
    )


def registry_entry(address, name="auditSign"):
    return {
        name: {
            "address": address,
            "abi": [],
            "tx_hash": "0x" + "ab" * 32,
            "block_number": 12345,
            "deployer": DEPLOYER_ADDRESS,
        }
    }


def write_json(filepath, data):
    with open(filepath, "w") as file:
        json.dump(data, file)


# Fixtures
@pytest.fixture(scope="session")
def shipped_config():
    return _load_yaml(AUDITSIGN_PARAMS_FILEPATH)


@pytest.fixture
def config(shipped_config, tmp_path):
    config = deepcopy(shipped_config)
    config["artifacts"] = {"dir": str(tmp_path), "filename": "auditsign.json"}
    return config


@pytest.fixture
def registry_filepath(tmp_path):
    return tmp_path / "auditsign.json"


@pytest.fixture
def deployer_account():
    class _Account:
        address = DEPLOYER_ADDRESS

    account = _Account()
    Deployer._set_account(account)
    yield account
    Deployer._set_account(None)
