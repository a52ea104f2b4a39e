import os
from typing import Dict, NamedTuple, Optional

import requests
from ape import networks
from eth_utils import to_int

from auditsign_deploy.constants import INFURA_ENVVAR, MAINNET_CHAIN_ID

LOCAL_NETWORK_NAMES = ["local", "development"]

GWEI = 10**9


class NetworkProfile(NamedTuple):
    """Deployment settings for a single target network."""

    name: str
    chain_id: int
    rpc_uri: str
    gas_price: Optional[int]  # wei; None lets the provider decide
    dry_run: bool
    timeout: int  # seconds


DEVELOPMENT = NetworkProfile(
    name="development",
    chain_id=1337,
    rpc_uri="http://127.0.0.1:8545",
    gas_price=None,
    dry_run=False,
    timeout=30,
)

NETWORK_PROFILES: Dict[int, NetworkProfile] = {
    profile.chain_id: profile
    for profile in (
        DEVELOPMENT,
        NetworkProfile(
            name="rinkeby",
            chain_id=4,
            rpc_uri="https://rinkeby.infura.io/v3/{infura_key}",
            gas_price=1 * GWEI,
            dry_run=False,
            timeout=120,
        ),
        NetworkProfile(
            name="sokol",
            chain_id=77,
            rpc_uri="https://sokol.poa.network",
            gas_price=1 * GWEI,
            dry_run=False,
            timeout=120,
        ),
        NetworkProfile(
            name="xdai",
            chain_id=100,
            rpc_uri="https://rpc.xdaichain.com/",
            gas_price=1 * GWEI,
            dry_run=True,
            timeout=120,
        ),
        NetworkProfile(
            name="matic",
            chain_id=137,
            rpc_uri="https://rpc-mainnet.matic.network",
            gas_price=1 * GWEI,
            dry_run=True,
            timeout=120,
        ),
        NetworkProfile(
            name="mainnet",
            chain_id=MAINNET_CHAIN_ID,
            rpc_uri="https://mainnet.infura.io/v3/{infura_key}",
            gas_price=1 * GWEI,
            dry_run=True,
            timeout=120,
        ),
    )
}


def get_network_profile(chain_id: int) -> NetworkProfile:
    """
    Returns the profile registered for chain_id.
    Unknown chains (e.g. ganache, anvil, ape's test provider) get the development profile.
    """
    return NETWORK_PROFILES.get(chain_id, DEVELOPMENT)


def get_network_profile_by_name(name: str) -> NetworkProfile:
    for profile in NETWORK_PROFILES.values():
        if profile.name == name:
            return profile
    raise ValueError(f"No network profile named '{name}'.")


def is_local_network() -> bool:
    return networks.provider.network.name in LOCAL_NETWORK_NAMES


def rpc_uri(profile: NetworkProfile) -> str:
    """Returns the RPC endpoint of a profile, filling in the Infura project ID if needed."""
    if "{infura_key}" not in profile.rpc_uri:
        return profile.rpc_uri
    infura_key = os.environ.get(INFURA_ENVVAR)
    if not infura_key:
        raise ValueError(f"{INFURA_ENVVAR} is not set; required for {profile.name}.")
    return profile.rpc_uri.format(infura_key=infura_key)


def query_chain_id(uri: str, timeout: int) -> int:
    """Asks a JSON-RPC endpoint for its chain ID."""
    payload = {"jsonrpc": "2.0", "method": "eth_chainId", "params": [], "id": 1}
    response = requests.post(uri, json=payload, timeout=timeout)
    response.raise_for_status()

    data = response.json()
    if "error" in data:
        raise ValueError(f"RPC endpoint {uri} returned an error: {data['error']}")
    return to_int(hexstr=data["result"])


def check_chain_id(profile: NetworkProfile, reported_chain_id: int) -> None:
    if reported_chain_id != profile.chain_id:
        raise ValueError(
            f"RPC endpoint for {profile.name} reports chain_id {reported_chain_id}, "
            f"expected {profile.chain_id}."
        )


def check_rpc_endpoint(profile: NetworkProfile, uri: Optional[str] = None) -> None:
    """
    Checks that an RPC endpoint serves the chain the profile is declared for.
    Defaults to the profile's own endpoint when no uri is given.
    """
    uri = uri or rpc_uri(profile)
    print(f"Querying chain_id of the RPC endpoint for {profile.name}...")
    check_chain_id(profile, query_chain_id(uri, timeout=profile.timeout))
