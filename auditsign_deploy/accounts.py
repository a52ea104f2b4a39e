import os

from ape import accounts
from ape.api import AccountAPI
from ape.cli.choices import select_account
from ape_accounts import import_account_from_private_key
from eth_account import Account
from eth_utils import to_checksum_address

from auditsign_deploy.constants import (
    DEPLOYER_ACCOUNT_ALIAS,
    PASSPHRASE_ENVVAR,
    PRIVATE_KEY_ENVVAR,
)
from auditsign_deploy.networks import is_local_network


def load_deployer_account() -> AccountAPI:
    """
    Returns the account used to send deployment transactions.

    On local networks the first test account is used. Otherwise, if PRIVATE_KEY
    is set, the key is imported once under a fixed alias (protected by
    DEPLOYER_PASSPHRASE) and loaded from then on, as long as the stored
    account still matches the key. Without it the user picks an account.
    """
    if is_local_network():
        return accounts.test_accounts[0]

    private_key = os.environ.get(PRIVATE_KEY_ENVVAR)
    if not private_key:
        return select_account()

    if DEPLOYER_ACCOUNT_ALIAS in accounts.aliases:
        account = accounts.load(DEPLOYER_ACCOUNT_ALIAS)
        expected_address = Account.from_key(private_key).address
        if to_checksum_address(account.address) != expected_address:
            raise ValueError(
                f"Stored account '{DEPLOYER_ACCOUNT_ALIAS}' is {account.address}, but "
                f"{PRIVATE_KEY_ENVVAR} belongs to {expected_address}. Remove the stale alias "
                f"(ape accounts delete {DEPLOYER_ACCOUNT_ALIAS}) or unset {PRIVATE_KEY_ENVVAR}."
            )
        return account

    try:
        passphrase = os.environ[PASSPHRASE_ENVVAR]
    except KeyError:
        raise ValueError(
            f"{PRIVATE_KEY_ENVVAR} is set but {PASSPHRASE_ENVVAR} is not; "
            "a passphrase is needed to store the imported key."
        )
    account = import_account_from_private_key(DEPLOYER_ACCOUNT_ALIAS, passphrase, private_key)
    print(f"Account imported: {account.address}")
    return account
