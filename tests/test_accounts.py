from unittest.mock import MagicMock

import pytest

from auditsign_deploy import accounts as deployer_accounts
from auditsign_deploy.accounts import load_deployer_account
from auditsign_deploy.constants import DEPLOYER_ACCOUNT_ALIAS
from tests.conftest import DEPLOYER_ADDRESS

# first account of the well-known development mnemonic
PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
KEY_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


@pytest.fixture
def ape_accounts(monkeypatch):
    container = MagicMock()
    container.aliases = [DEPLOYER_ACCOUNT_ALIAS]
    monkeypatch.setattr(deployer_accounts, "accounts", container)
    monkeypatch.setattr(deployer_accounts, "is_local_network", lambda: False)
    monkeypatch.setenv("PRIVATE_KEY", PRIVATE_KEY)
    return container


@pytest.fixture
def import_account(monkeypatch):
    imported = MagicMock()
    imported.address = KEY_ADDRESS
    import_account = MagicMock(return_value=imported)
    monkeypatch.setattr(deployer_accounts, "import_account_from_private_key", import_account)
    return import_account


def test_local_network_uses_test_account(monkeypatch, ape_accounts):
    monkeypatch.setattr(deployer_accounts, "is_local_network", lambda: True)
    assert load_deployer_account() is ape_accounts.test_accounts[0]
    ape_accounts.load.assert_not_called()


def test_stored_alias_matching_key_is_loaded(ape_accounts, import_account):
    stored = MagicMock()
    stored.address = KEY_ADDRESS.lower()
    ape_accounts.load.return_value = stored

    assert load_deployer_account() is stored
    ape_accounts.load.assert_called_once_with(DEPLOYER_ACCOUNT_ALIAS)
    import_account.assert_not_called()


def test_stale_alias_for_another_key_is_refused(ape_accounts, import_account):
    stored = MagicMock()
    stored.address = DEPLOYER_ADDRESS
    ape_accounts.load.return_value = stored

    with pytest.raises(ValueError, match=f"PRIVATE_KEY belongs to {KEY_ADDRESS}"):
        load_deployer_account()
    import_account.assert_not_called()


def test_key_is_imported_under_alias(monkeypatch, ape_accounts, import_account):
    ape_accounts.aliases = []
    monkeypatch.setenv("DEPLOYER_PASSPHRASE", "hunter2")

    account = load_deployer_account()

    assert account.address == KEY_ADDRESS
    import_account.assert_called_once_with(DEPLOYER_ACCOUNT_ALIAS, "hunter2", PRIVATE_KEY)


def test_import_requires_passphrase(monkeypatch, ape_accounts, import_account):
    ape_accounts.aliases = []
    monkeypatch.delenv("DEPLOYER_PASSPHRASE", raising=False)

    with pytest.raises(ValueError, match="DEPLOYER_PASSPHRASE is not"):
        load_deployer_account()
    import_account.assert_not_called()
