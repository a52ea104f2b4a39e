import sys
from typing import Any, Sequence

from ape.utils import ZERO_ADDRESS


def _abort() -> None:
    print("Aborting deployment!")
    sys.exit(-1)


def _answered_no(prompt: str) -> bool:
    answer = input(prompt)
    return answer.lower().strip() == "n"


def _continue() -> None:
    """Asks the user to continue."""
    if _answered_no("Continue Y/N? "):
        _abort()


def _confirm_deployment(contract_name: str) -> None:
    """Asks the user to confirm the deployment of a single contract."""
    if _answered_no(f"Deploy {contract_name} Y/N? "):
        _abort()


def _confirm_zero_address() -> None:
    if _answered_no("Zero Address detected for deployment parameter; Continue? Y/N? "):
        _abort()


def _confirm_resolution(resolved_args: Sequence[Any], contract_name: str, label: str) -> None:
    """Asks the user to confirm the resolved arguments for a single contract."""
    if len(resolved_args) == 0:
        print(f"\n(i) No {label} arguments for {contract_name}")
        _confirm_deployment(contract_name)
        return

    print(f"\n{label.capitalize()} arguments for {contract_name}")
    for position, resolved_value in enumerate(resolved_args):
        print(f"\t[{position}] {resolved_value}")
    _confirm_deployment(contract_name)
    if any(value == ZERO_ADDRESS for value in resolved_args):
        _confirm_zero_address()


def _warn_admin_transfer(proxy_admin_address: str, new_owner: str) -> None:
    print(
        f"\nProxyAdmin {proxy_admin_address} ownership will be transferred to {new_owner}.",
        "The deployer will no longer be able to upgrade the proxy.",
        sep="\n",
    )
