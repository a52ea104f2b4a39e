import typing
from abc import ABC, abstractmethod
from collections import namedtuple
from pathlib import Path
from typing import Any, List

from ape import chain, networks
from ape.api import AccountAPI, ReceiptAPI
from ape.contracts.base import ContractContainer, ContractInstance, ContractTransactionHandler
from ape.utils import EMPTY_BYTES32, ZERO_ADDRESS
from eth_typing import ChecksumAddress
from eth_utils import is_address, to_checksum_address
from ethpm_types import MethodABI
from web3.auto import w3

from auditsign_deploy.accounts import load_deployer_account
from auditsign_deploy.confirm import _confirm_resolution, _continue, _warn_admin_transfer
from auditsign_deploy.constants import (
    EIP1967_ADMIN_SLOT,
    INITIALIZER_METHOD,
    PROXY_ADMIN_CONTRACT_NAME,
    PROXY_CONTRACT_NAME,
    ROOT_CONTRACT_NAME,
)
from auditsign_deploy.networks import check_chain_id, check_rpc_endpoint, get_network_profile
from auditsign_deploy.registry import find_registry_entry, registry_from_ape_deployments
from auditsign_deploy.utils import (
    _load_yaml,
    check_not_published,
    check_plugins,
    get_contract_container,
    get_oz_contract_container,
    validate_config,
    verify_contracts,
)


class VariableContext:
    def __init__(self, constants: typing.Dict[str, Any] = None):
        self.constants = constants or dict()


# Variables


class Variable(ABC):
    VARIABLE_PREFIX = "$"

    @abstractmethod
    def resolve(self) -> Any:
        raise NotImplementedError

    @classmethod
    def is_variable(cls, param: Any) -> bool:
        """Returns True if the param is a variable."""
        return isinstance(param, str) and param.startswith(cls.VARIABLE_PREFIX)


class DeployerAccount(Variable):
    DEPLOYER_INDICATOR = "deployer"

    @classmethod
    def is_deployer(cls, value: str) -> bool:
        """Returns True if the variable is the special deployer variable."""
        return value == cls.DEPLOYER_INDICATOR

    def resolve(self) -> Any:
        deployer_account = Deployer.get_account()
        if deployer_account is None:
            return ZERO_ADDRESS
        return deployer_account.address


class Constant(Variable):
    def __init__(self, constant_name: str, context: VariableContext):
        try:
            self.constant_value = context.constants[constant_name]
        except KeyError:
            raise ValueError(f"Constant '{constant_name}' not found in deployment file.")

    @classmethod
    def is_constant(cls, value: str) -> bool:
        """Returns True if the variable is a deployment constant."""
        return value.isupper()

    def resolve(self) -> Any:
        return self.constant_value


def _variable_from_value(variable: str, context: VariableContext) -> Variable:
    variable = variable[len(Variable.VARIABLE_PREFIX) :]
    if DeployerAccount.is_deployer(variable):
        return DeployerAccount()
    elif Constant.is_constant(variable):
        return Constant(variable, context)
    raise ValueError(f"Unknown variable '${variable}' in deployment file.")


def _process_raw_value(value: Any, variable_context: VariableContext) -> Any:
    if isinstance(value, list):
        return [_process_raw_value(v, variable_context) for v in value]

    if Variable.is_variable(value):
        value = _variable_from_value(value, variable_context)

    return value


def _resolve_param(value: Any) -> Any:
    """Resolves a single parameter value or a list of parameter values."""
    if isinstance(value, list):
        return [_resolve_param(v) for v in value]

    if isinstance(value, Variable):
        return value.resolve()

    return value  # literally a value


def _validate_method_args(
    method_abis: List[MethodABI], args: typing.Sequence[Any]
) -> typing.Dict[str, Any]:
    """Validates the transaction arguments against the function ABI."""
    if len(method_abis) == 0:
        raise ValueError("No method abis provided for validation of args")

    abis_matching_args_length = [abi for abi in method_abis if len(abi.inputs) == len(args)]
    for abi in abis_matching_args_length:
        named_args = {}
        for arg, abi_input in zip(args, abi.inputs):
            if not w3.is_encodable(abi_input.type, arg):
                break
            named_args[abi_input.name] = arg
        else:
            return named_args
    raise ValueError(
        f"Could not find ABI for '{method_abis[0].name}' with {len(args)} arg(s) and given type(s)"
    )


class DeploymentParameters:
    """Initializer arguments and governance addresses for an auditSign deployment."""

    class Invalid(Exception):
        """Raised when the deployment parameters are invalid"""

    def __init__(
        self,
        root_chain_id: int,
        initializer: List[Any],
        root_address: Any,
        proxy_admin_owner: Any,
    ):
        self.root_chain_id = root_chain_id
        self.initializer = initializer
        self.root_address = root_address
        self.proxy_admin_owner = proxy_admin_owner
        self._validate()

    @classmethod
    def from_config(cls, config: typing.Dict) -> "DeploymentParameters":
        """Loads the deployment parameters from a parsed YAML file."""
        print("Processing deployment parameters...")
        context = VariableContext(constants=config.get("constants"))
        return cls(
            root_chain_id=config["deployment"]["root_chain_id"],
            initializer=_process_raw_value(config["initializer"], context),
            root_address=_process_raw_value(config["mirror"]["root_address"], context),
            proxy_admin_owner=_process_raw_value(config["proxy_admin_owner"], context),
        )

    def _validate(self) -> None:
        if isinstance(self.proxy_admin_owner, DeployerAccount):
            raise self.Invalid(
                "proxy_admin_owner cannot be the deployer; "
                "admin rights must go to a pre-declared address."
            )
        owner = _resolve_param(self.proxy_admin_owner)
        if not is_address(owner) or owner == ZERO_ADDRESS:
            raise self.Invalid(f"proxy_admin_owner '{owner}' is not a usable address.")

        root_address = _resolve_param(self.root_address)
        if not is_address(root_address):
            raise self.Invalid(f"mirror.root_address '{root_address}' is not an address.")

    def resolve_initializer(self) -> List[Any]:
        return _resolve_param(self.initializer)

    def resolve_root_address(self) -> ChecksumAddress:
        return to_checksum_address(_resolve_param(self.root_address))

    def resolve_proxy_admin_owner(self) -> ChecksumAddress:
        return to_checksum_address(_resolve_param(self.proxy_admin_owner))


class ProxyAdminTransfer:
    class Invalid(Exception):
        """Raised when a ProxyAdmin ownership transfer target is unacceptable"""


def validate_admin_transfer(new_owner: str, sender: str) -> ChecksumAddress:
    """Admin rights may only move to a real address other than the sending account."""
    if not is_address(new_owner):
        raise ProxyAdminTransfer.Invalid(f"'{new_owner}' is not an address.")
    new_owner = to_checksum_address(new_owner)
    if new_owner == ZERO_ADDRESS:
        raise ProxyAdminTransfer.Invalid("Refusing to transfer ProxyAdmin ownership to 0x0.")
    if new_owner == to_checksum_address(sender):
        raise ProxyAdminTransfer.Invalid(
            f"Refusing to transfer ProxyAdmin ownership to the deployer itself ({new_owner})."
        )
    return new_owner


class Transactor:
    """
    Represents an ape account plus validated/annotated transaction execution.
    """

    def __init__(
        self,
        account: typing.Optional[AccountAPI] = None,
        autosign: bool = False,
        gas_price: typing.Optional[int] = None,
    ):
        if account is None:
            self._account = load_deployer_account()
        else:
            self._account = account
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign
        self._account.set_autosign(autosign)
        self._gas_price = gas_price

    def get_account(self) -> AccountAPI:
        """Returns the transactor account."""
        return self._account

    def _get_tx_kwargs(self) -> typing.Dict[str, Any]:
        if self._gas_price is None:
            return {}
        return {"gas_price": self._gas_price}

    def transact(self, method: ContractTransactionHandler, *args) -> ReceiptAPI:
        named_args = _validate_method_args(method_abis=method.abis, args=args)
        base_message = (
            f"\nTransacting {method.contract.contract_type.name}"
            f"[{method.contract.address[:10]}].{method}"
        )
        if named_args:
            pretty_args = "\n\t".join(f"{k}={v}" for k, v in named_args.items())
            message = f"{base_message} with arguments:\n\t{pretty_args}"
        else:
            message = f"{base_message} with no arguments"
        print(message)
        if not self._autosign:
            _continue()

        return method(*args, sender=self._account, **self._get_tx_kwargs())


class Deployer(Transactor):
    """
    Represents an ape account plus the auditSign deployment parameters,
    plus validated/annotated proxy deployment.
    """

    __DEPLOYER_ACCOUNT: AccountAPI = None

    def __init__(
        self,
        config: typing.Dict,
        path: Path,
        verify: bool,
        account: typing.Optional[AccountAPI] = None,
        autosign: bool = False,
        guard_redeploy: bool = True,
    ):
        self.chain_id = networks.provider.chain_id
        self.profile = get_network_profile(self.chain_id)
        self._receipts = dict()
        super().__init__(account, autosign, gas_price=self.profile.gas_price)

        check_plugins()
        self.path = path
        self.config = config
        self.registry_filepath = validate_config(config=self.config)
        if guard_redeploy:
            check_not_published(registry_filepath=self.registry_filepath, chain_id=self.chain_id)

        self._set_account(self._account)
        self.parameters = DeploymentParameters.from_config(self.config)

        # Little trick to expose constants as attributes (e.g., deployer.constants.FOO)
        constants = config.get("constants", {})
        _Constants = namedtuple("_Constants", list(constants))
        self.constants = _Constants(**constants)

        self.verify = verify
        self._print_deployment_info()

        if not self._autosign:
            # Confirms the start of the deployment.
            _continue()

    @classmethod
    def from_yaml(cls, filepath: Path, *args, **kwargs) -> "Deployer":
        config = _load_yaml(filepath)
        return cls(config=config, path=filepath, *args, **kwargs)

    @classmethod
    def get_account(cls) -> AccountAPI:
        """Returns the deployer account."""
        return cls.__DEPLOYER_ACCOUNT

    @classmethod
    def _set_account(cls, deployer: AccountAPI) -> None:
        """Sets the deployer account."""
        cls.__DEPLOYER_ACCOUNT = deployer

    def _get_kwargs(self) -> typing.Dict[str, Any]:
        """Returns the deployment kwargs."""
        return {"publish": self.verify, **self._get_tx_kwargs()}

    def preflight(self) -> None:
        """
        Dry-run checks for networks that ask for them: the RPC endpoint must serve
        the expected chain and the deployer must be able to pay for gas.
        """
        if not self.profile.dry_run:
            print(f"(i) Skipping dry run for {self.profile.name}.")
            return

        print(f"Running dry run checks for {self.profile.name}...")
        # check the endpoint ape is connected to, not the profile's default one
        uri = getattr(networks.provider, "uri", None)
        if isinstance(uri, str) and uri.startswith("http"):
            check_rpc_endpoint(self.profile, uri=uri)
        else:
            check_chain_id(self.profile, networks.provider.web3.eth.chain_id)
        balance = self.get_account().balance
        if balance == 0:
            raise ValueError(
                f"Deployer {self.get_account().address} has no funds on {self.profile.name}."
            )
        print(f"(i) Deployer balance: {balance} wei")

    def deploy(
        self,
        container: ContractContainer,
        *args,
        label: str = "constructor",
        confirm: bool = True,
    ) -> ContractInstance:
        contract_name = container.contract_type.name
        if confirm and not self._autosign:
            _confirm_resolution(args, contract_name, label=label)

        deployer_account = self.get_account()
        instance = deployer_account.deploy(container, *args, **self._get_kwargs())
        self._receipts[to_checksum_address(instance.address)] = chain.get_receipt(
            instance.txn_hash
        )
        return instance

    def deploy_proxy_admin(self) -> ContractInstance:
        return self.deploy(get_oz_contract_container(PROXY_ADMIN_CONTRACT_NAME))

    def encode_initializer(self, implementation: ContractInstance, args: typing.Sequence[Any]):
        method_handler = getattr(implementation, INITIALIZER_METHOD)
        _validate_method_args(method_abis=method_handler.abis, args=args)
        return method_handler.encode_input(*args)

    def deploy_proxy(
        self,
        container: ContractContainer,
        proxy_admin: ContractInstance,
        initializer_args: typing.Sequence[Any],
    ) -> ContractInstance:
        """
        Deploys the logic contract and a TransparentUpgradeableProxy in front of it,
        initialized atomically with `initialize(*initializer_args)`.
        Returns the proxy wrapped as the logic contract type.
        """
        target_contract_name = container.contract_type.name
        if not self._autosign:
            _confirm_resolution(initializer_args, target_contract_name, label="initializer")
        # already confirmed together with the initializer arguments
        implementation = self.deploy(container, confirm=False)
        data = self.encode_initializer(implementation, initializer_args)

        proxy_container = get_oz_contract_container(PROXY_CONTRACT_NAME)
        print(
            f"\nDeploying {proxy_container.contract_type.name} "
            f"contract to proxy {target_contract_name}."
        )
        proxy_contract = self.deploy(
            proxy_container, implementation.address, proxy_admin.address, data
        )
        print(
            f"\nWrapping {target_contract_name} into {proxy_contract.contract_type.name} "
            f"at {proxy_contract.address}."
        )
        return container.at(proxy_contract.address, txn_hash=proxy_contract.txn_hash)

    def resolve_root_address(self) -> ChecksumAddress:
        """
        Returns the root auditSign address a mirror must reference. A zero address in the
        parameters file is replaced by the root chain's registry entry when there is one.
        """
        root_address = self.parameters.resolve_root_address()
        if root_address != ZERO_ADDRESS:
            return root_address

        entry = find_registry_entry(
            filepath=self.registry_filepath,
            chain_id=self.parameters.root_chain_id,
            name=ROOT_CONTRACT_NAME,
        )
        if entry is None:
            print(
                f"(i) No {ROOT_CONTRACT_NAME} published for chain_id "
                f"{self.parameters.root_chain_id}; mirror will reference {ZERO_ADDRESS}."
            )
            return root_address

        print(f"(i) Using {ROOT_CONTRACT_NAME} at {entry.address} from registry.")
        return to_checksum_address(entry.address)

    def transfer_proxy_admin_ownership(
        self, proxy_admin: ContractInstance, new_owner: str
    ) -> ReceiptAPI:
        new_owner = validate_admin_transfer(new_owner, sender=self.get_account().address)
        _warn_admin_transfer(proxy_admin.address, new_owner)
        return self.transact(proxy_admin.transferOwnership, new_owner)

    def _get_proxy_admin(self, proxy_address) -> ContractInstance:
        admin_slot = chain.provider.get_storage(address=proxy_address, slot=EIP1967_ADMIN_SLOT)

        if admin_slot == EMPTY_BYTES32:
            raise ValueError(
                f"Admin slot for contract at {proxy_address} is empty. "
                "Are you sure this is an EIP1967-compatible proxy?"
            )

        admin_address = to_checksum_address(admin_slot[-20:])
        return get_oz_contract_container(PROXY_ADMIN_CONTRACT_NAME).at(admin_address)

    def upgrade(self, container: ContractContainer, proxy_address) -> ContractInstance:
        proxy_admin = self._get_proxy_admin(proxy_address)
        owner = proxy_admin.owner()
        if owner != self.get_account().address:
            raise ValueError(
                f"{PROXY_ADMIN_CONTRACT_NAME} at {proxy_admin.address} is owned by {owner}, "
                f"not by the deployer {self.get_account().address}; "
                "the upgrade must be executed by the owner."
            )

        implementation = self.deploy(container)
        self.transact(proxy_admin.upgrade, proxy_address, implementation.address)

        wrapped_instance = get_contract_container(container.contract_type.name).at(proxy_address)
        return wrapped_instance

    def finalize(self, deployments: List[ContractInstance]) -> None:
        """
        Publishes the deployments to the registry and optionally to block explorers.
        """
        registry_from_ape_deployments(
            deployments=deployments,
            output_filepath=self.registry_filepath,
            receipts=self._receipts,
        )
        if self.verify:
            verify_contracts(contracts=deployments)

    def _print_deployment_info(self):
        print(
            f"Account: {self.get_account().address}",
            f"Config: {self.path}",
            f"Registry: {self.registry_filepath}",
            f"Verify: {self.verify}",
            f"Ecosystem: {networks.provider.network.ecosystem.name}",
            f"Network: {networks.provider.network.name}",
            f"Profile: {self.profile.name}",
            f"Chain ID: {self.chain_id}",
            f"Gas Price: {self.profile.gas_price or networks.provider.gas_price}",
            sep="\n",
        )
