from pathlib import Path

import auditsign_deploy

#
# Filesystem
#

DEPLOYMENT_DIR = Path(auditsign_deploy.__file__).parent
CONSTRUCTOR_PARAMS_DIR = DEPLOYMENT_DIR / "constructor_params"
ARTIFACTS_DIR = DEPLOYMENT_DIR / "artifacts"

AUDITSIGN_PARAMS_FILEPATH = CONSTRUCTOR_PARAMS_DIR / "auditsign.yml"

#
# Chains
#

MAINNET_CHAIN_ID = 1

#
# Contracts
#

ROOT_CONTRACT_NAME = "auditSign"
MIRROR_CONTRACT_NAME = "auditSignMirror"
AUDITSIGN_CONTRACTS = [ROOT_CONTRACT_NAME, MIRROR_CONTRACT_NAME]

INITIALIZER_METHOD = "initialize"

OZ_DEPENDENCY_NAME = "openzeppelin"
OZ_DEPENDENCY_VERSION = "3.4.0"

PROXY_CONTRACT_NAME = "TransparentUpgradeableProxy"
PROXY_ADMIN_CONTRACT_NAME = "ProxyAdmin"

# EIP1967 Admin slot - https://eips.ethereum.org/EIPS/eip-1967#admin-address
EIP1967_ADMIN_SLOT = 0xB53127684A568B3173AE13B9F8A6016E243E63B6E8EE1178D6A717850B5D6103

#
# Environment
#

PRIVATE_KEY_ENVVAR = "PRIVATE_KEY"
PASSPHRASE_ENVVAR = "DEPLOYER_PASSPHRASE"
INFURA_ENVVAR = "WEB3_INFURA_PROJECT_ID"
ETHERSCAN_ENVVAR = "ETHERSCAN_API_KEY"

DEPLOYER_ACCOUNT_ALIAS = "AUDITSIGN_DEPLOYER"
