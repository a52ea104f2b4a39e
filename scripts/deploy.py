#!/usr/bin/python3

from auditsign_deploy.auditsign import deploy_audit_sign
from auditsign_deploy.constants import AUDITSIGN_PARAMS_FILEPATH
from auditsign_deploy.params import Deployer

VERIFY = True


def main():
    """
    Deploys auditSign (chain_id 1) or auditSignMirror (any other chain) behind a
    transparent proxy and transfers the ProxyAdmin to safe.byterocket.eth.
    """

    deployer = Deployer.from_yaml(filepath=AUDITSIGN_PARAMS_FILEPATH, verify=VERIFY)
    deployer.preflight()

    deployments = deploy_audit_sign(deployer)

    deployer.finalize(deployments=deployments)
