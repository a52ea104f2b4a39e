from pathlib import Path

import pytest

from auditsign_deploy.constants import ARTIFACTS_DIR
from auditsign_deploy.utils import DeploymentConfigError, get_artifact_filepath, validate_config


def test_validate_shipped_config(config, registry_filepath):
    assert validate_config(config) == registry_filepath


def test_default_artifacts_dir():
    assert get_artifact_filepath({"artifacts": {"filename": "x.json"}}) == ARTIFACTS_DIR / "x.json"


def test_missing_artifact_filename():
    with pytest.raises(DeploymentConfigError, match="artifact filename"):
        get_artifact_filepath({"artifacts": {"dir": "."}})


@pytest.mark.parametrize("field", ["deployment", "constants", "initializer", "proxy_admin_owner"])
def test_missing_fields(config, field):
    del config[field]
    with pytest.raises(DeploymentConfigError, match=field):
        validate_config(config)


def test_empty_config():
    with pytest.raises(DeploymentConfigError):
        validate_config(None)


def test_missing_root_chain_id(config):
    del config["deployment"]["root_chain_id"]
    with pytest.raises(DeploymentConfigError, match="root_chain_id"):
        validate_config(config)


def test_root_chain_id_must_be_integer(config):
    config["deployment"]["root_chain_id"] = "1"
    with pytest.raises(DeploymentConfigError, match="integer"):
        validate_config(config)


def test_initializer_must_be_a_list(config):
    config["initializer"] = "$IPFS_BASE"
    with pytest.raises(DeploymentConfigError, match="list"):
        validate_config(config)


def test_missing_mirror_root_address(config):
    del config["mirror"]
    with pytest.raises(DeploymentConfigError, match="root_address"):
        validate_config(config)


def test_config_error_is_a_value_error():
    assert issubclass(DeploymentConfigError, ValueError)
    filepath = get_artifact_filepath({"artifacts": {"filename": "a.json", "dir": "d"}})
    assert filepath == Path("d") / "a.json"
