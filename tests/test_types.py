import click
from click.testing import CliRunner

from auditsign_deploy.types import ChecksumAddress
from tests.conftest import SAFE_BYTEROCKET_ETH


@click.command()
@click.option("--address", type=ChecksumAddress(), required=True)
def echo_address(address):
    click.echo(address)


def test_checksum_address_option():
    result = CliRunner().invoke(echo_address, ["--address", SAFE_BYTEROCKET_ETH.lower()])
    assert result.exit_code == 0
    assert result.output.strip() == SAFE_BYTEROCKET_ETH


def test_invalid_address_option():
    result = CliRunner().invoke(echo_address, ["--address", "0x1234"])
    assert result.exit_code != 0
    assert "not a valid ethereum address" in result.output
