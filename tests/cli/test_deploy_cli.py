import json

import pytest
from click.testing import CliRunner

from conf_mock import FakeGateway
from scripts.deploy import cli
from scripts.utils.helpers import TEST_PRIVATE_KEY


@pytest.fixture
def chain(monkeypatch):
    gateway = FakeGateway(chain_id=11155111)
    monkeypatch.setattr("scripts.deploy.make_gateway", lambda deploy_args, artifacts: gateway)
    monkeypatch.setenv("DEPLOYER_PRIVATE_KEY", TEST_PRIVATE_KEY)
    return gateway


@pytest.fixture
def run(tmp_path):
    runner = CliRunner()

    def run(*args):
        return runner.invoke(cli, [
            "--silent",
            "--history-dir", str(tmp_path / "history"),
            "--artifacts-dir", str(tmp_path / "artifacts"),
            *args,
        ])
    yield run


def _ledger(tmp_path, network="sepolia"):
    return json.loads((tmp_path / "history" / network / "ledger.json").read_text())["records"]


def test_deploy_manager(run, chain, tmp_path):
    result = run("-n", "sepolia", "-c", "Manager", "-x", "deploy")

    assert result.exit_code == 0, result.output
    record = _ledger(tmp_path)["Manager"]
    assert record["kind"] == "upgradeable"
    assert record["initialized"] is True
    assert record["address"] in result.output
    assert "https://sepolia.etherscan.io/address/" in result.output


def test_deploy_then_upgrade(run, chain, tmp_path):
    assert run("-c", "Manager", "-x", "deploy").exit_code == 0
    proxy = _ledger(tmp_path)["Manager"]["proxyAddress"]

    result = run("-c", "Manager", "-x", "upgrade")

    assert result.exit_code == 0, result.output
    record = _ledger(tmp_path)["Manager"]
    assert record["proxyAddress"] == proxy
    assert len(record["implementations"]) == 2
    assert record["status"] == "upgraded"


def test_deploy_twice(run, chain, tmp_path):
    run("-c", "Manager", "-x", "deploy")
    before = _ledger(tmp_path)

    result = run("-c", "Manager", "-x", "deploy")

    assert result.exit_code == 6
    assert "AlreadyDeployed" in result.output
    assert _ledger(tmp_path) == before


def test_upgrade_before_deploy(run, chain):
    result = run("-c", "Manager", "-x", "upgrade")

    assert result.exit_code == 7
    assert chain.calls == []


def test_attach_mismatch(run, chain):
    run("-c", "Sender", "-x", "deploy")

    result = run("-c", "Sender", "-x", "attach", "--address", "0xdef0000000000000000000000000000000000def")

    assert result.exit_code == 8


def test_attach_invalid_address(run, chain):
    result = run("-c", "Sender", "-x", "attach", "--address", "0x1234")
    assert result.exit_code == 5


def test_missing_parameter(run, monkeypatch):
    monkeypatch.setattr("scripts.deploy.make_gateway", lambda deploy_args, artifacts: FakeGateway(chain_id=56))
    monkeypatch.setenv("DEPLOYER_PRIVATE_KEY", TEST_PRIVATE_KEY)

    result = run("-n", "bsc", "-c", "Sender", "-x", "deploy")

    assert result.exit_code == 4
    assert "router" in result.output


def test_wrong_chain(run, monkeypatch):
    monkeypatch.setattr("scripts.deploy.make_gateway", lambda deploy_args, artifacts: FakeGateway(chain_id=1))
    monkeypatch.setenv("DEPLOYER_PRIVATE_KEY", TEST_PRIVATE_KEY)

    result = run("-n", "polygonAmoy", "-c", "Sender", "-x", "deploy")

    assert result.exit_code == 15


def test_timeout_then_reconcile(run, chain, tmp_path):
    chain.fail_next("timeout")

    result = run("-c", "NFT", "-x", "deploy")
    assert result.exit_code == 10
    assert _ledger(tmp_path)["NFT"]["status"] == "unconfirmed"

    result = run("-c", "NFT", "-x", "deploy")
    assert result.exit_code == 11

    result = run("-c", "NFT", "-x", "reconcile")
    assert result.exit_code == 0, result.output
    assert _ledger(tmp_path)["NFT"]["status"] == "deployed"


def test_missing_deployer_key(run, chain, monkeypatch):
    monkeypatch.delenv("DEPLOYER_PRIVATE_KEY")

    result = run("-c", "Manager", "-x", "deploy")

    assert result.exit_code == 1
    assert "DEPLOYER_PRIVATE_KEY" in result.output
    assert chain.calls == []


def test_show_needs_no_key(run, chain, monkeypatch):
    run("-c", "Sender", "-x", "deploy")
    monkeypatch.delenv("DEPLOYER_PRIVATE_KEY")

    result = run("-c", "Sender", "-x", "show")

    assert result.exit_code == 0, result.output
    assert "Sender [deployed]" in result.output
