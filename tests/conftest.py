import pytest

from config.BluePrint import COMPONENTS
from conf_mock import FakeArtifacts, FakeGateway, MemoryStore
from constants import (INBOUND_SELECTOR, NFT_BASE_URI, NFT_NAME, NFT_SYMBOL, ROUTER,
                       SELECTOR, SEPOLIA_CHAIN_ID)
from scripts.utils.components import load_components
from scripts.utils.deploy_args import BluePrint, DeployArgs
from scripts.utils.executor import Executor
from scripts.utils.ledger import Ledger
from scripts.utils.planner import Planner
from scripts.utils.registry import NetworkProfile, NetworkRegistry, NftMetadata
from scripts.utils.session import Session


@pytest.fixture
def sepolia_profile():
    return NetworkProfile(
        name="sepolia",
        chain_id=SEPOLIA_CHAIN_ID,
        router=ROUTER,
        outbound_selector=SELECTOR,
        inbound_selector=INBOUND_SELECTOR,
        nft=NftMetadata(NFT_NAME, NFT_SYMBOL, NFT_BASE_URI),
        confirmations=1,
    )


@pytest.fixture
def bare_profile():
    # chain known, bridge parameters not published yet
    return NetworkProfile(name="bare", chain_id=56)


@pytest.fixture
def registry(sepolia_profile, bare_profile):
    return NetworkRegistry({
        "sepolia": sepolia_profile,
        "bare": bare_profile,
    })


@pytest.fixture
def components():
    return load_components(COMPONENTS)


@pytest.fixture
def manager(components):
    return components["Manager"]


@pytest.fixture
def sender_spec(components):
    return components["Sender"]


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def ledger(store):
    return Ledger(store)


@pytest.fixture
def gateway():
    return FakeGateway(chain_id=SEPOLIA_CHAIN_ID)


@pytest.fixture
def artifacts():
    return FakeArtifacts()


@pytest.fixture
def planner(registry, ledger, artifacts):
    return Planner(registry, ledger, artifacts)


@pytest.fixture
def executor(gateway, ledger):
    return Executor(gateway, ledger)


@pytest.fixture
def deploy_args(registry):
    return DeployArgs(None, "sepolia", blueprint=BluePrint(registry=registry))


@pytest.fixture
def session(deploy_args, gateway, store, artifacts):
    return Session(deploy_args, gateway, store, artifacts)
