"""
Contract factory gateway: the only place that talks to a chain.

The orchestrator treats every call here as slow and possibly failing. Calls
that write to the chain block until the transaction reaches the configured
confirmation depth, or raise `ConfirmationTimeout`. Nothing is retried: a
resubmission with a fresh nonce is the caller's decision.
"""

import time
from dataclasses import dataclass

from eth_utils import to_checksum_address
from web3 import Web3
from web3.exceptions import TimeExhausted, TransactionNotFound, Web3Exception

from scripts.utils import log
from scripts.utils.errors import ConfirmationTimeout, DeploymentError, TransactionFailed
from scripts.utils.helpers import ZERO_ADDRESS, predict_contract_address

PROXY_CONTRACT = "TransparentUpgradeableProxy"
PROXY_ADMIN_CONTRACT = "ProxyAdmin"

# ERC-1967 storage slots
IMPLEMENTATION_SLOT = 0x360894a13ba1a3210667c828492db98dca3e2076cc3735a920a3ca505d382bbc
ADMIN_SLOT = 0xb53127684a568b3173ae13b9f8a6016e243e63b6e8ee1178d6a717850b5d6103


@dataclass
class ProxyDeployment:
    proxy_address: str
    implementation_address: str


class ContractGateway:
    """Interface the executor relies on."""

    def chain_id(self) -> int:
        raise NotImplementedError

    def deploy(self, name, args) -> str:
        raise NotImplementedError

    def deploy_proxy(self, name, init_args) -> ProxyDeployment:
        raise NotImplementedError

    def upgrade_proxy(self, proxy_address, name) -> str:
        raise NotImplementedError

    def attach(self, name, address):
        raise NotImplementedError

    def code_at(self, address) -> bytes:
        raise NotImplementedError

    def implementation_of(self, proxy_address) -> str:
        raise NotImplementedError


def _address_from_slot(value) -> str:
    return to_checksum_address(bytes(value)[-20:])


class Web3Gateway(ContractGateway):
    """
    Deploys hardhat artifacts with web3.py, signing locally with an
    eth_account `LocalAccount`. Proxies are OpenZeppelin v5
    `TransparentUpgradeableProxy` instances, which create their own
    `ProxyAdmin` owned by the deployer.
    """

    def __init__(self, web3: Web3, sender, artifacts, confirmations=1, timeout=300, poll_delay=2):
        self.web3 = web3
        self.sender = sender
        self.artifacts = artifacts
        self.confirmations = confirmations
        self.timeout = timeout
        self.poll_delay = poll_delay

    @classmethod
    def from_rpc(cls, rpc, sender, artifacts, **kwargs):
        return cls(Web3(Web3.HTTPProvider(rpc)), sender, artifacts, **kwargs)

    def chain_id(self):
        return self.web3.eth.chain_id

    def _factory(self, name):
        artifact = self.artifacts.get(name)
        return self.web3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)

    def _send(self, build, description, creates_contract=False, implementation=None):
        """
        Sign and broadcast the transaction produced by `build(tx_params)`,
        then wait for the receipt and the confirmation depth.
        Returns the receipt.
        """
        nonce = self.web3.eth.get_transaction_count(self.sender.address, "pending")
        predicted = predict_contract_address(self.sender.address, nonce) if creates_contract else None
        tx_params = {
            "from": self.sender.address,
            "nonce": nonce,
            "chainId": self.web3.eth.chain_id,
        }

        try:
            tx = build(tx_params)
            signed = self.sender.sign_transaction(tx)
            tx_hash = self.web3.eth.send_raw_transaction(signed.raw_transaction)
        except (Web3Exception, ValueError) as e:
            raise TransactionFailed(f"{description} could not be sent: {e}", address=predicted) from e

        log.h3(f"{description}: tx {tx_hash.hex()} broadcast")

        # from here on the transaction may land whatever happens to this process
        pending = dict(tx_hash=tx_hash.hex(), address=predicted, implementation=implementation)
        try:
            return self._confirm(tx_hash, description, pending)
        except DeploymentError:
            raise
        except TimeExhausted as e:
            raise ConfirmationTimeout(
                f"{description} not mined after {self.timeout}s", **pending) from e
        except Exception as e:
            raise ConfirmationTimeout(
                f"Lost track of {description}: {e}", **pending) from e
        except (KeyboardInterrupt, SystemExit) as e:
            raise ConfirmationTimeout(
                f"Wait for {description} cancelled", cancelled=e, **pending) from e

    def _confirm(self, tx_hash, description, pending):
        deadline = time.monotonic() + self.timeout
        receipt = self.web3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=self.timeout, poll_latency=self.poll_delay)

        if receipt["status"] != 1:
            raise TransactionFailed(
                f"{description} reverted", tx_hash=pending["tx_hash"], address=pending["address"])

        self._wait_for_depth(
            receipt, deadline, description, pending["address"], pending["implementation"])
        return receipt

    def _wait_for_depth(self, receipt, deadline, description, address, implementation):
        while True:
            try:
                # the receipt can disappear on a reorg
                current = self.web3.eth.get_transaction_receipt(receipt["transactionHash"])
            except TransactionNotFound:
                current = None

            if current is not None:
                depth = self.web3.eth.block_number - current["blockNumber"]
                if depth >= self.confirmations:
                    log.h3(f"{description} confirmed with {depth} confirmation(s)")
                    return current

            if time.monotonic() >= deadline:
                raise ConfirmationTimeout(
                    f"{description} did not reach {self.confirmations} confirmation(s) in {self.timeout}s",
                    tx_hash=receipt["transactionHash"].hex(), address=address, implementation=implementation)
            time.sleep(self.poll_delay)

    def deploy(self, name, args):
        factory = self._factory(name)
        receipt = self._send(
            lambda params: factory.constructor(*args).build_transaction(params),
            f"Deploying {name}",
            creates_contract=True,
        )
        return to_checksum_address(receipt["contractAddress"])

    def deploy_proxy(self, name, init_args):
        """
        Deploy the implementation, then a proxy initialized with `init_args`.

        When the implementation transaction itself does not confirm, the
        `ConfirmationTimeout` carries its predicted address but no
        `implementation`, and no proxy was sent. That implementation is left
        orphaned: nothing points at it, so it is not recorded.
        """
        implementation = self.deploy(name, [])
        data = self._factory(name).encode_abi("initialize", args=list(init_args))

        proxy_factory = self._factory(PROXY_CONTRACT)
        receipt = self._send(
            lambda params: proxy_factory.constructor(
                implementation, self.sender.address, data).build_transaction(params),
            f"Deploying {PROXY_CONTRACT} for {name}",
            creates_contract=True,
            implementation=implementation,
        )
        return ProxyDeployment(
            proxy_address=to_checksum_address(receipt["contractAddress"]),
            implementation_address=implementation,
        )

    def admin_of(self, proxy_address):
        return _address_from_slot(self.web3.eth.get_storage_at(proxy_address, ADMIN_SLOT))

    def upgrade_proxy(self, proxy_address, name):
        """
        Deploy a new implementation and point `proxy_address` at it without
        calling the initializer. As with `deploy_proxy`, an implementation
        that does not confirm is orphaned and the proxy is not touched.
        """
        implementation = self.deploy(name, [])
        admin = self.web3.eth.contract(
            address=self.admin_of(proxy_address),
            abi=self.artifacts.get(PROXY_ADMIN_CONTRACT).abi,
        )
        # empty calldata: the initializer must not run again
        self._send(
            lambda params: admin.functions.upgradeAndCall(
                proxy_address, implementation, b"").build_transaction(params),
            f"Upgrading {proxy_address} to {name}",
            implementation=implementation,
        )
        return implementation

    def attach(self, name, address):
        return self.web3.eth.contract(address=address, abi=self.artifacts.get(name).abi)

    def code_at(self, address):
        return bytes(self.web3.eth.get_code(address))

    def implementation_of(self, proxy_address):
        address = _address_from_slot(self.web3.eth.get_storage_at(proxy_address, IMPLEMENTATION_SLOT))
        return None if address == ZERO_ADDRESS else address
