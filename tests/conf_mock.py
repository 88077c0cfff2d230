from types import SimpleNamespace

from eth_utils import to_checksum_address

from scripts.utils.errors import ConfirmationTimeout, TransactionFailed
from scripts.utils.gateway import ContractGateway, ProxyDeployment


class FakeGateway(ContractGateway):
    """
    In-memory chain. Every write is recorded in `calls`.

    `fail_next(mode)` makes the next write misbehave:
      - "revert": nothing happens, TransactionFailed is raised
      - "timeout": the transaction lands but ConfirmationTimeout is raised
      - "lost": the transaction never lands and ConfirmationTimeout is raised
      - "interrupt": like "timeout", but the wait was cancelled with Ctrl-C
      - "orphan": proxy deploys and upgrades only, the implementation
        transaction does not confirm and nothing else is sent
    """

    def __init__(self, chain_id=11155111):
        self._chain_id = chain_id
        self._counter = 0
        self._mode = None
        self.calls = []
        self.code = {}
        self.implementations = {}
        self.initializer_runs = {}

    def fail_next(self, mode):
        self._mode = mode

    def _take_mode(self):
        mode, self._mode = self._mode, None
        return mode

    def _timeout(self, mode, message, **kwargs):
        cancelled = KeyboardInterrupt() if mode == "interrupt" else None
        return ConfirmationTimeout(message, cancelled=cancelled, **kwargs)

    def _next_address(self):
        self._counter += 1
        return to_checksum_address(f"0x{0xd0000 + self._counter:040x}")

    def chain_id(self):
        return self._chain_id

    def deploy(self, name, args):
        self.calls.append(("deploy", name, tuple(args)))
        mode = self._take_mode()
        if mode == "revert":
            raise TransactionFailed(f"Deploying {name} reverted")

        address = self._next_address()
        if mode != "lost":
            self.code[address] = b"\x60\x80"
        if mode in ("timeout", "lost", "interrupt"):
            raise self._timeout(mode, f"Deploying {name} timed out", tx_hash="0x01", address=address)
        return address

    def deploy_proxy(self, name, init_args):
        self.calls.append(("deploy_proxy", name, tuple(init_args)))
        mode = self._take_mode()
        if mode == "revert":
            raise TransactionFailed(f"Deploying proxy for {name} reverted")

        implementation = self._next_address()
        if mode == "orphan":
            raise self._timeout(mode, f"Deploying {name} timed out", tx_hash="0x01", address=implementation)
        self.code[implementation] = b"\x60\x80"
        proxy = self._next_address()
        if mode != "lost":
            self.code[proxy] = b"\x60\x80"
            self.implementations[proxy] = implementation
            self.initializer_runs[proxy] = self.initializer_runs.get(proxy, 0) + 1
        if mode in ("timeout", "lost", "interrupt"):
            raise self._timeout(
                mode, "Proxy deployment timed out", tx_hash="0x02", address=proxy, implementation=implementation)
        return ProxyDeployment(proxy_address=proxy, implementation_address=implementation)

    def upgrade_proxy(self, proxy_address, name):
        self.calls.append(("upgrade_proxy", proxy_address, name))
        mode = self._take_mode()
        if mode == "revert":
            raise TransactionFailed(f"Upgrading {proxy_address} reverted")

        implementation = self._next_address()
        if mode == "orphan":
            raise self._timeout(mode, f"Deploying {name} timed out", tx_hash="0x01", address=implementation)
        self.code[implementation] = b"\x60\x80"
        if mode != "lost":
            self.implementations[proxy_address] = implementation
        if mode in ("timeout", "lost", "interrupt"):
            raise self._timeout(mode, "Upgrade timed out", tx_hash="0x03", implementation=implementation)
        return implementation

    def attach(self, name, address):
        self.calls.append(("attach", name, address))
        return SimpleNamespace(name=name, address=address)

    def code_at(self, address):
        return self.code.get(address, b"")

    def implementation_of(self, proxy_address):
        return self.implementations.get(proxy_address)

    @property
    def writes(self):
        return [call for call in self.calls if call[0] != "attach"]


class MemoryStore:
    """Ledger store keeping snapshots in a dict, counting saves."""

    def __init__(self, snapshots=None):
        self.snapshots = snapshots or {}
        self.saves = 0

    def load(self, network):
        return dict(self.snapshots.get(network, {}))

    def save(self, network, mapping):
        self.saves += 1
        self.snapshots[network] = dict(mapping)


class FakeArtifacts:
    def __init__(self, layouts=None):
        self.layouts = layouts or {}

    def __contains__(self, name):
        return name in self.layouts

    def storage_layout(self, name):
        return self.layouts.get(name)
