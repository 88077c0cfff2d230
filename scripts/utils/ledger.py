import os
from dataclasses import dataclass, field, replace
from typing import List, Optional

from scripts.utils import json_file, log

HISTORY_DIR = "./deployment_history"

UNCONFIRMED = "unconfirmed"
DEPLOYED = "deployed"
UPGRADED = "upgraded"


@dataclass
class DeploymentRecord:
    network: str
    component: str
    kind: str  # "immutable" or "upgradeable"
    address: str
    proxy_address: Optional[str] = None
    implementations: List[str] = field(default_factory=list)
    initialized: bool = False
    status: str = DEPLOYED
    contract: Optional[str] = None
    args: Optional[str] = None
    layout: Optional[list] = None
    # contract and layout of an upgrade awaiting reconciliation
    pending: Optional[dict] = None

    @property
    def upgradeable(self):
        return self.kind == "upgradeable"

    @property
    def confirmed(self):
        return self.status != UNCONFIRMED

    @property
    def implementation(self):
        return self.implementations[-1] if self.implementations else None

    def evolve(self, **changes):
        """Copy of the record with `changes` applied; the original is left untouched."""
        if "implementations" not in changes:
            changes["implementations"] = list(self.implementations)
        return replace(self, **changes)

    def to_dict(self):
        data = {
            "network": self.network,
            "component": self.component,
            "kind": self.kind,
            "address": self.address,
            "initialized": self.initialized,
            "status": self.status,
        }
        if self.upgradeable:
            data["proxyAddress"] = self.proxy_address
            data["implementations"] = list(self.implementations)
        if self.contract is not None:
            data["contract"] = self.contract
        if self.args is not None:
            data["args"] = self.args
        if self.layout is not None:
            data["layout"] = self.layout
        if self.pending is not None:
            data["pending"] = self.pending
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            network=data["network"],
            component=data["component"],
            kind=data["kind"],
            address=data["address"],
            proxy_address=data.get("proxyAddress"),
            implementations=list(data.get("implementations") or []),
            initialized=bool(data.get("initialized", False)),
            status=data.get("status", DEPLOYED),
            contract=data.get("contract"),
            args=data.get("args"),
            layout=data.get("layout"),
            pending=data.get("pending"),
        )


class JsonLedgerStore:
    """
    Persists one JSON file per network:
    `<history_dir>/<network>/ledger.json` -> {component: record}
    """

    def __init__(self, history_dir=HISTORY_DIR):
        self.history_dir = history_dir

    def _filename(self, network):
        return os.path.join(self.history_dir, network, "ledger.json")

    def load(self, network):
        filename = self._filename(network)
        if not os.path.exists(filename):
            return {}
        return json_file.load(filename).get("records", {})

    def save(self, network, mapping):
        json_file.save(self._filename(network), {"network": network, "records": mapping})

    def networks(self):
        if not os.path.isdir(self.history_dir):
            return []
        return sorted(
            name for name in os.listdir(self.history_dir)
            if os.path.exists(self._filename(name))
        )


class Ledger:
    """
    Component -> deployment record bookkeeping for a session, partitioned by
    network. Every mutation is written through to the store.
    """

    def __init__(self, store):
        self._store = store
        self._records = {}

    def load(self, network):
        """Hydrate the partition of `network` from the store."""
        snapshot = self._store.load(network)
        self._records[network] = {
            component: DeploymentRecord.from_dict(data)
            for component, data in snapshot.items()
        }
        log.h3(f"Loaded {len(self._records[network])} deployment record(s) for {network}")
        return self._records[network]

    def _partition(self, network):
        if network not in self._records:
            self.load(network)
        return self._records[network]

    def record(self, component, network) -> Optional[DeploymentRecord]:
        return self._partition(network).get(component)

    def records(self, network):
        return list(self._partition(network).values())

    def commit(self, record: DeploymentRecord):
        self._partition(record.network)[record.component] = record
        self.flush(record.network)
        return record

    def remove(self, component, network):
        removed = self._partition(network).pop(component, None)
        self.flush(network)
        return removed

    def history(self, component, network, include_pending=False):
        """
        Implementations behind the proxy of `component`, oldest first.
        An implementation awaiting reconciliation is left out unless
        `include_pending` is set.
        """
        record = self.record(component, network)
        if record is None or not record.upgradeable:
            return []
        if record.confirmed or include_pending:
            return list(record.implementations)
        if not record.initialized:
            # the proxy itself is pending
            return []
        return list(record.implementations[:-1])

    def flush(self, network=None):
        networks = [network] if network else list(self._records.keys())
        for name in networks:
            self._store.save(name, {
                component: record.to_dict()
                for component, record in self._records.get(name, {}).items()
            })
