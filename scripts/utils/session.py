from scripts.utils import log
from scripts.utils.components import get_component
from scripts.utils.deploy_args import DeployArgs
from scripts.utils.errors import WrongChain
from scripts.utils.executor import Executor
from scripts.utils.ledger import Ledger
from scripts.utils.planner import Planner


class Session:
    """
    One deployment session against one network.

    Lifecycle: load the ledger snapshot of the network, run actions one at a
    time (each waits for its transaction to confirm before returning), then
    `end()` flushes the ledger. Sessions for different networks share nothing
    but the read-only registry.
    """

    def __init__(self, deploy_args: DeployArgs, gateway, store, artifacts=None):
        self._deploy_args = deploy_args
        self.gateway = gateway
        self.ledger = Ledger(store)
        self.ledger.load(deploy_args.network)
        self.planner = Planner(self.registry, self.ledger, artifacts)
        self.executor = Executor(gateway, self.ledger)

    @property
    def network(self):
        return self._deploy_args.network

    @property
    def profile(self):
        return self._deploy_args.profile

    @property
    def registry(self):
        return self._deploy_args.blueprint.registry

    @property
    def components(self):
        return self._deploy_args.blueprint.components

    def check_chain(self):
        """Refuse to touch a chain whose id differs from the network profile."""
        chain_id = self.gateway.chain_id()
        if chain_id != self.profile.chain_id:
            raise WrongChain(
                f"RPC reports chain id {chain_id}, {self.network} expects {self.profile.chain_id}",
                network=self.network)
        log.h3(f"Connected to {self.network} (chain id {chain_id})")

    def plan(self, component, action, address=None, contract=None):
        spec = get_component(self.components, component)
        return self.planner.plan(spec, self.network, action, address=address, contract=contract)

    def run(self, component, action, address=None, contract=None):
        """
        Plan and execute a single action. Planner errors are raised before
        anything is sent to the chain.
        """
        plan = self.plan(component, action, address=address, contract=contract)
        return self.executor.execute(plan)

    def deploy(self, component):
        return self.run(component, "deploy")

    def upgrade(self, component, contract=None):
        return self.run(component, "upgrade", contract=contract)

    def attach(self, component, address):
        return self.run(component, "attach", address=address)

    def reconcile(self, component):
        get_component(self.components, component)
        return self.executor.reconcile(component, self.network)

    def records(self):
        return self.ledger.records(self.network)

    def end(self):
        """
        Ends the session and flushes the ledger
        """
        self.ledger.flush(self.network)
        log.info(f"Deployment session for {self.network} closed")
