import os

from config.BluePrint import (COMPONENTS, DEFAULT_CONFIRMATIONS, DEFAULT_POLL_DELAY,
                              DEFAULT_TIMEOUT, NETWORKS)
from scripts.utils.components import load_components
from scripts.utils.registry import NetworkRegistry


class BluePrint:
    def __init__(self, networks=NETWORKS, components=COMPONENTS, registry=None):
        self.registry = registry or NetworkRegistry.from_blueprint(networks)
        self.components = load_components(components)


class DeployArgs:
    def __init__(self, sender, network, blueprint=None, rpc=None, confirmations=None,
                 timeout=DEFAULT_TIMEOUT, poll_delay=DEFAULT_POLL_DELAY,
                 history_dir=None):
        self.sender = sender
        self.network = network
        self.blueprint = blueprint or BluePrint()
        self.profile = self.blueprint.registry.lookup(network)
        self.rpc = rpc or self._default_rpc()
        self.confirmations = (
            confirmations if confirmations is not None
            else self.profile.confirmations or DEFAULT_CONFIRMATIONS
        )
        self.timeout = timeout
        self.poll_delay = poll_delay
        self.history_dir = history_dir

    def _default_rpc(self):
        if self.profile.rpc_env and os.environ.get(self.profile.rpc_env):
            return os.environ[self.profile.rpc_env]
        return self.profile.default_rpc

    def __repr__(self):
        return (
            f"DeployArgs(network={self.network}, rpc={self.rpc}, "
            f"confirmations={self.confirmations}, timeout={self.timeout})"
        )
