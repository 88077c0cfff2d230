from dataclasses import dataclass
from typing import Optional

from scripts.utils.errors import DuplicateNetwork, MissingParameter, UnknownNetwork
from scripts.utils.helpers import ZERO_ADDRESS, checksum


@dataclass(frozen=True)
class NftMetadata:
    name: str
    symbol: str
    base_uri: str


@dataclass(frozen=True)
class NetworkProfile:
    """Immutable deployment parameters of one chain."""

    name: str
    chain_id: int
    router: Optional[str] = None
    outbound_selector: Optional[int] = None
    inbound_selector: Optional[int] = None
    nft: Optional[NftMetadata] = None
    rpc_env: Optional[str] = None
    default_rpc: Optional[str] = None
    explorer_url: Optional[str] = None
    confirmations: Optional[int] = None

    def get(self, key):
        """
        Resolves a dotted parameter key (`router`, `nft.symbol`, ...).
        Raises `MissingParameter` when the value is absent, empty or zero.
        """
        value = self
        for part in key.split("."):
            value = getattr(value, part, None)
            if value is None:
                break

        if value is None or value == "" or value == 0 or value == ZERO_ADDRESS:
            raise MissingParameter(
                f"Parameter `{key}` is not set", network=self.name)
        return value

    @classmethod
    def from_blueprint(cls, name, params):
        nft = params.get("NFT")
        router = params.get("ROUTER")
        return cls(
            name=name,
            chain_id=params["CHAIN_ID"],
            router=checksum(router) if router else None,
            outbound_selector=params.get("OUTBOUND_SELECTOR"),
            inbound_selector=params.get("INBOUND_SELECTOR"),
            nft=NftMetadata(nft["NAME"], nft["SYMBOL"], nft["BASE_URI"]) if nft else None,
            rpc_env=params.get("RPC_ENV"),
            default_rpc=params.get("DEFAULT_RPC"),
            explorer_url=params.get("EXPLORER_URL"),
            confirmations=params.get("CONFIRMATIONS"),
        )


class NetworkRegistry:
    """
    Network id -> NetworkProfile lookup table. Append-only for the lifetime of
    a session, so parameters cannot drift once a plan was built from them.
    """

    def __init__(self, profiles=None):
        self._profiles = {}
        for network, profile in (profiles or {}).items():
            self.register(network, profile)

    @classmethod
    def from_blueprint(cls, networks):
        return cls({
            name: NetworkProfile.from_blueprint(name, params)
            for name, params in networks.items()
        })

    def register(self, network, profile):
        if network in self._profiles:
            raise DuplicateNetwork(network=network)
        self._profiles[network] = profile

    def lookup(self, network):
        try:
            return self._profiles[network]
        except KeyError:
            raise UnknownNetwork(network=network) from None

    def networks(self):
        return list(self._profiles.keys())

    def __contains__(self, network):
        return network in self._profiles
