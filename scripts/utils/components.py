from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

from scripts.utils.errors import UnknownComponent
from scripts.utils.helpers import checksum


class Kind(str, Enum):
    IMMUTABLE = "immutable"
    UPGRADEABLE = "upgradeable-transparent"

    @property
    def record_kind(self):
        # short form stored in the ledger
        return "immutable" if self is Kind.IMMUTABLE else "upgradeable"


@dataclass(frozen=True)
class Param:
    source: str  # "profile" or "literal"
    abi_type: str
    key: Optional[str] = None
    value: Any = None

    def resolve(self, profile):
        value = self.value if self.source == "literal" else profile.get(self.key)
        if self.abi_type == "address":
            return checksum(value)
        return value


@dataclass(frozen=True)
class ComponentSpec:
    name: str
    contract: str
    kind: Kind
    params: Tuple[Param, ...] = ()

    @property
    def upgradeable(self):
        return self.kind is Kind.UPGRADEABLE

    @property
    def arg_types(self):
        return [param.abi_type for param in self.params]

    def resolve_args(self, profile):
        return [param.resolve(profile) for param in self.params]


def _param(source, key_or_value, abi_type):
    if source == "literal":
        return Param(source, abi_type, value=key_or_value)
    if source == "profile":
        return Param(source, abi_type, key=key_or_value)
    raise ValueError(f"Unknown parameter source `{source}`")


def load_components(components):
    """
    Builds `ComponentSpec`s from the `COMPONENTS` table in config/BluePrint.py
    """
    return {
        name: ComponentSpec(
            name=name,
            contract=config["CONTRACT"],
            kind=Kind(config["KIND"]),
            params=tuple(_param(*param) for param in config["PARAMS"]),
        )
        for name, config in components.items()
    }


def get_component(components, name):
    try:
        return components[name]
    except KeyError:
        raise UnknownComponent(component=name) from None
