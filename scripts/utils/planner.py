from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from scripts.utils import log
from scripts.utils.components import ComponentSpec, Kind
from scripts.utils.errors import (AddressMismatch, AlreadyDeployed, IncompatibleUpgrade,
                                  InvalidAddress, MissingParameter, NotUpgradeable,
                                  NotYetDeployed, Unconfirmed)
from scripts.utils.helpers import ZERO_ADDRESS, checksum, is_valid_address, same_address
from scripts.utils.layout import check_storage_compatibility


class Action(str, Enum):
    DEPLOY = "deploy"
    UPGRADE = "upgrade"
    ATTACH = "attach"


@dataclass(frozen=True)
class DeploymentPlan:
    component: str
    network: str
    action: Action
    kind: Kind
    contract: str
    args: Tuple = ()
    arg_types: Tuple = ()
    # existing proxy for upgrades, explicit address for attach
    target: Optional[str] = None
    run_initializer: bool = False
    layout: Optional[list] = None


class Planner:
    """
    Turns (component, network, action) into a concrete `DeploymentPlan`.

    The action is always chosen by the caller. The planner only checks that
    it is consistent with the ledger: `deploy` of an upgradeable component
    needs no record, `upgrade` needs one, `attach` must agree with it.
    No chain interaction happens here.
    """

    def __init__(self, registry, ledger, artifacts=None):
        self.registry = registry
        self.ledger = ledger
        self.artifacts = artifacts

    def plan(self, spec: ComponentSpec, network, action, address=None, contract=None) -> DeploymentPlan:
        action = Action(action)
        profile = self.registry.lookup(network)
        record = self.ledger.record(spec.name, network)

        if record is not None and not record.confirmed:
            raise Unconfirmed(
                component=spec.name, network=network, address=record.address)

        if action is Action.DEPLOY:
            return self._plan_deploy(spec, profile, record)
        if action is Action.UPGRADE:
            return self._plan_upgrade(spec, profile, record, contract)
        return self._plan_attach(spec, network, record, address)

    def _resolve(self, spec, profile):
        try:
            args = spec.resolve_args(profile)
        except MissingParameter as e:
            e.component = spec.name
            raise
        return tuple(args), tuple(spec.arg_types)

    def _layout(self, contract):
        if self.artifacts is None or contract not in self.artifacts:
            return None
        return self.artifacts.storage_layout(contract)

    def _plan_deploy(self, spec, profile, record):
        if spec.upgradeable and record is not None:
            raise AlreadyDeployed(
                component=spec.name, network=profile.name, address=record.address)

        args, arg_types = self._resolve(spec, profile)
        if record is not None:
            log.warn(f"{spec.name} already deployed at {record.address} on {profile.name}, deploying a new instance")

        return DeploymentPlan(
            component=spec.name,
            network=profile.name,
            action=Action.DEPLOY,
            kind=spec.kind,
            contract=spec.contract,
            args=args,
            arg_types=arg_types,
            run_initializer=spec.upgradeable,
            layout=self._layout(spec.contract) if spec.upgradeable else None,
        )

    def _plan_upgrade(self, spec, profile, record, contract):
        if not spec.upgradeable:
            raise NotUpgradeable(component=spec.name, network=profile.name)
        if record is None:
            raise NotYetDeployed(component=spec.name, network=profile.name)

        contract = contract or spec.contract
        args, arg_types = self._resolve(spec, profile)
        layout = self._layout(contract)

        if record.layout and layout:
            problems = check_storage_compatibility(record.layout, layout)
            if problems:
                raise IncompatibleUpgrade(
                    f"{contract} cannot replace {record.contract or spec.contract}",
                    problems=problems,
                    component=spec.name, network=profile.name, address=record.proxy_address)
        else:
            log.warn(f"Storage layout unknown for {spec.name}, skipping compatibility check")

        return DeploymentPlan(
            component=spec.name,
            network=profile.name,
            action=Action.UPGRADE,
            kind=spec.kind,
            contract=contract,
            args=args,
            arg_types=arg_types,
            target=record.proxy_address,
            run_initializer=False,
            layout=layout,
        )

    def _plan_attach(self, spec, network, record, address):
        if not is_valid_address(address) or same_address(address, ZERO_ADDRESS):
            raise InvalidAddress(component=spec.name, network=network, address=address)

        address = checksum(address)
        if record is not None and not same_address(record.address, address):
            raise AddressMismatch(
                f"{spec.name} is recorded at {record.address}",
                component=spec.name, network=network, address=address)

        return DeploymentPlan(
            component=spec.name,
            network=network,
            action=Action.ATTACH,
            kind=spec.kind,
            contract=spec.contract,
            target=address,
        )
