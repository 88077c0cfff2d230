from scripts.utils import log
from scripts.utils.errors import AddressMismatch, ConfirmationTimeout, NotYetDeployed
from scripts.utils.helpers import encode_args, same_address
from scripts.utils.ledger import DEPLOYED, UNCONFIRMED, UPGRADED, DeploymentRecord
from scripts.utils.planner import Action, DeploymentPlan


class Executor:
    """
    Carries out a `DeploymentPlan` through the gateway and writes the outcome
    to the ledger.

    A failed chain call commits nothing. A transaction that was broadcast but
    not confirmed in time is committed as `unconfirmed` and the error is
    re-raised; only `reconcile` can promote it afterwards.
    """

    def __init__(self, gateway, ledger):
        self.gateway = gateway
        self.ledger = ledger

    def execute(self, plan: DeploymentPlan) -> DeploymentRecord:
        log.h2(f"{plan.action.value.capitalize()} {plan.component} ({plan.contract}) on {plan.network}")

        if plan.action is Action.ATTACH:
            return self._attach(plan)
        if plan.action is Action.UPGRADE:
            return self._upgrade(plan)
        if plan.run_initializer:
            return self._deploy_proxy(plan)
        return self._deploy(plan)

    def _new_record(self, plan, **fields):
        return DeploymentRecord(
            network=plan.network,
            component=plan.component,
            kind=plan.kind.record_kind,
            contract=plan.contract,
            args=encode_args(plan.arg_types, plan.args),
            **fields,
        )

    def _reraise(self, e, plan):
        e.component, e.network = plan.component, plan.network
        if e.cancelled is not None:
            # pending state is on disk, now honour the interrupt
            raise e.cancelled from e
        raise e

    def _deploy(self, plan):
        # an immutable redeploy keeps the live record until the new one confirms
        previous = self.ledger.record(plan.component, plan.network)
        try:
            address = self.gateway.deploy(plan.contract, list(plan.args))
        except ConfirmationTimeout as e:
            if e.address:
                self.ledger.commit(self._new_record(
                    plan,
                    address=e.address,
                    status=UNCONFIRMED,
                    pending={"previous": previous.to_dict()} if previous else None,
                ))
                log.warn(f"{plan.component} recorded as unconfirmed at {e.address}")
            self._reraise(e, plan)

        record = self._new_record(plan, address=address, status=DEPLOYED)
        self.ledger.commit(record)
        log.h3(f"{plan.component} deployed at {address}")
        return record

    def _deploy_proxy(self, plan):
        try:
            deployment = self.gateway.deploy_proxy(plan.contract, list(plan.args))
        except ConfirmationTimeout as e:
            # a pending proxy carries the initializer call in its constructor
            if e.address and e.implementation:
                self.ledger.commit(self._new_record(
                    plan,
                    address=e.address,
                    proxy_address=e.address,
                    implementations=[e.implementation],
                    initialized=False,
                    status=UNCONFIRMED,
                    layout=plan.layout,
                ))
                log.warn(f"{plan.component} proxy recorded as unconfirmed at {e.address}")
            else:
                log.warn(f"Implementation of {plan.component} at {e.address} not confirmed, no proxy was sent")
            self._reraise(e, plan)

        record = self._new_record(
            plan,
            address=deployment.proxy_address,
            proxy_address=deployment.proxy_address,
            implementations=[deployment.implementation_address],
            initialized=True,
            status=DEPLOYED,
            layout=plan.layout,
        )
        self.ledger.commit(record)
        log.h3(f"{plan.component} proxy deployed at {deployment.proxy_address}")
        log.h3(f"{plan.component} implementation deployed at {deployment.implementation_address}")
        return record

    def _upgrade(self, plan):
        current = self.ledger.record(plan.component, plan.network)
        if current is None:
            raise NotYetDeployed(component=plan.component, network=plan.network)
        if not same_address(current.proxy_address, plan.target):
            raise AddressMismatch(
                f"Plan targets {plan.target} but {plan.component} proxy is {current.proxy_address}",
                component=plan.component, network=plan.network, address=plan.target)

        try:
            implementation = self.gateway.upgrade_proxy(current.proxy_address, plan.contract)
        except ConfirmationTimeout as e:
            if e.implementation:
                self.ledger.commit(current.evolve(
                    implementations=current.implementations + [e.implementation],
                    status=UNCONFIRMED,
                    pending={"contract": plan.contract, "layout": plan.layout},
                ))
                log.warn(f"{plan.component} upgrade to {e.implementation} recorded as unconfirmed")
            else:
                log.warn(f"New implementation of {plan.component} at {e.address} not confirmed, proxy untouched")
            e.address = e.address or current.proxy_address
            self._reraise(e, plan)

        record = current.evolve(
            implementations=current.implementations + [implementation],
            status=UPGRADED,
            contract=plan.contract,
            layout=plan.layout or current.layout,
        )
        self.ledger.commit(record)
        log.h3(f"{plan.component} proxy {record.proxy_address} now points to {implementation}")
        return record

    def _attach(self, plan):
        self.gateway.attach(plan.contract, plan.target)

        current = self.ledger.record(plan.component, plan.network)
        if current is not None:
            if not same_address(current.address, plan.target):
                raise AddressMismatch(
                    f"{plan.component} is recorded at {current.address}",
                    component=plan.component, network=plan.network, address=plan.target)
            log.h3(f"{plan.component} attached at {plan.target}")
            return current

        if plan.kind.record_kind == "upgradeable":
            implementation = self.gateway.implementation_of(plan.target)
            record = self._new_record(
                plan,
                address=plan.target,
                proxy_address=plan.target,
                implementations=[implementation] if implementation else [],
                initialized=True,
                status=DEPLOYED,
            )
        else:
            record = self._new_record(plan, address=plan.target, status=DEPLOYED)

        # nothing was deployed here, the constructor arguments are unknown
        record.args = None
        self.ledger.commit(record)
        log.h3(f"{plan.component} attached at {plan.target} and recorded")
        return record

    def reconcile(self, component, network):
        """
        Settle an `unconfirmed` record by re-querying the chain.

        Returns the promoted record, the record it replaced when a redeploy
        never landed, or None when a first deployment never landed and the
        record was dropped.
        """
        record = self.ledger.record(component, network)
        if record is None:
            raise NotYetDeployed(component=component, network=network)
        if record.confirmed:
            log.h3(f"{component} on {network} is already {record.status}, nothing to reconcile")
            return record

        log.h2(f"Reconciling {component} on {network}")

        if not record.upgradeable or not record.initialized:
            # pending deployment (immutable contract, redeploy or proxy)
            previous = (record.pending or {}).get("previous")
            if not self.gateway.code_at(record.address):
                if previous:
                    restored = self.ledger.commit(DeploymentRecord.from_dict(previous))
                    log.warn(f"No code at {record.address}, {component} stays at {restored.address}")
                    return restored
                self.ledger.remove(component, network)
                log.warn(f"No code at {record.address}, dropped the record for {component}")
                return None

            promoted = record.evolve(status=DEPLOYED, initialized=record.upgradeable, pending=None)
            self.ledger.commit(promoted)
            log.h3(f"{component} confirmed at {record.address}")
            return promoted

        # pending upgrade
        on_chain = self.gateway.implementation_of(record.proxy_address)
        pending = record.implementations[-1]
        previous = record.implementations[:-1]

        if same_address(on_chain, pending):
            pending_info = record.pending or {}
            promoted = record.evolve(
                status=UPGRADED,
                contract=pending_info.get("contract", record.contract),
                layout=pending_info.get("layout") or record.layout,
                pending=None,
            )
            self.ledger.commit(promoted)
            log.h3(f"{component} upgrade to {pending} confirmed")
            return promoted

        if previous and same_address(on_chain, previous[-1]):
            rolled_back = record.evolve(
                implementations=previous,
                status=UPGRADED if len(previous) > 1 else DEPLOYED,
                pending=None,
            )
            self.ledger.commit(rolled_back)
            log.warn(f"{component} upgrade to {pending} never landed, proxy still at {on_chain}")
            return rolled_back

        raise AddressMismatch(
            f"Proxy {record.proxy_address} points to {on_chain}, expected {pending}",
            component=component, network=network, address=on_chain)
