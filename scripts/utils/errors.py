class DeploymentError(Exception):
    """
    Base error for the deployment orchestrator.
    Carries the component, network and address that were being handled so a
    failure can be diagnosed without re-running the command.
    """

    exit_code = 1
    default_message = "Deployment failed"

    def __init__(self, message=None, component=None, network=None, address=None):
        self.message = message or self.default_message
        self.component = component
        self.network = network
        self.address = address
        super().__init__(self.message)

    def __str__(self):
        context = [
            f"{key}={value}"
            for key, value in (
                ("component", self.component),
                ("network", self.network),
                ("address", self.address),
            )
            if value is not None
        ]
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


# planner level: detected before any chain interaction


class UnknownNetwork(DeploymentError):
    exit_code = 2
    default_message = "No parameters registered for network"


class DuplicateNetwork(DeploymentError):
    exit_code = 3
    default_message = "Network is already registered"


class MissingParameter(DeploymentError):
    exit_code = 4
    default_message = "Required network parameter is empty"


class InvalidAddress(DeploymentError):
    exit_code = 5
    default_message = "Not a well-formed 20-byte address"


class AlreadyDeployed(DeploymentError):
    exit_code = 6
    default_message = "Component already deployed, use upgrade instead"


class NotYetDeployed(DeploymentError):
    exit_code = 7
    default_message = "Component has no deployment record, deploy it first"


class AddressMismatch(DeploymentError):
    exit_code = 8
    default_message = "Address differs from the recorded deployment"


class IncompatibleUpgrade(DeploymentError):
    exit_code = 12
    default_message = "New implementation breaks the proxy storage layout"

    def __init__(self, message=None, problems=None, **kwargs):
        self.problems = list(problems or [])
        super().__init__(message, **kwargs)

    def __str__(self):
        text = super().__str__()
        if self.problems:
            text += "\n\t" + "\n\t".join(self.problems)
        return text


class NotUpgradeable(DeploymentError):
    exit_code = 13
    default_message = "Component is immutable and cannot be upgraded"


class UnknownComponent(DeploymentError):
    exit_code = 14
    default_message = "No component registered with that name"


class ArtifactNotFound(DeploymentError):
    exit_code = 16
    default_message = "No compiled artifact found for contract"


# executor level: raised while talking to the chain


class TransactionFailed(DeploymentError):
    exit_code = 9
    default_message = "Transaction reverted or could not be sent"

    def __init__(self, message=None, tx_hash=None, **kwargs):
        self.tx_hash = tx_hash
        super().__init__(message, **kwargs)


class ConfirmationTimeout(DeploymentError):
    """
    The transaction was broadcast but did not reach the confirmation depth in
    time. `address` is the contract being created (or the proxy), and
    `implementation` the implementation behind it when known. Neither is
    guaranteed to exist on chain.

    `cancelled` holds the KeyboardInterrupt / SystemExit that stopped the
    wait, to be re-raised once the pending state is recorded.
    """

    exit_code = 10
    default_message = "Transaction did not reach confirmation depth in time"

    def __init__(self, message=None, tx_hash=None, implementation=None, cancelled=None, **kwargs):
        self.tx_hash = tx_hash
        self.implementation = implementation
        self.cancelled = cancelled
        super().__init__(message, **kwargs)


class WrongChain(DeploymentError):
    exit_code = 15
    default_message = "RPC chain id does not match the network profile"


# warning level


class Unconfirmed(DeploymentError):
    exit_code = 11
    default_message = "Record is unconfirmed, run reconcile before changing it"
