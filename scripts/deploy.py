import sys

import click

from config.BluePrint import COMPONENTS, DEFAULT_POLL_DELAY, DEFAULT_TIMEOUT, NETWORKS
from scripts.utils import log
from scripts.utils.artifacts import ARTIFACTS_DIR, OPENZEPPELIN_DIR, ArtifactStore, load_artifact_files
from scripts.utils.deploy_args import DeployArgs
from scripts.utils.errors import DeploymentError, Unconfirmed
from scripts.utils.gateway import Web3Gateway
from scripts.utils.helpers import get_account
from scripts.utils.ledger import HISTORY_DIR, JsonLedgerStore
from scripts.utils.session import Session

ACTIONS = ["deploy", "upgrade", "attach", "reconcile", "show"]
READ_ONLY_ACTIONS = ["show"]


CLICK_PROMPTS = {
    "network": {
        "prompt": "Network",
        "default": "sepolia",
        "help": "Network to deploy to. Defaults to `sepolia`.",
        "type": click.Choice(list(NETWORKS.keys()), case_sensitive=False),
    },
    "component": {
        "prompt": "Component",
        "default": "Manager",
        "help": "Logical component to act on. Defaults to `Manager`.",
        "type": click.Choice(list(COMPONENTS.keys()), case_sensitive=False),
    },
    "action": {
        "prompt": "Action",
        "default": "deploy",
        "help": "What to do with the component: deploy, upgrade, attach, reconcile or show. Defaults to `deploy`.",
        "type": click.Choice(ACTIONS, case_sensitive=False),
    },
    "address": {
        "prompt": "Address of the deployed contract",
        "default": "",
        "help": "Existing contract address, required by `attach`.",
        "depends": {
            "action": "attach"
        }
    },
    "contract": {
        "prompt": "Implementation contract name (empty for the component default)",
        "default": "",
        "help": "Artifact to upgrade the proxy to, if it differs from the component's contract.",
        "depends": {
            "action": "upgrade"
        }
    },
    "rpc": {
        "prompt": "What is the desired rpc?",
        "default": "",
        "help": "RPC url for the chain to deploy to. Defaults to the network's RPC env var or public endpoint.",
    },
    "account": {
        "prompt": "Deployer account name",
        "default": "DEPLOYER",
        "help": "Account name for deployment, the key is read from `<ACCOUNT>_PRIVATE_KEY`. Defaults to `DEPLOYER`"
    },
    "history_dir": {
        "prompt": "Deployment history directory",
        "default": HISTORY_DIR,
        "help": f"Directory holding the per-network deployment ledgers. Defaults to `{HISTORY_DIR}`.",
    },
}


def param_prompt(ctx, param, value):
    param_config = CLICK_PROMPTS.get(param.name)

    if param_config is None:
        return value

    default_val = param_config.get("default")
    prompt = param_config.get("prompt")
    optional = param_config.get("optional", default_val is not None)

    if value != default_val:
        return value

    if prompt is None or (ctx.params.get("silent") and optional):
        return value

    depends = param_config.get("depends")
    if depends is not None:
        if not any(ctx.params.get(key) == expected for key, expected in depends.items()):
            return value

    return click.prompt(
        f"{prompt} --{param.name.replace('_', '-')}",
        default=default_val,
        type=param_config.get("type"),
    )


def make_gateway(deploy_args: DeployArgs, artifacts):
    return Web3Gateway.from_rpc(
        deploy_args.rpc,
        deploy_args.sender,
        artifacts,
        confirmations=deploy_args.confirmations,
        timeout=deploy_args.timeout,
        poll_delay=deploy_args.poll_delay,
    )


def _is_local(rpc):
    return rpc is not None and ("localhost" in rpc or "127.0.0.1" in rpc)


def _report(session, record):
    if record is None:
        log.info("No deployment recorded.")
        return
    explorer = session.profile.explorer_url
    log.address(f"{record.component} [{record.status}]", record.address, explorer)
    if record.upgradeable:
        for index, implementation in enumerate(record.implementations, start=1):
            log.address(f"  implementation v{index}", implementation, explorer)


@click.command()
@click.option("--silent", is_flag=True, default=False, help="Run command without prompts.")
@click.option(
    "--network", "-n",
    default=CLICK_PROMPTS["network"]["default"],
    help=CLICK_PROMPTS["network"]["help"],
    type=CLICK_PROMPTS["network"]["type"],
    callback=param_prompt,
)
@click.option(
    "--component", "-c",
    default=CLICK_PROMPTS["component"]["default"],
    help=CLICK_PROMPTS["component"]["help"],
    type=CLICK_PROMPTS["component"]["type"],
    callback=param_prompt,
)
@click.option(
    "--action", "-x",
    default=CLICK_PROMPTS["action"]["default"],
    help=CLICK_PROMPTS["action"]["help"],
    type=CLICK_PROMPTS["action"]["type"],
    callback=param_prompt,
)
@click.option(
    "--address",
    default=CLICK_PROMPTS["address"]["default"],
    help=CLICK_PROMPTS["address"]["help"],
    callback=param_prompt,
)
@click.option(
    "--contract",
    default=CLICK_PROMPTS["contract"]["default"],
    help=CLICK_PROMPTS["contract"]["help"],
    callback=param_prompt,
)
@click.option(
    "--rpc",
    default=CLICK_PROMPTS["rpc"]["default"],
    help=CLICK_PROMPTS["rpc"]["help"],
    callback=param_prompt,
)
@click.option(
    "--account", "-a",
    default=CLICK_PROMPTS["account"]["default"],
    help=CLICK_PROMPTS["account"]["help"],
    callback=param_prompt,
)
@click.option(
    "--history-dir",
    default=CLICK_PROMPTS["history_dir"]["default"],
    help=CLICK_PROMPTS["history_dir"]["help"],
    callback=param_prompt,
)
@click.option(
    "--artifacts-dir",
    multiple=True,
    default=[ARTIFACTS_DIR, OPENZEPPELIN_DIR],
    help="Directories with compiled contract artifacts. Repeat to add more.",
)
@click.option("--confirmations", type=int, default=None, help="Confirmation depth. Defaults to the network's setting.")
@click.option("--timeout", type=int, default=DEFAULT_TIMEOUT, help=f"Seconds to wait for confirmation. Defaults to {DEFAULT_TIMEOUT}.")
def cli(
    silent,
    network,
    component,
    action,
    address,
    contract,
    rpc,
    account,
    history_dir,
    artifacts_dir,
    confirmations,
    timeout,
):
    """
    Deploys, upgrades or attaches one bridge component on one network.

    The action is always explicit: `deploy` creates a new contract (or a new
    proxy for upgradeable components, exactly once), `upgrade` swaps the
    implementation behind an existing proxy without running the initializer
    again, `attach` records an existing address without writing to the chain,
    `reconcile` settles records left unconfirmed by a timed-out transaction,
    and `show` prints the ledger of the network.

    Every result is written to `<history-dir>/<network>/ledger.json`, the
    single source of truth for which proxies exist. Run one command per
    network at a time.
    """
    action = action.lower()
    store = JsonLedgerStore(history_dir)

    try:
        if action in READ_ONLY_ACTIONS:
            deploy_args = DeployArgs(None, network, rpc=rpc or None, history_dir=history_dir)
            session = Session(deploy_args, None, store)
            log.h1(f"Deployments on {network}")
            for record in session.records():
                _report(session, record)
            return

        deploy_args = DeployArgs(
            None, network, rpc=rpc or None, confirmations=confirmations,
            timeout=timeout, poll_delay=DEFAULT_POLL_DELAY, history_dir=history_dir)
        try:
            deploy_args.sender = get_account(account, allow_test_key=_is_local(deploy_args.rpc))
        except KeyError as e:
            raise click.ClickException(f"Missing deployer key: {e}") from e

        log.h1("Bridge Deployment")
        log.info(f"Connected to rpc `{deploy_args.rpc}`.")
        log.info(f"Deployer account `{deploy_args.sender.address}`.")
        log.info(f"Ledger stored in `{history_dir}`.")
        log.info(f"Deployment arguments: {deploy_args}")
        log.info(f"{action} {component} on {network}.")
        log.info("")

        artifacts = ArtifactStore(load_artifact_files(artifacts_dir))
        log.info(f"Loaded {len(artifacts.files)} contract artifacts.")

        session = Session(deploy_args, make_gateway(deploy_args, artifacts), store, artifacts)
        session.check_chain()

        if action == "reconcile":
            record = session.reconcile(component)
        else:
            record = session.run(component, action, address=address or None, contract=contract or None)

        _report(session, record)
        session.end()

    except Unconfirmed as e:
        log.warn(str(e))
        sys.exit(e.exit_code)
    except DeploymentError as e:
        log.error(f"{type(e).__name__}: {e}")
        sys.exit(e.exit_code)

    log.info("Done.")
    log.info("")


if __name__ == "__main__":
    cli()
