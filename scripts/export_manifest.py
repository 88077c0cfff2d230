import os

import click
from mergedeep import merge

from config.BluePrint import NETWORKS
from scripts.deploy import CLICK_PROMPTS, param_prompt
from scripts.utils import json_file, log
from scripts.utils.ledger import JsonLedgerStore

MANIFEST_FILENAME = "current-manifest.json"


def build_manifest(store: JsonLedgerStore):
    """
    Address manifest of every confirmed deployment, grouped by network.
    Unconfirmed records are left out until they are reconciled.
    """
    manifest = {"networks": {}}

    for network in store.networks():
        contracts = {}
        explorer = NETWORKS.get(network, {}).get("EXPLORER_URL")
        for component, record in store.load(network).items():
            if record.get("status") == "unconfirmed":
                log.warn(f"Skipping unconfirmed {component} on {network}")
                continue

            entry = {
                "address": record["address"],
                "contract": record.get("contract"),
            }
            if record.get("implementations"):
                entry["implementation"] = record["implementations"][-1]
                entry["version"] = len(record["implementations"])
            if explorer:
                entry["url"] = explorer + record["address"]
            contracts[component] = entry

        manifest["networks"][network] = {
            "chainId": NETWORKS.get(network, {}).get("CHAIN_ID"),
            "contracts": contracts,
        }

    return manifest


def export_manifest(history_dir, output=None):
    output = output or os.path.join(history_dir, MANIFEST_FILENAME)

    try:
        previous = json_file.load(output)
    except FileNotFoundError:
        previous = {}

    manifest = merge({}, previous, build_manifest(JsonLedgerStore(history_dir)))
    json_file.save(output, manifest)
    return output, manifest


@click.command()
@click.option("--silent", is_flag=True, default=False, help="Run command without prompts.")
@click.option(
    "--history-dir",
    default=CLICK_PROMPTS["history_dir"]["default"],
    help=CLICK_PROMPTS["history_dir"]["help"],
    callback=param_prompt,
)
@click.option("--output", "-o", default=None, help=f"Manifest file. Defaults to `<history-dir>/{MANIFEST_FILENAME}`.")
def cli(silent, history_dir, output):
    """Write the addresses of all confirmed deployments to one manifest file"""
    log.h1("Export deployment manifest")
    output, manifest = export_manifest(history_dir, output)

    for network, data in manifest["networks"].items():
        log.h2(network)
        for component, entry in data["contracts"].items():
            log.h3(f"{component}: {entry['address']}")

    log.info(f"Manifest written to {output}")


if __name__ == "__main__":
    cli()
