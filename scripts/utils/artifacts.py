import os
from dataclasses import dataclass
from typing import Optional

from scripts.utils import json_file, log
from scripts.utils.errors import ArtifactNotFound

# Define constants for directories
ARTIFACTS_DIR = "./artifacts/contracts"
OPENZEPPELIN_DIR = "./node_modules/@openzeppelin/contracts/build/contracts"


@dataclass
class Artifact:
    name: str
    path: str
    abi: list
    bytecode: str
    source_name: Optional[str] = None


def load_artifact_files(directories=(ARTIFACTS_DIR, OPENZEPPELIN_DIR)):
    """
    Index compiled contract artifacts (hardhat or OpenZeppelin build output)
    found in the given directories and their subdirectories.
    Returns contract name -> relative path.
    """
    artifact_files = {}

    for directory in directories:
        if not os.path.exists(directory):
            continue

        for root, _, files in os.walk(directory):
            for file in files:
                if not file.endswith('.json') or file.endswith('.dbg.json'):
                    continue
                # first directory wins, project artifacts shadow library ones
                key = file[:-5]
                if key not in artifact_files:
                    artifact_files[key] = os.path.relpath(os.path.join(root, file))

    return artifact_files


def normalize_layout(storage_layout):
    """
    Reduce a solc `storageLayout` output to comparable entries.
    Type ids embed AST ids, so the human readable type label is used instead.
    """
    types = storage_layout.get("types") or {}
    return [
        {
            "label": entry["label"],
            "slot": int(entry["slot"]),
            "offset": int(entry["offset"]),
            "type": types.get(entry["type"], {}).get("label", entry["type"]),
        }
        for entry in storage_layout.get("storage", [])
    ]


class ArtifactStore:
    def __init__(self, files=None):
        self.files = load_artifact_files() if files is None else files
        self._cache = {}

    def __contains__(self, name):
        return name in self.files

    def get(self, name) -> Artifact:
        if name in self._cache:
            return self._cache[name]
        if name not in self.files:
            raise ArtifactNotFound(f"No compiled artifact for `{name}`, run the compiler first")

        path = self.files[name]
        data = json_file.load(path)
        bytecode = data.get("bytecode") or ""
        if isinstance(bytecode, dict):
            # foundry style {"object": "0x..."}
            bytecode = bytecode.get("object", "")

        artifact = Artifact(
            name=name,
            path=path,
            abi=data["abi"],
            bytecode=bytecode,
            source_name=data.get("sourceName"),
        )
        self._cache[name] = artifact
        return artifact

    def storage_layout(self, name):
        """
        Storage layout of `name` from the hardhat build-info referenced by its
        `.dbg.json`. Returns None when the compiler output does not carry one.
        """
        artifact = self.get(name)
        dbg_path = artifact.path[:-5] + ".dbg.json"
        if not os.path.exists(dbg_path):
            return None

        build_info_path = os.path.normpath(
            os.path.join(os.path.dirname(dbg_path), json_file.load(dbg_path)["buildInfo"]))
        if not os.path.exists(build_info_path):
            log.warn(f"Build info {build_info_path} referenced by {name} is missing")
            return None

        contracts = json_file.load(build_info_path)["output"]["contracts"]
        layout = contracts.get(artifact.source_name, {}).get(name, {}).get("storageLayout")
        if not layout:
            return None
        return normalize_layout(layout)
