from scripts.utils import log


def _is_gap(entry):
    return entry["label"].startswith("__gap")


def check_storage_compatibility(old_layout, new_layout):
    """
    Compare the storage layout of the implementation currently behind a proxy
    with the one about to replace it.

    Every variable of the old layout must still live at the same slot and
    offset with the same type. New variables may only be appended, or take
    space out of a `__gap`. A renamed variable is reported but accepted.

    Returns a list of human readable problems, empty when the upgrade is safe.
    """
    new_by_position = {
        (entry["slot"], entry["offset"]): entry
        for entry in new_layout
        if not _is_gap(entry)
    }

    problems = []
    for entry in old_layout:
        if _is_gap(entry):
            continue

        position = (entry["slot"], entry["offset"])
        replacement = new_by_position.get(position)
        if replacement is None:
            problems.append(
                f"`{entry['label']}` ({entry['type']}) at slot {entry['slot']} offset {entry['offset']} was removed or moved")
            continue

        if replacement["type"] != entry["type"]:
            problems.append(
                f"`{entry['label']}` at slot {entry['slot']} changed type from {entry['type']} to {replacement['type']}")
        elif replacement["label"] != entry["label"]:
            log.warn(
                f"`{entry['label']}` at slot {entry['slot']} renamed to `{replacement['label']}`")

    return problems
