import json
import os


def load(filename):
    # loads the json content of a file
    # (error will be raised if file doesn't exist)

    with open(filename) as file:
        return json.load(file)


def save(filename, content=None):
    # saves the json content to a file
    # (written to a sibling temp file first, then renamed over the target)

    content = {} if content is None else content
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)

    tmp_filename = f"{filename}.tmp"
    with open(tmp_filename, "w") as outfile:
        json.dump(
            content,
            outfile,
            indent=2,
        )
        outfile.flush()
        os.fsync(outfile.fileno())
    os.replace(tmp_filename, filename)

    return filename
