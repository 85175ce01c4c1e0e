from __future__ import annotations

from pathlib import Path
from typing import Dict, Union


def load_class_names(path: Union[str, Path]) -> Dict[int, str]:
    """
    Load class names for labelling.

    Two layouts are accepted. A `metadata.yaml` style mapping, as written next
    to Ultralytics exports:

        names:
          0: person
          1: bicycle

    or a plain text file with one name per line (line number = class id).
    PyYAML is not needed for either.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Class names file not found: {path}")
    lines = path.read_text(encoding="utf-8").splitlines()

    if not any(line.strip() == "names:" for line in lines):
        return {i: line.strip() for i, line in enumerate(lines) if line.strip()}

    names: Dict[int, str] = {}
    in_names = False
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line == "names:":
            in_names = True
            continue
        if not in_names:
            continue
        # A new top-level key ends the block.
        if not raw[:1].isspace():
            break
        if ":" not in line:
            continue
        left, right = line.split(":", 1)
        left = left.strip()
        if not left.isdigit():
            continue
        names[int(left)] = right.strip().strip("'").strip('"')

    return names
