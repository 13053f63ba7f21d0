"""Script bundle manifest.

The manifest is an ordered list of script paths, relative to the project
root, controlling what goes into the bundle and in which order. It lives in a
YAML file that is either a bare list or a mapping with a `modules` key:

    modules:
      - js/vendor/jquery.js
      - js/src/buttons.js

It is read from disk on every call so edits apply without a restart.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List

import yaml

from .errors import ManifestError


@dataclass(frozen=True)
class Manifest:
    path: Path
    modules: List[str]


def load_manifest(path: str | Path) -> Manifest:
    p = Path(path)
    with open(p, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ManifestError(f"Invalid manifest {p}: {e}") from e

    if isinstance(data, dict):
        if "modules" not in data:
            raise ManifestError(f"Manifest {p} has no 'modules' list")
        data = data["modules"]
    if data is None:
        data = []
    if not isinstance(data, list) or not all(isinstance(m, str) for m in data):
        raise ManifestError(f"Manifest {p} must list script paths as strings")
    return Manifest(path=p, modules=list(data))
