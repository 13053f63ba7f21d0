"""Script tasks: concatenate the manifest's files into one bundle, then minify it."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

import rjsmin

from ..orchestrator import task
from ..orchestrator.logging import get_logger
from ..orchestrator.manifest import load_manifest
from ..orchestrator.utils import (
    bundle_name,
    js_out_dir,
    manifest_path,
    min_name,
    project_root,
)


def manifest_modules(params: Dict) -> List[str]:
    """Reload the manifest from disk and return its ordered module paths."""
    manifest = load_manifest(project_root(params) / manifest_path(params))
    get_logger("assetpipe.scripts.manifest").info(
        "Loaded %d module(s) from %s", len(manifest.modules), manifest.path
    )
    return manifest.modules


def bundle_path(params: Dict) -> Path:
    return project_root(params) / js_out_dir(params) / bundle_name(params)


@task(
    name="js_build",
    inputs=manifest_modules,
    outputs=lambda p: [js_out_dir(p)],
)
def js_build(params: Dict, sources: List[Path]):
    """Concatenate sources byte-for-byte in manifest order."""
    logger = get_logger("assetpipe.scripts.build")
    dest = bundle_path(params)
    with open(dest, "wb") as out:
        for src in sources:
            out.write(src.read_bytes())
    logger.info("Bundled %d file(s) into %s", len(sources), dest)


@task(
    name="js_minify",
    inputs=lambda p: [f"{js_out_dir(p)}/{bundle_name(p)}"],
    outputs=lambda p: [js_out_dir(p)],
)
def js_minify(params: Dict, sources: List[Path]):
    logger = get_logger("assetpipe.scripts.minify")
    for src in sources:
        dest = min_name(src)
        dest.write_text(rjsmin.jsmin(src.read_text(encoding="utf-8")), encoding="utf-8")
        logger.info("Minified %s -> %s", src, dest)
