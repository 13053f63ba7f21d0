from __future__ import annotations

"""Small helpers for reading paths and options out of config params."""

import os
from pathlib import Path
from typing import Dict, List, Optional


DEFAULT_CLEAN_PATTERNS = [
    "dist/**/mdb*.css",
    "dist/**/mdb*.js",
    "dist/img/**/*.png",
    "dist/img/**/*.jpg",
    "dist/img/**/*.svg",
    "dist/img/**/*.gif",
]


def _get(d: Dict, *keys, default=None):
    cur = d
    for k in keys:
        if not isinstance(cur, dict):
            return default
        cur = cur.get(k)
        if cur is None:
            return default
    return cur


def project_root(p: Dict) -> Path:
    return Path(_get(p, "project", "root", default="."))


def dist_dir(p: Dict) -> str:
    return _get(p, "paths", "dist", default="dist")


def scss_dir(p: Dict) -> str:
    return _get(p, "paths", "scss", default="scss")


def js_dir(p: Dict) -> str:
    return _get(p, "paths", "js", default="js")


def img_dir(p: Dict) -> str:
    return _get(p, "paths", "img", default="img")


def manifest_path(p: Dict) -> str:
    return _get(p, "paths", "manifest", default=f"{js_dir(p)}/modules.yaml")


def css_out_dir(p: Dict) -> str:
    return f"{dist_dir(p)}/css"


def css_modules_out_dir(p: Dict) -> str:
    return f"{dist_dir(p)}/css/modules"


def js_out_dir(p: Dict) -> str:
    return f"{dist_dir(p)}/js"


def img_out_dir(p: Dict) -> str:
    return f"{dist_dir(p)}/img"


def bundle_name(p: Dict) -> str:
    return _get(p, "scripts", "bundle_name", default="mdb.js")


def vendor_css_files(p: Dict) -> List[str]:
    return list(_get(p, "styles", "vendor_files", default=["bootstrap.css"]))


def clean_patterns(p: Dict) -> List[str]:
    return list(_get(p, "clean", "patterns", default=DEFAULT_CLEAN_PATTERNS))


def section(p: Dict, *keys) -> Dict:
    return dict(_get(p, *keys, default={}))


def min_name(path: Path) -> Path:
    """`site.css` -> `site.min.css`, in the same directory."""
    return path.with_name(f"{path.stem}.min{path.suffix}")


def runtime(p: Dict) -> Dict:
    return p.setdefault("runtime", {})


def log_file(p: Dict) -> Optional[Path]:
    """`logging.file` from the config, else `ASSETPIPE_LOG_FILE`, relative to the root."""
    name = _get(p, "logging", "file") or os.getenv("ASSETPIPE_LOG_FILE")
    if not name:
        return None
    return project_root(p) / name
