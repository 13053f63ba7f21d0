"""Stylesheet tasks: SCSS compilation with vendor prefixing, then CSS minification.

Two parallel variants of each step run over disjoint outputs:
- main: `scss/*.scss` -> `dist/css/`
- modules: `scss/**/modules/**/*.scss` -> `dist/css/modules/` (file name kept,
  source directories dropped)

Minification writes `<name>.min.css` beside each generated file, skipping
already-minified files and vendored third-party stylesheets.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

import rcssmin
import sass

from ..orchestrator import task
from ..orchestrator.errors import StyleCompileError
from ..orchestrator.logging import get_logger
from ..orchestrator.utils import (
    css_modules_out_dir,
    css_out_dir,
    min_name,
    project_root,
    scss_dir,
    section,
    vendor_css_files,
)
from ..transforms.prefixer import prefix_css


def _compile_options(params: Dict) -> Dict:
    opts = section(params, "styles")
    return {
        "output_style": opts.get("output_style", "nested"),
        "browsers": opts.get("browsers", ["last 10 versions"]),
        "cascade": bool(opts.get("cascade", False)),
    }


def _compile_all(sources: List[Path], out_dir: Path, params: Dict, logger) -> int:
    """Compile each source into `out_dir`; raise once all files were tried."""
    opts = _compile_options(params)
    include_paths = [str(project_root(params) / scss_dir(params))]
    failures: Dict[str, str] = {}
    written = 0
    for src in sources:
        if src.name.startswith("_"):
            # Partials are only compiled through @import
            continue
        try:
            css = sass.compile(
                filename=str(src),
                output_style=opts["output_style"],
                include_paths=include_paths,
            )
        except sass.CompileError as e:
            logger.error("SCSS error in %s:\n%s", src, e)
            failures[str(src)] = str(e)
            continue
        css = prefix_css(css, opts["browsers"], cascade=opts["cascade"])
        dest = out_dir / f"{src.stem}.css"
        dest.write_text(css, encoding="utf-8")
        written += 1
        logger.debug("Compiled %s -> %s", src, dest)
    logger.info("Compiled %d stylesheet(s) into %s", written, out_dir)
    if failures:
        raise StyleCompileError(failures)
    return written


@task(
    name="css_compile",
    inputs=lambda p: [f"{scss_dir(p)}/*.scss"],
    outputs=lambda p: [css_out_dir(p)],
)
def css_compile(params: Dict, sources: List[Path]):
    out_dir = project_root(params) / css_out_dir(params)
    _compile_all(sources, out_dir, params, get_logger("assetpipe.styles.compile"))


@task(
    name="css_compile_modules",
    inputs=lambda p: [f"{scss_dir(p)}/**/modules/**/*.scss"],
    outputs=lambda p: [css_modules_out_dir(p)],
)
def css_compile_modules(params: Dict, sources: List[Path]):
    out_dir = project_root(params) / css_modules_out_dir(params)
    _compile_all(sources, out_dir, params, get_logger("assetpipe.styles.modules"))


def _minify_all(sources: List[Path], logger) -> int:
    for src in sources:
        dest = min_name(src)
        dest.write_text(rcssmin.cssmin(src.read_text(encoding="utf-8")), encoding="utf-8")
        logger.debug("Minified %s -> %s", src, dest)
    logger.info("Minified %d stylesheet(s)", len(sources))
    return len(sources)


def _minify_inputs(out_dir: str, vendor_files: List[str]) -> List[str]:
    return (
        [f"{out_dir}/*.css", f"!{out_dir}/*.min.css"]
        + [f"!{out_dir}/{name}" for name in vendor_files]
    )


@task(
    name="css_minify",
    inputs=lambda p: _minify_inputs(css_out_dir(p), vendor_css_files(p)),
    outputs=lambda p: [css_out_dir(p)],
)
def css_minify(params: Dict, sources: List[Path]):
    _minify_all(sources, get_logger("assetpipe.styles.minify"))


@task(
    name="css_minify_modules",
    inputs=lambda p: _minify_inputs(css_modules_out_dir(p), []),
    outputs=lambda p: [css_modules_out_dir(p)],
)
def css_minify_modules(params: Dict, sources: List[Path]):
    _minify_all(sources, get_logger("assetpipe.styles.minify_modules"))
