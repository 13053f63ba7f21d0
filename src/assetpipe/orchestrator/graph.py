"""The fixed task graph and the named entry points built from it."""

from __future__ import annotations

import os
from typing import Dict, List

from ..tasks.clean import clean
from ..tasks.images import img_compression
from ..tasks.scripts import js_build, js_minify
from ..tasks.server import backend_server, web_server
from ..tasks.styles import (
    css_compile,
    css_compile_modules,
    css_minify,
    css_minify_modules,
)
from ..tasks.watch import watch_files
from ..watcher import Subscription, output_subscription
from .core import Composite, parallel, series
from .utils import (
    css_out_dir,
    img_dir,
    js_dir,
    manifest_path,
    scss_dir,
    vendor_css_files,
)

images = series(img_compression, name="img")
styles_compile = parallel(css_compile, css_compile_modules, name="styles_compile")
styles_minify = parallel(css_minify, css_minify_modules, name="styles_minify")
styles = series(styles_compile, styles_minify, name="css")
scripts = series(js_build, js_minify, name="js")

build = parallel(styles, scripts, images, name="build")
server = series(backend_server, web_server, name="server")

run = series(clean, build, server, watch_files, name="default")

ENTRY_POINTS: Dict[str, Composite] = {
    "img": images,
    "css": styles,
    "js": scripts,
    "clean": series(clean, name="clean"),
    "build": build,
    "server": server,
    "default": run,
}


def watch_subscriptions(params: Dict) -> List[Subscription]:
    subs = [
        output_subscription(params),
        Subscription("styles", scss_dir(params), ("**/*.scss",), reaction=styles_compile),
        Subscription(
            "css",
            css_out_dir(params),
            ("**/*.css",),
            ("**/*.min.css",) + tuple(vendor_css_files(params)),
            reaction=styles_minify,
        ),
    ]

    js_include = ("**/*.js",)
    manifest_rel = os.path.relpath(manifest_path(params), js_dir(params))
    if not manifest_rel.startswith(".."):
        js_include += (manifest_rel,)
    subs.append(Subscription("scripts", js_dir(params), js_include, reaction=scripts))
    if manifest_rel.startswith(".."):
        manifest = manifest_path(params)
        subs.append(
            Subscription(
                "manifest",
                os.path.dirname(manifest) or ".",
                (os.path.basename(manifest),),
                reaction=scripts,
            )
        )

    subs.append(Subscription("images", img_dir(params), ("**/*",), reaction=images))
    return subs
