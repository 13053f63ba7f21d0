"""Image task: optimize everything under `img/` into `dist/img/`, same layout."""

from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Dict, List

from ..orchestrator import task
from ..orchestrator.logging import get_logger
from ..orchestrator.utils import img_dir, img_out_dir, project_root, section
from ..transforms.images import ImageOptions, optimize_image


@task(
    name="img_compression",
    inputs=lambda p: [f"{img_dir(p)}/**/*"],
    outputs=lambda p: [img_out_dir(p)],
)
def img_compression(params: Dict, sources: List[Path]):
    logger = get_logger("assetpipe.images")
    root = project_root(params)
    src_root = root / img_dir(params)
    out_root = root / img_out_dir(params)
    opts = ImageOptions.from_params(section(params, "images"))

    outcome: Counter = Counter()
    saved = 0
    for src in sources:
        dest = out_root / src.relative_to(src_root)
        result = optimize_image(src, dest, opts)
        outcome[result] += 1
        saved += src.stat().st_size - dest.stat().st_size
        logger.debug("%s: %s", result, src)
    logger.info(
        "Processed %d image(s) %s, saved %d bytes", len(sources), dict(outcome), saved
    )
