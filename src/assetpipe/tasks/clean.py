"""Delete previously generated artifacts before a rebuild."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List

from ..orchestrator import task
from ..orchestrator.logging import get_logger
from ..orchestrator.utils import clean_patterns


@task(name="clean", inputs=clean_patterns)
def clean(params: Dict, sources: List[Path]):
    """Remove every file matched by `clean.patterns`; nothing matched is fine."""
    logger = get_logger("assetpipe.clean")
    for path in sources:
        path.unlink(missing_ok=True)
        logger.debug("Deleted %s", path)
    logger.info("Removed %d generated file(s)", len(sources))
