"""Asset transforms wrapped by the pipeline tasks: prefixing, image and SVG optimization."""
