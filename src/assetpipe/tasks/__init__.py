"""Build steps, one module per asset kind.

Each step is a function decorated with `@task(name=..., inputs=..., outputs=...)`;
`orchestrator.graph` composes them into the runnable entry points and
`orchestrator.cli` discovers them by scanning this package.
"""
