from __future__ import annotations

import importlib
import pkgutil
from pathlib import Path
from typing import Dict, Optional

import typer
import yaml
from dotenv import load_dotenv

from ..tasks.server import keep_alive
from .core import Pipeline, TaskSpec, describe
from .errors import PipelineError
from .graph import ENTRY_POINTS
from .logging import add_log_file, get_logger
from .utils import log_file


app = typer.Typer(add_completion=False, help="Front-end asset pipeline")
log = get_logger("orchestrator.cli")

CONFIG_HELP = "Path to YAML config"
DEFAULT_CONFIG = "configs/base.yaml"


def load_config(path: str | Path) -> dict:
    p = Path(path)
    with open(p, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def discover_tasks() -> Dict[str, TaskSpec]:
    """Import all modules in `tasks` package and collect decorated functions."""
    tasks_pkg = "assetpipe.tasks"
    specs: Dict[str, TaskSpec] = {}
    pkg = importlib.import_module(tasks_pkg)
    for m in pkgutil.iter_modules(pkg.__path__, prefix=f"{tasks_pkg}."):
        mod = importlib.import_module(m.name)
        for attr_name in dir(mod):
            obj = getattr(mod, attr_name)
            spec = getattr(obj, "_task_spec", None)
            if isinstance(spec, TaskSpec):
                specs[spec.name] = spec
    return specs


def _execute(node, name: str, config: str) -> None:
    load_dotenv()
    params = load_config(config)
    params.setdefault("runtime", {})
    path = log_file(params)
    if path is not None:
        add_log_file(path)
    pipe = Pipeline(node, name=name)
    try:
        steps = pipe.run(params)
    except PipelineError as e:
        typer.echo(f"{name} failed: {e}", err=True)
        raise typer.Exit(code=1)
    log.info("%s finished: %d step(s)", name, len(steps))
    keep_alive(params)


def run_entry(name: str, config: str) -> None:
    _execute(ENTRY_POINTS[name], name, config)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    config: str = typer.Option(DEFAULT_CONFIG, help=CONFIG_HELP),
):
    """Without a command, run the default pipeline: clean, build, serve, watch.

    A --config given here applies to the command that follows unless that
    command has its own.
    """
    ctx.obj = {"config": config}
    if ctx.invoked_subcommand is None:
        run_entry("default", config)


def _config(ctx: typer.Context, config: Optional[str]) -> str:
    if config:
        return config
    return (ctx.obj or {}).get("config", DEFAULT_CONFIG)

@app.command("list")
def list_tasks():
    """List discovered tasks and the entry points composed from them."""
    specs = discover_tasks()
    typer.echo("Discovered tasks:")
    for name in sorted(specs.keys()):
        typer.echo(f"- {name}")
    typer.echo("Entry points:")
    for name, node in ENTRY_POINTS.items():
        typer.echo(f"- {name}: {describe(node)}")


@app.command()
def run_task(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Task name to run"),
    config: Optional[str] = typer.Option(None, help=CONFIG_HELP),
):
    """Run a single task by name."""
    specs = discover_tasks()
    if name not in specs:
        typer.echo(f"Task not found: {name}")
        raise typer.Exit(code=1)
    _execute(specs[name], f"task.{name}", _config(ctx, config))


@app.command()
def img(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(None, help=CONFIG_HELP),
):
    """Optimize images into dist/img."""
    run_entry("img", _config(ctx, config))


@app.command()
def css(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(None, help=CONFIG_HELP),
):
    """Compile SCSS (main and modules), then minify."""
    run_entry("css", _config(ctx, config))


@app.command()
def js(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(None, help=CONFIG_HELP),
):
    """Bundle scripts from the manifest, then minify."""
    run_entry("js", _config(ctx, config))


@app.command()
def clean(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(None, help=CONFIG_HELP),
):
    """Delete generated artifacts."""
    run_entry("clean", _config(ctx, config))


@app.command()
def build(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(None, help=CONFIG_HELP),
):
    """Run css, js and img in parallel."""
    run_entry("build", _config(ctx, config))


@app.command()
def server(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(None, help=CONFIG_HELP),
):
    """Start the backend, then the live-reload proxy."""
    run_entry("server", _config(ctx, config))


@app.command()
def default(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(None, help=CONFIG_HELP),
):
    """Clean, build, serve, then watch for changes."""
    run_entry("default", _config(ctx, config))


def main():  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
