from __future__ import annotations


class PipelineError(Exception):
    """Base class for every failure a pipeline run reports."""


class TaskFailedError(PipelineError):
    def __init__(self, task_name: str, cause: BaseException):
        self.task_name = task_name
        self.cause = cause
        super().__init__(f"Task '{task_name}' failed: {cause}")


class ParallelTaskError(PipelineError):
    """Raised once every child of a parallel node has finished and some failed."""

    def __init__(self, node_name: str, errors: list[PipelineError]):
        self.node_name = node_name
        self.errors = errors
        names = ", ".join(_failed_names(e) for e in errors)
        super().__init__(f"{len(errors)} task(s) failed in '{node_name}': {names}")


def _failed_names(err: PipelineError) -> str:
    if isinstance(err, TaskFailedError):
        return err.task_name
    if isinstance(err, ParallelTaskError):
        return ", ".join(_failed_names(e) for e in err.errors)
    return str(err)


class StyleCompileError(PipelineError):
    def __init__(self, failures: dict[str, str]):
        self.failures = failures
        files = ", ".join(sorted(failures))
        super().__init__(f"SCSS compilation failed for: {files}")


class ManifestError(PipelineError):
    pass


class ImageOptimizeError(PipelineError):
    pass


class ServerStartError(PipelineError):
    pass
