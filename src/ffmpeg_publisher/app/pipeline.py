"""Composable pipeline for clone → build → collect → upload → post → persist → cleanup."""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, Sequence, TextIO

import requests

from ..collectors import BuildInfoAggregator
from ..core import ProcessRunner
from ..platforms.wordpress import WordPressMediaUploader, WordPressPostClient
from ..services import BuildRecord, BuildRecordWriter, ReleasePublishWorkflow
from ..settings import AppConfig
from ..utils.logging import get_logger

LOGGER = get_logger(__name__)

PIPELINE_NAME = "ffmpeg"


@dataclass(slots=True)
class PipelineContext:
    """Mutable context shared between pipeline steps."""

    config: AppConfig
    runner: ProcessRunner
    workflow: ReleasePublishWorkflow
    record_writer: BuildRecordWriter
    dry_run: bool = False
    echo: bool = False
    keep_workdir: bool = False
    record: BuildRecord | None = None
    record_path: Path | None = None

    @property
    def root_dir(self) -> Path:
        return self.config.paths.root_dir

    @property
    def build_root(self) -> Path:
        return self.config.build_root

    def require_record(self) -> BuildRecord:
        if self.record is None:
            raise RuntimeError("Build information has not been collected yet")
        return self.record


@dataclass(slots=True)
class PipelineStep:
    """A named stage. ``durable`` stages leave their result on disk and may be skipped on resume."""

    name: str
    handler: Callable[[PipelineContext], None]
    depends_on: tuple[str, ...] = ()
    durable: bool = False


@dataclass(slots=True)
class PipelineHooks:
    before_step: Callable[[str, PipelineContext], None] | None = None
    after_step: Callable[[str, PipelineContext], None] | None = None
    on_error: Callable[[str, PipelineContext, BaseException], None] | None = None


class PipelineRunner:
    """Executes registered pipeline steps in order, stopping at the first failure."""

    def __init__(self, steps: Sequence[PipelineStep]) -> None:
        self._steps = list(steps)
        self._step_map: Dict[str, PipelineStep] = {step.name: step for step in steps}
        self._order = [step.name for step in steps]

    @property
    def steps(self) -> list[PipelineStep]:
        return list(self._steps)

    @property
    def step_names(self) -> list[str]:
        return list(self._order)

    def resumable(self, completed: Iterable[str]) -> list[str]:
        """Return the leading durable steps found in ``completed``."""
        done = set(completed)
        kept: list[str] = []
        for step in self._steps:
            if not step.durable or step.name not in done:
                break
            kept.append(step.name)
        return kept

    def run(
        self,
        context: PipelineContext,
        *,
        only: Iterable[str] | None = None,
        completed: Iterable[str] | None = None,
        hooks: PipelineHooks | None = None,
    ) -> None:
        selected = set(only) if only is not None else None
        executed: set[str] = set(completed or ())
        hooks = hooks or PipelineHooks()
        for name in self._order:
            if name in executed:
                continue
            if selected is not None and name not in selected:
                continue
            step = self._step_map[name]
            if any(dep not in executed for dep in step.depends_on):
                missing = ", ".join(dep for dep in step.depends_on if dep not in executed)
                raise RuntimeError(f"Step '{name}' depends on missing steps: {missing}")
            LOGGER.info("Running pipeline step: %s", name, extra={"event": "pipeline.step", "step": name})
            if hooks.before_step:
                hooks.before_step(name, context)
            try:
                step.handler(context)
            except Exception as exc:
                if hooks.on_error:
                    hooks.on_error(name, context, exc)
                raise
            executed.add(name)
            if hooks.after_step:
                hooks.after_step(name, context)


def _run_clone(context: PipelineContext) -> None:
    build = context.config.build
    context.root_dir.mkdir(parents=True, exist_ok=True)
    context.runner.run(
        "git",
        ["clone", build.repo_url, "--depth", str(build.clone_depth), build.checkout_dir],
        cwd=context.root_dir,
        echo=context.echo,
    ).check()


def _run_build(context: PipelineContext) -> None:
    context.runner.run(
        context.config.build.build_script,
        cwd=context.build_root,
        echo=context.echo,
    ).check()


def _run_collect(context: PipelineContext) -> None:
    aggregator = BuildInfoAggregator(
        context.runner,
        context.build_root,
        settings=context.config.build,
        max_workers=context.config.collector_workers,
    )
    context.record = aggregator.collect()


def _run_upload(context: PipelineContext) -> None:
    context.workflow.upload_attachment(context.require_record(), dry_run=context.dry_run)


def _run_post(context: PipelineContext) -> None:
    context.workflow.create_post(context.require_record(), dry_run=context.dry_run)


def _run_persist(context: PipelineContext) -> None:
    context.record_path = context.record_writer.write(context.require_record())
    LOGGER.info(
        "Build information written",
        extra={"event": "pipeline.persist", "path": str(context.record_path)},
    )


def _run_cleanup(context: PipelineContext) -> None:
    record = context.require_record()
    archive = Path(record.attachment.path)
    target = context.root_dir / record.attachment.filename
    try:
        shutil.move(str(archive), str(target))
    except OSError as exc:
        LOGGER.warning(
            "Could not move build archive",
            extra={"event": "pipeline.cleanup", "source": str(archive), "reason": str(exc)},
        )

    if context.keep_workdir:
        return
    try:
        shutil.rmtree(context.build_root)
    except OSError as exc:
        LOGGER.warning(
            "Could not remove build directory",
            extra={"event": "pipeline.cleanup", "path": str(context.build_root), "reason": str(exc)},
        )


DEFAULT_STEPS = [
    PipelineStep("clone", _run_clone, durable=True),
    PipelineStep("build", _run_build, depends_on=("clone",), durable=True),
    PipelineStep("collect", _run_collect, depends_on=("build",)),
    PipelineStep("upload", _run_upload, depends_on=("collect",)),
    PipelineStep("post", _run_post, depends_on=("upload",)),
    PipelineStep("persist", _run_persist, depends_on=("post",)),
    PipelineStep("cleanup", _run_cleanup, depends_on=("persist",)),
]


def build_default_runner(
    config: AppConfig,
    *,
    dry_run: bool = False,
    echo: bool = False,
    keep_workdir: bool = False,
    session: requests.Session | None = None,
    console: TextIO | None = None,
) -> tuple[PipelineRunner, PipelineContext]:
    http = session or requests.Session()
    workflow = ReleasePublishWorkflow(
        WordPressMediaUploader(config.publish, session=http),
        WordPressPostClient(config.publish, session=http),
        config.publish,
    )
    ctx = PipelineContext(
        config=config,
        runner=ProcessRunner(config.paths.log_file, console=console),
        workflow=workflow,
        record_writer=BuildRecordWriter(config.paths.root_dir, mode=config.record_mode),
        dry_run=dry_run,
        echo=echo,
        keep_workdir=keep_workdir,
    )
    return PipelineRunner(DEFAULT_STEPS), ctx


__all__ = [
    "DEFAULT_STEPS",
    "PIPELINE_NAME",
    "PipelineContext",
    "PipelineHooks",
    "PipelineRunner",
    "PipelineStep",
    "build_default_runner",
]
