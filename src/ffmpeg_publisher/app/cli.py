"""Command-line interface for building and publishing FFmpeg."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Callable, Iterable, Sequence

from ..settings import AppConfig, load_config
from ..utils.logging import configure_logging, get_logger
from .pipeline import (
    PIPELINE_NAME,
    PipelineContext,
    PipelineHooks,
    PipelineRunner,
    build_default_runner,
)
from .pipeline_state import PipelineState, PipelineStateStore

LOGGER = get_logger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        structured=not args.log_plain,
    )

    handler: Callable[[argparse.Namespace], int] | None = getattr(args, "handler", None)
    if handler is None:
        parser.print_help(sys.stderr)
        return 1
    return handler(args)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ffpub", description="Build FFmpeg and publish it to WordPress")
    parser.add_argument("--config", help="Path to the JSON configuration file", default=None)
    parser.add_argument(
        "--log-plain",
        action="store_true",
        help="Use plain-text logs instead of JSON",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Clone, build, upload and publish")
    run_parser.add_argument(
        "--only",
        nargs="+",
        metavar="STEP",
        help="Limit execution to specific steps (their prerequisites run too)",
    )
    _add_run_options(run_parser)
    run_parser.set_defaults(handler=_handle_run)

    resume_parser = subparsers.add_parser(
        "resume",
        help="Continue the last run, reusing the checkout and build it left behind",
    )
    _add_run_options(resume_parser)
    resume_parser.set_defaults(handler=_handle_resume)

    info_parser = subparsers.add_parser("info", help="Print build information for an existing build tree")
    info_parser.set_defaults(handler=_handle_info)

    inspect_parser = subparsers.add_parser("inspect", help="Show the stored step status")
    inspect_parser.add_argument(
        "--format",
        choices=("json", "table"),
        default="json",
        help="Output format for state inspection",
    )
    inspect_parser.set_defaults(handler=_handle_inspect)

    clean_parser = subparsers.add_parser("clean", help="Reset the stored step status")
    clean_parser.set_defaults(handler=_handle_clean)

    return parser


def _add_run_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Skip the media upload and post creation requests",
    )
    parser.add_argument(
        "--echo",
        action="store_true",
        help="Mirror the output of external commands to the console",
    )
    parser.add_argument(
        "--keep-workdir",
        action="store_true",
        help="Do not delete the cloned build directory during cleanup",
    )



def _handle_run(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    runner, context = build_default_runner(
        config,
        dry_run=args.dry_run,
        echo=args.echo,
        keep_workdir=args.keep_workdir,
    )
    state_store = PipelineStateStore(_state_root(config))
    state = PipelineState.initialize(PIPELINE_NAME, runner.step_names)
    state_store.save(state)

    selection = _select_steps(runner, args.only)
    LOGGER.info(
        "Pipeline run started",
        extra={
            "event": "cli.command",
            "command": "run",
            "steps": selection or runner.step_names,
            "dry_run": args.dry_run,
        },
    )

    try:
        runner.run(context, only=selection, hooks=_build_hooks(state_store, state))
    except Exception:
        LOGGER.error(
            "Pipeline run failed",
            extra={"event": "cli.command", "command": "run", "log_file": str(config.paths.log_file)},
        )
        raise

    LOGGER.info(
        "Pipeline run finished",
        extra={
            "event": "cli.command",
            "command": "run",
            "record": str(context.record_path) if context.record_path else None,
        },
    )
    return 0


def _handle_resume(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    runner, context = build_default_runner(
        config,
        dry_run=args.dry_run,
        echo=args.echo,
        keep_workdir=args.keep_workdir,
    )
    state_store = PipelineStateStore(_state_root(config))
    state = state_store.load(PIPELINE_NAME)
    if state is None:
        LOGGER.error(
            "No previous pipeline run found",
            extra={"event": "cli.error", "command": "resume"},
        )
        raise SystemExit(2)

    if state.succeeded:
        LOGGER.info(
            "All pipeline steps already completed",
            extra={"event": "cli.command", "command": "resume"},
        )
        return 0

    # Collected metadata and upload results live in memory only, so every
    # step after the last durable one runs again.
    completed = runner.resumable(state.completed_steps())
    state.reset_incomplete(keep=completed)
    state_store.save(state)
    LOGGER.info(
        "Resuming pipeline",
        extra={
            "event": "cli.command",
            "command": "resume",
            "skipped": completed,
            "remaining": [name for name in runner.step_names if name not in completed],
        },
    )

    runner.run(context, completed=completed, hooks=_build_hooks(state_store, state))

    LOGGER.info(
        "Pipeline resume finished",
        extra={
            "event": "cli.command",
            "command": "resume",
            "record": str(context.record_path) if context.record_path else None,
        },
    )
    return 0


def _handle_info(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    runner, context = build_default_runner(config)
    runner.run(context, only=["collect"], completed=["clone", "build"])
    record = context.require_record()
    print(json.dumps(record.to_dict(), ensure_ascii=False, indent="\t"))
    return 0


def _handle_inspect(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    state = PipelineStateStore(_state_root(config)).load(PIPELINE_NAME)
    if state is None:
        LOGGER.warning(
            "No pipeline state recorded",
            extra={"event": "cli.command", "command": "inspect"},
        )
        print("<no-state>")
        return 0

    if args.format == "table":
        _print_state_table(state)
    else:
        print(json.dumps(state.to_dict(), ensure_ascii=False, indent=2))
    return 0


def _handle_clean(args: argparse.Namespace) -> int:
    config = load_config(args.config)
    removed = PipelineStateStore(_state_root(config)).delete(PIPELINE_NAME)
    LOGGER.info(
        "Cleared pipeline state",
        extra={"event": "cli.command", "command": "clean", "removed": removed},
    )
    return 0


def _select_steps(runner: PipelineRunner, requested: Iterable[str] | None) -> list[str] | None:
    if requested is None:
        return None

    available = {name.lower(): name for name in runner.step_names}
    desired = [name.lower() for name in requested]
    invalid = [name for name in desired if name not in available]
    if invalid:
        LOGGER.error(
            "Unknown pipeline steps provided",
            extra={"event": "cli.error", "invalid_steps": sorted(set(invalid))},
        )
        raise SystemExit(2)

    selected_keys = set(desired)

    # Pull in prerequisites until the selection is closed under depends_on.
    changed = True
    while changed:
        changed = False
        for step in runner.steps:
            if step.name.lower() not in selected_keys:
                continue
            for dep in step.depends_on:
                if dep.lower() not in selected_keys:
                    selected_keys.add(dep.lower())
                    changed = True

    return [name for name in runner.step_names if name.lower() in selected_keys]


def _build_hooks(store: PipelineStateStore, state: PipelineState) -> PipelineHooks:
    def before(step: str, _: PipelineContext) -> None:
        state.mark_running(step)
        store.save(state)

    def after(step: str, _: PipelineContext) -> None:
        state.mark_completed(step)
        store.save(state)

    def error(step: str, _: PipelineContext, exc: BaseException) -> None:
        state.mark_failed(step, reason=f"{type(exc).__name__}: {exc}")
        store.save(state)
        LOGGER.debug(
            "Exception captured",
            extra={"event": "pipeline.error", "step": step, "error_type": type(exc).__name__},
        )

    return PipelineHooks(before_step=before, after_step=after, on_error=error)


def _state_root(config: AppConfig) -> Path:
    return config.paths.state_dir / "pipeline"


def _print_state_table(state: PipelineState) -> None:
    width = max((len(name) for name in state.steps), default=8)
    print("Step".ljust(width), "Status", sep="  ")
    for name, status in state.steps.items():
        print(name.ljust(width), status, sep="  ")
    if state.failure:
        print(f"\nfailure: {state.failure}")


__all__ = ["main"]
