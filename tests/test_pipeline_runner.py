"""Tests for the pipeline runner orchestration helpers."""

from __future__ import annotations

import pytest

from ffmpeg_publisher.app.pipeline import DEFAULT_STEPS, PipelineHooks, PipelineRunner, PipelineStep


def test_runner_skips_completed_steps() -> None:
    order: list[str] = []

    steps = [
        PipelineStep("clone", lambda ctx: order.append("clone")),
        PipelineStep("build", lambda ctx: order.append("build"), depends_on=("clone",)),
    ]
    runner = PipelineRunner(steps)

    runner.run(object(), completed={"clone"})

    assert order == ["build"]


def test_runner_invokes_hooks_and_propagates_errors() -> None:
    events: list[str] = []

    def step_a(_: object) -> None:
        events.append("run:a")

    def step_b(_: object) -> None:
        events.append("run:b")
        raise RuntimeError("boom")

    def step_c(_: object) -> None:
        events.append("run:c")

    hooks = PipelineHooks(
        before_step=lambda name, _: events.append(f"before:{name}"),
        after_step=lambda name, _: events.append(f"after:{name}"),
        on_error=lambda name, _, exc: events.append(f"error:{name}:{type(exc).__name__}"),
    )

    steps = [
        PipelineStep("a", step_a),
        PipelineStep("b", step_b, depends_on=("a",)),
        PipelineStep("c", step_c, depends_on=("b",)),
    ]
    runner = PipelineRunner(steps)

    with pytest.raises(RuntimeError):
        runner.run(object(), hooks=hooks)

    assert events == [
        "before:a",
        "run:a",
        "after:a",
        "before:b",
        "run:b",
        "error:b:RuntimeError",
    ]


def test_runner_refuses_step_with_unmet_dependency() -> None:
    steps = [
        PipelineStep("clone", lambda ctx: None),
        PipelineStep("build", lambda ctx: None, depends_on=("clone",)),
    ]
    runner = PipelineRunner(steps)

    with pytest.raises(RuntimeError, match="depends on missing steps: clone"):
        runner.run(object(), only=["build"])


def test_default_steps_form_a_linear_chain() -> None:
    names = [step.name for step in DEFAULT_STEPS]

    assert names == ["clone", "build", "collect", "upload", "post", "persist", "cleanup"]
    for previous, step in zip(DEFAULT_STEPS, DEFAULT_STEPS[1:]):
        assert step.depends_on == (previous.name,)
