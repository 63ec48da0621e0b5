"""Tests for pipeline state persistence helpers."""

from __future__ import annotations

from pathlib import Path

from ffmpeg_publisher.app.pipeline_state import PipelineState, PipelineStateStore


def test_pipeline_state_transitions() -> None:
    state = PipelineState.initialize("ffmpeg", ["clone", "build", "upload"], run_id="test")

    state.mark_running("clone")
    state.mark_completed("clone")
    assert state.completed_steps() == ["clone"]

    state.mark_failed("build", reason="ProcessError: exit status: 2")
    assert state.steps["build"] == PipelineState.STATUS_FAILED
    assert state.failure == "ProcessError: exit status: 2"
    assert not state.succeeded


def test_reset_incomplete_keeps_selected_steps() -> None:
    state = PipelineState.initialize("ffmpeg", ["clone", "build", "collect", "upload"])
    for step in ("clone", "build", "collect"):
        state.mark_completed(step)
    state.mark_failed("upload", reason="boom")

    state.reset_incomplete(keep=["clone", "build"])

    assert state.completed_steps() == ["clone", "build"]
    assert state.steps["collect"] == PipelineState.STATUS_PENDING
    assert state.steps["upload"] == PipelineState.STATUS_PENDING
    assert state.failure is None


def test_pipeline_state_store_roundtrip(tmp_path: Path) -> None:
    store = PipelineStateStore(tmp_path)
    state = PipelineState.initialize("FFmpeg/arm64", ["clone", "build"])
    state.mark_failed("clone", reason="boom")
    store.save(state)

    saved_path = store.path_for("FFmpeg/arm64")
    assert saved_path.exists()
    assert saved_path.name == "ffmpeg-arm64.json"

    loaded = store.load("FFmpeg/arm64")
    assert loaded is not None
    assert loaded.name == "FFmpeg/arm64"
    assert loaded.steps == state.steps
    assert loaded.failure == "boom"


def test_pipeline_state_store_delete(tmp_path: Path) -> None:
    store = PipelineStateStore(tmp_path)
    store.save(PipelineState.initialize("ffmpeg", ["clone"]))

    assert store.delete("ffmpeg") is True
    assert store.load("ffmpeg") is None
    assert store.delete("ffmpeg") is False
