"""Persistence helpers for pipeline execution state."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _slugify(value: str) -> str:
    lowered = value.lower()
    safe = [ch if ch.isalnum() or ch in {"-", "_"} else "-" for ch in lowered]
    slug = "".join(safe).strip("-")
    return slug or "default"


@dataclass(slots=True)
class PipelineState:
    """Represents step progress for one named pipeline."""

    name: str
    steps: dict[str, str]
    updated_at: str = field(default_factory=_now)
    run_id: str | None = None
    failure: str | None = None

    STATUS_PENDING = "pending"
    STATUS_RUNNING = "running"
    STATUS_COMPLETED = "completed"
    STATUS_FAILED = "failed"

    @classmethod
    def initialize(
        cls, name: str, step_names: Iterable[str], *, run_id: str | None = None
    ) -> "PipelineState":
        steps = {step: cls.STATUS_PENDING for step in step_names}
        return cls(name=name, steps=steps, run_id=run_id or _now())

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "PipelineState":
        raw_steps = data.get("steps", {})
        if not isinstance(raw_steps, dict):
            raise ValueError("Invalid pipeline state: 'steps' must be a mapping")
        run_id = data.get("run_id")
        failure = data.get("failure")
        return cls(
            name=str(data.get("name", "default")),
            steps={str(step): str(status) for step, status in raw_steps.items()},
            updated_at=str(data.get("updated_at", _now())),
            run_id=str(run_id) if run_id else None,
            failure=str(failure) if failure else None,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "steps": self.steps,
            "updated_at": self.updated_at,
            "run_id": self.run_id,
            "failure": self.failure,
        }

    def mark_running(self, step: str) -> None:
        self.steps[step] = self.STATUS_RUNNING
        self.updated_at = _now()

    def mark_completed(self, step: str) -> None:
        self.steps[step] = self.STATUS_COMPLETED
        self.updated_at = _now()

    def mark_failed(self, step: str, reason: str | None = None) -> None:
        self.steps[step] = self.STATUS_FAILED
        self.failure = reason
        self.updated_at = _now()

    def completed_steps(self) -> list[str]:
        return [step for step, status in self.steps.items() if status == self.STATUS_COMPLETED]

    def reset_incomplete(self, keep: Iterable[str] | None = None) -> None:
        """Return every step outside ``keep`` (default: completed steps) to pending."""
        kept = set(self.completed_steps() if keep is None else keep)
        for step in self.steps:
            if step not in kept:
                self.steps[step] = self.STATUS_PENDING
        self.failure = None
        self.updated_at = _now()

    @property
    def succeeded(self) -> bool:
        return all(status == self.STATUS_COMPLETED for status in self.steps.values())


class PipelineStateStore:
    """Stores pipeline state on disk under the configured state directory."""

    def __init__(self, root: Path) -> None:
        self._root = root
        self._root.mkdir(parents=True, exist_ok=True)

    def path_for(self, name: str) -> Path:
        return self._root / f"{_slugify(name)}.json"

    def load(self, name: str) -> PipelineState | None:
        path = self.path_for(name)
        if not path.exists():
            return None
        data = json.loads(path.read_text(encoding="utf-8"))
        state = PipelineState.from_dict(data)
        state.name = name
        return state

    def save(self, state: PipelineState) -> Path:
        path = self.path_for(state.name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(state.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
        return path

    def delete(self, name: str) -> bool:
        path = self.path_for(name)
        if path.exists():
            path.unlink()
            return True
        return False


__all__ = ["PipelineState", "PipelineStateStore"]
