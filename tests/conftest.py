from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from userflow.config import reset_config
from userflow.logger import LogConfig, configure_logging
from userflow.flows import RunnerExtension, StepExecutionError, UserFlow


class RecordingExtension(RunnerExtension):
    """Records every hook call as (name, step url) and can fail on a given step."""

    def __init__(self, fail_on: str | None = None, fail_times: int = 1) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.fail_on = fail_on
        self.fail_times = fail_times
        self.closed = False

    async def before_all_steps(self, flow):
        self.calls.append(("before_all", flow.title))

    async def before_each_step(self, step, flow):
        self.calls.append(("before_each", step.url))

    async def run_step(self, step, flow):
        self.calls.append(("run", step.url))
        if step.url == self.fail_on and self.fail_times > 0:
            self.fail_times -= 1
            raise StepExecutionError(f"cannot navigate to {step.url}", step=step)

    async def after_each_step(self, step, flow):
        self.calls.append(("after_each", step.url))

    async def after_all_steps(self, flow):
        self.calls.append(("after_all", flow.title))

    async def close(self):
        self.closed = True

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)

    def ran(self) -> list[str]:
        return [url for call, url in self.calls if call == "run"]


def step_url(index: int) -> str:
    return f"https://example.com/{index}"


@pytest.fixture
def make_flow() -> Callable[..., UserFlow]:
    def _make(count: int = 3, title: str = "demo") -> UserFlow:
        return UserFlow.model_validate(
            {
                "title": title,
                "steps": [{"type": "navigate", "url": step_url(i)} for i in range(count)],
            }
        )

    return _make


@pytest.fixture
def extension_factory() -> Callable[..., RecordingExtension]:
    return RecordingExtension


@pytest.fixture
def write_json(tmp_path: Path) -> Callable[[str, Any], Path]:
    def _write(name: str, data: Any) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture(autouse=True)
def _fresh_config():
    reset_config()
    yield
    reset_config()
    configure_logging(LogConfig(enable_console=False))
