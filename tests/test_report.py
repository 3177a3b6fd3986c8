from __future__ import annotations

import asyncio
import json
import os
import signal
import sys
from pathlib import Path

import pytest

from userflow.cli import main
from userflow.extensions import DryRunExtension, get_extension_factory, load_extension_factory
from userflow.flows import ConfigError, FlowRunFailure
from userflow.report import StatusReport, get_recording_paths, run_files


def _recording(title: str, *urls: str) -> dict:
    return {"title": title, "steps": [{"type": "navigate", "url": url} for url in urls]}


def test_recording_paths_expand_folders_and_skip_missing(tmp_path: Path, write_json) -> None:
    folder = tmp_path / "recordings"
    folder.mkdir()
    (folder / "b.json").write_text("{}", encoding="utf-8")
    (folder / "a.json").write_text("{}", encoding="utf-8")
    (folder / "notes.txt").write_text("skip me", encoding="utf-8")
    single = write_json("single.json", {})

    paths = get_recording_paths([str(folder), str(single), str(tmp_path / "missing.json")], log=False)

    assert paths == [str(folder / "a.json"), str(folder / "b.json"), str(single)]


def test_run_files_with_default_dry_run(write_json) -> None:
    first = write_json("first.json", _recording("first", "https://a", "https://b"))
    second = write_json("second.json", _recording("second", "https://c"))

    report = asyncio.run(run_files([str(first), str(second)]))

    assert report.all_passed
    assert [result.title for result in report.results] == ["first", "second"]
    assert report.errors == []


def test_run_files_uses_fresh_extension_per_file_and_closes_it(write_json, extension_factory) -> None:
    files = [
        str(write_json("one.json", _recording("one", "https://a"))),
        str(write_json("two.json", _recording("two", "https://b"))),
    ]
    created = []

    def factory():
        ext = extension_factory()
        created.append(ext)
        return ext

    asyncio.run(run_files(files, factory))

    assert len(created) == 2
    assert all(ext.closed for ext in created)
    assert [ext.ran() for ext in created] == [["https://a"], ["https://b"]]


def test_failures_are_reported_per_file(tmp_path: Path, write_json, extension_factory) -> None:
    good = write_json("good.json", _recording("good", "https://a"))
    failing = write_json("failing.json", _recording("failing", "https://broken"))
    invalid = tmp_path / "invalid.json"
    invalid.write_text("{", encoding="utf-8")
    files = [str(good), str(failing), str(invalid)]
    report = StatusReport(files, color=False)
    created = []

    def factory():
        ext = extension_factory(fail_on="https://broken")
        created.append(ext)
        return ext

    with pytest.raises(FlowRunFailure) as exc_info:
        asyncio.run(run_files(files, factory, report=report))

    assert [result.success for result in report.results] == [True, False, False]
    assert [result.file for result in exc_info.value.failures] == [str(failing), str(invalid)]
    assert [file for file, _ in report.errors] == [str(failing), str(invalid)]
    # the invalid file fails before an extension is created
    assert len(created) == 2
    assert all(ext.closed for ext in created)

    table = report.render()
    assert "Success" in table and "Failure" in table
    assert "good" in table
    assert "Error running file:" in report.render_errors()


def test_run_files_writes_execution_logs(tmp_path: Path, write_json) -> None:
    recording = write_json("flow.json", _recording("logged", "https://a", "https://b"))
    log_dir = tmp_path / "logs"

    asyncio.run(run_files([str(recording)], log_dir=str(log_dir)))

    saved = json.loads((log_dir / "flow.log.json").read_text(encoding="utf-8"))
    assert saved["flow_title"] == "logged"
    assert saved["entry_count"] == 2


def test_load_extension_factory_from_file(tmp_path: Path) -> None:
    module = tmp_path / "my_extension.py"
    module.write_text(
        "from userflow.flows import RunnerExtension\n"
        "\n"
        "class Extension(RunnerExtension):\n"
        "    async def run_step(self, step, flow):\n"
        "        pass\n"
        "\n"
        "class Other(Extension):\n"
        "    pass\n",
        encoding="utf-8",
    )

    assert load_extension_factory(str(module)).__name__ == "Extension"
    assert load_extension_factory(f"{module}:Other").__name__ == "Other"


def test_load_extension_factory_from_module() -> None:
    assert load_extension_factory("userflow.extensions:DryRunExtension") is DryRunExtension


def test_load_extension_factory_errors() -> None:
    with pytest.raises(ConfigError):
        load_extension_factory("userflow.extensions:Missing")
    with pytest.raises(ConfigError):
        load_extension_factory("no_such_module_for_userflow")


def test_default_extension_factory_is_dry_run() -> None:
    assert isinstance(get_extension_factory(None)(), DryRunExtension)


def test_cli_check_mode(write_json, capsys) -> None:
    shared = write_json("shared.json", {"steps": [{"type": "navigate", "url": "https://x"}]})
    recording = write_json(
        "flow.json",
        {"title": "checked", "steps": [{"type": "import", "from": "file", "target": str(shared)}]},
    )

    assert main([str(recording), "--check"]) == 0
    assert "checked (1" in capsys.readouterr().out


def test_cli_check_mode_reports_bad_import(write_json, capsys) -> None:
    recording = write_json(
        "flow.json",
        {"title": "bad", "steps": [{"type": "import", "from": "url", "target": "https://x"}]},
    )

    assert main([str(recording), "--check"]) == 1
    assert "FAIL" in capsys.readouterr().out


def test_cli_run_prints_table(write_json, capsys) -> None:
    recording = write_json("flow.json", _recording("cli flow", "https://a"))

    assert main([str(recording), "--log"]) == 0
    out = capsys.readouterr().out
    assert "cli flow" in out
    assert "Success" in out


def test_cli_run_failure_exit_code(tmp_path: Path, capsys) -> None:
    invalid = tmp_path / "invalid.json"
    invalid.write_text("[]", encoding="utf-8")

    assert main([str(invalid)]) == 1
    assert "Error running file:" in capsys.readouterr().out


def test_cli_without_recordings(tmp_path: Path) -> None:
    assert main([str(tmp_path / "nothing.json")]) == 1


def test_run_files_passes_declared_options_to_factory(write_json, extension_factory) -> None:
    recording = write_json("flow.json", _recording("options", "https://a"))
    received = []

    class HeadlessExtension(DryRunExtension):
        def __init__(self, headless=True):
            super().__init__(headless=headless)
            received.append(headless)

    asyncio.run(run_files([str(recording)], HeadlessExtension, extension_options={"headless": "chrome"}))
    # undeclared options are dropped
    asyncio.run(run_files([str(recording)], extension_factory, extension_options={"headless": False}))

    assert received == ["chrome"]


@pytest.mark.skipif(sys.platform == "win32", reason="loop signal handlers need a Unix event loop")
def test_sigint_aborts_current_recording(write_json, extension_factory) -> None:
    recording = write_json("flow.json", _recording("interrupted", "https://a", "https://b", "https://c"))
    created = []

    def factory():
        ext = extension_factory()
        original_run_step = ext.run_step

        async def run_step(step, flow):
            await original_run_step(step, flow)
            if step.url == "https://a":
                os.kill(os.getpid(), signal.SIGINT)
                await asyncio.sleep(0.1)

        ext.run_step = run_step
        created.append(ext)
        return ext

    with pytest.raises(FlowRunFailure):
        asyncio.run(run_files([str(recording)], factory, finalize_on_abort=True, abort_on_signal=True))

    ext = created[0]
    assert ext.ran() == ["https://a"]
    assert ext.count("after_all") == 1
    assert ext.closed


def test_cli_passes_headless_to_extension(tmp_path: Path, write_json) -> None:
    recording = write_json("flow.json", _recording("headless", "https://a"))
    module = tmp_path / "headless_extension.py"
    module.write_text(
        "import json\n"
        "from pathlib import Path\n"
        "from userflow.flows import RunnerExtension\n"
        "\n"
        "class Extension(RunnerExtension):\n"
        "    def __init__(self, headless=True):\n"
        "        Path(__file__).with_suffix('.out').write_text(json.dumps(headless))\n"
        "\n"
        "    async def run_step(self, step, flow):\n"
        "        pass\n",
        encoding="utf-8",
    )

    assert main([str(recording), "--headless", "false", "--extension", f"{module}:Extension"]) == 0
    assert json.loads(module.with_suffix(".out").read_text()) is False


def test_cli_rejects_bad_headless_value(write_json) -> None:
    recording = write_json("flow.json", _recording("bad headless", "https://a"))

    assert main([str(recording), "--headless", "bogus"]) == 1


def test_cli_rejects_bad_log_level_env(write_json, monkeypatch: pytest.MonkeyPatch) -> None:
    recording = write_json("flow.json", _recording("bad level", "https://a"))
    monkeypatch.setenv("LOG_LEVEL", "LOUD")

    assert main([str(recording)]) == 1
