from __future__ import annotations

import json
import logging
from pathlib import Path

from userflow.logger import (
    ExecutionLogger,
    FormatterFactory,
    JSONFormatter,
    LogConfig,
    LogFormat,
    LogLevel,
    configure_logging,
)


def _own_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [h for h in logger.handlers if getattr(h, "_userflow_handler", False)]


def test_configure_logging_replaces_its_handlers(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "replay.log"
    config = LogConfig(level=LogLevel.DEBUG, log_file=str(log_file))

    logger = configure_logging(config)
    configure_logging(config)

    try:
        assert logger.level == logging.DEBUG
        assert len(_own_handlers(logger)) == 2
        logger.info("hello")
        assert log_file.exists()
    finally:
        configure_logging(LogConfig(enable_console=False))

    assert _own_handlers(logger) == []


def test_json_formatter_includes_step_fields() -> None:
    record = logging.LogRecord("userflow.test", logging.INFO, __file__, 1, "step done", None, None)
    record.step_index = 3
    record.step_type = "click"
    record.flow_title = "demo"

    data = json.loads(JSONFormatter(extra_fields={"service": "replay"}).format(record))

    assert data["message"] == "step done"
    assert data["step_index"] == 3
    assert data["step_type"] == "click"
    assert data["service"] == "replay"


def test_detailed_formatter_shows_step_position() -> None:
    record = logging.LogRecord("userflow.test", logging.INFO, __file__, 1, "running", None, None)
    record.step_index = 0
    record.step_type = "navigate"

    text = FormatterFactory.create("detailed").format(record)

    assert "[step 0:navigate]" in text
    assert text.endswith("running")


def test_log_config_round_trip() -> None:
    config = LogConfig.development()

    restored = LogConfig.from_dict(config.to_dict())

    assert restored.level is LogLevel.DEBUG
    assert restored.format is LogFormat.DETAILED


def test_execution_logger_step_entries(tmp_path: Path) -> None:
    execution_logger = ExecutionLogger(flow_title="demo")
    execution_logger.start()

    execution_logger.step_start(0, "navigate")
    execution_logger.step_end()
    execution_logger.step_start(1, "click")
    execution_logger.step_end(success=False, error=TimeoutError("no element"))

    assert len(execution_logger.entries) == 2
    failed = execution_logger.get_errors()[0]
    assert failed.step_index == 1
    assert failed.error == {"type": "TimeoutError", "message": "no element"}

    path = tmp_path / "out" / "run.json"
    execution_logger.save_to_file(str(path))
    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["flow_title"] == "demo"
    assert saved["entry_count"] == 2
    assert saved["error_count"] == 1
