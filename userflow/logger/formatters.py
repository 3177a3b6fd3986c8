"""
日志格式化模块

提供回放日志使用的格式化器。
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict


# 回放过程通过 extra 附加到日志记录上的字段
STEP_FIELDS = ("flow_title", "step_index", "step_type")


class SimpleFormatter(logging.Formatter):
    """简单格式化器"""

    def __init__(self, fmt: str = None, datefmt: str = "%H:%M:%S"):
        super().__init__(fmt or "%(asctime)s [%(levelname)s] %(message)s", datefmt)


class DetailedFormatter(logging.Formatter):
    """详细格式化器"""

    def __init__(
        self,
        include_timestamp: bool = True,
        include_level: bool = True,
        include_logger: bool = True,
        include_line: bool = True,
    ):
        super().__init__()
        self.include_timestamp = include_timestamp
        self.include_level = include_level
        self.include_logger = include_logger
        self.include_line = include_line

    def format(self, record: logging.LogRecord) -> str:
        parts = []

        if self.include_timestamp:
            parts.append(self._format_timestamp(record.created))

        if self.include_level:
            parts.append(f"[{record.levelname:8}]")

        if self.include_logger:
            parts.append(f"[{record.name}]")

        if self.include_line:
            parts.append(f"[line {record.lineno}]")

        step_index = getattr(record, "step_index", None)
        if step_index is not None:
            parts.append(f"[step {step_index}:{getattr(record, 'step_type', '?')}]")

        parts.append(record.getMessage())

        text = " ".join(parts)
        if record.exc_info:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        return text

    def _format_timestamp(self, timestamp: float) -> str:
        """格式化时间戳"""
        dt = datetime.fromtimestamp(timestamp)
        return dt.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]


class JSONFormatter(logging.Formatter):
    """JSON 格式化器"""

    def __init__(self, extra_fields: Dict[str, Any] = None, include_function: bool = True):
        super().__init__()
        self.extra_fields = extra_fields or {}
        self.include_function = include_function

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
        }

        if self.include_function:
            log_entry["function"] = record.funcName
            log_entry["line"] = record.lineno

        for name in STEP_FIELDS:
            if hasattr(record, name):
                log_entry[name] = getattr(record, name)

        log_entry.update(self.extra_fields)

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            log_entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(log_entry, ensure_ascii=False)


# ========== 格式化器工厂 ==========

class FormatterFactory:
    """格式化器工厂"""

    _formatters = {
        "simple": SimpleFormatter,
        "detailed": DetailedFormatter,
        "json": JSONFormatter,
    }

    @classmethod
    def create(cls, format_type: str, **kwargs) -> logging.Formatter:
        """创建格式化器"""
        formatter_class = cls._formatters.get(format_type)
        if not formatter_class:
            raise ValueError(f"Unknown formatter type: {format_type}")
        return formatter_class(**kwargs)


__all__ = [
    "STEP_FIELDS",
    "SimpleFormatter",
    "DetailedFormatter",
    "JSONFormatter",
    "FormatterFactory",
]
