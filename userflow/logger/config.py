"""
日志配置模块

提供日志系统的配置功能。
"""

import logging
import sys
from dataclasses import dataclass, field
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from .formatters import FormatterFactory


ROOT_LOGGER_NAME = "userflow"


class LogLevel(Enum):
    """日志级别"""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


class LogFormat(Enum):
    """日志格式"""
    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"


@dataclass
class LogConfig:
    """日志配置"""
    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.SIMPLE
    enable_console: bool = True
    log_file: Optional[str] = None
    max_bytes: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5
    include_line_number: bool = False
    extra_fields: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level.name,
            "format": self.format.name,
            "enable_console": self.enable_console,
            "log_file": self.log_file,
            "max_bytes": self.max_bytes,
            "backup_count": self.backup_count,
            "include_line_number": self.include_line_number,
            "extra_fields": self.extra_fields,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LogConfig':
        return cls(
            level=LogLevel[data.get("level", "INFO").upper()],
            format=LogFormat[data.get("format", "SIMPLE").upper()],
            enable_console=data.get("enable_console", True),
            log_file=data.get("log_file"),
            max_bytes=data.get("max_bytes", 10 * 1024 * 1024),
            backup_count=data.get("backup_count", 5),
            include_line_number=data.get("include_line_number", False),
            extra_fields=data.get("extra_fields", {}),
        )

    @classmethod
    def default(cls) -> 'LogConfig':
        """获取默认配置"""
        return cls()

    @classmethod
    def development(cls) -> 'LogConfig':
        """开发环境配置"""
        return cls(
            level=LogLevel.DEBUG,
            format=LogFormat.DETAILED,
            include_line_number=True,
        )


def _create_formatter(config: LogConfig) -> logging.Formatter:
    if config.format == LogFormat.DETAILED:
        return FormatterFactory.create("detailed", include_line=config.include_line_number)
    if config.format == LogFormat.JSON:
        return FormatterFactory.create("json", extra_fields=config.extra_fields)
    return FormatterFactory.create("simple")


def configure_logging(config: LogConfig = None) -> logging.Logger:
    """
    配置 userflow 日志记录器

    重复调用会替换之前安装的处理器，不会重复输出。

    Args:
        config: 日志配置

    Returns:
        配置好的日志记录器
    """
    config = config or LogConfig.default()
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(config.level.value)

    for handler in list(logger.handlers):
        if getattr(handler, "_userflow_handler", False):
            logger.removeHandler(handler)
            handler.close()

    formatter = _create_formatter(config)
    handlers = []

    if config.enable_console:
        handlers.append(logging.StreamHandler(sys.stderr))

    if config.log_file:
        Path(config.log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            config.log_file,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        ))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler._userflow_handler = True
        logger.addHandler(handler)

    return logger


__all__ = [
    "ROOT_LOGGER_NAME",
    "LogLevel",
    "LogFormat",
    "LogConfig",
    "configure_logging",
]
