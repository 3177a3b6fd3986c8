"""
配置模块

提供回放器和日志的配置管理。
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Union

from userflow.flows.errors import ConfigError
from userflow.logger import LogConfig, LogFormat, LogLevel


Headless = Union[bool, str]


def get_headless_env_var(headless: Optional[str] = None) -> Headless:
    """
    解析 headless 配置值

    Args:
        headless: 原始值（1/true/0/false/chrome，忽略大小写）

    Returns:
        True / False / "chrome"

    Raises:
        ConfigError: 无法识别的值
    """
    if not headless:
        return True
    value = headless.lower()
    if value in ("1", "true"):
        return True
    if value == "chrome":
        return "chrome"
    if value in ("0", "false"):
        return False
    raise ConfigError(f"USERFLOW_HEADLESS: 无法识别的值 {headless!r}")


@dataclass
class RunnerSettings:
    """回放设置"""
    headless: Headless = True
    # 执行后端，格式 package.module[:attr] 或 path/to/file.py[:attr]
    extension: Optional[str] = None
    # 中止时是否执行 after_all_steps 并结束 Runner
    finalize_on_abort: bool = False


@dataclass
class LogSettings:
    """日志设置"""
    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.SIMPLE
    file_path: Optional[str] = None

    def to_log_config(self) -> LogConfig:
        return LogConfig(level=self.level, format=self.format, log_file=self.file_path)


@dataclass
class AppConfig:
    """应用配置"""
    runner: RunnerSettings = field(default_factory=RunnerSettings)
    log: LogSettings = field(default_factory=LogSettings)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """从环境变量加载配置"""
        headless = os.getenv("USERFLOW_HEADLESS", os.getenv("PUPPETEER_HEADLESS"))

        runner = RunnerSettings(
            headless=get_headless_env_var(headless),
            extension=os.getenv("USERFLOW_EXTENSION"),
            finalize_on_abort=os.getenv("USERFLOW_FINALIZE_ON_ABORT", "false").lower() == "true",
        )

        try:
            log = LogSettings(
                level=LogLevel[os.getenv("LOG_LEVEL", "INFO").upper()],
                format=LogFormat[os.getenv("LOG_FORMAT", "SIMPLE").upper()],
                file_path=os.getenv("LOG_FILE_PATH"),
            )
        except KeyError as e:
            raise ConfigError(f"无效的日志配置: {e}") from e

        return cls(runner=runner, log=log)

    def to_dict(self) -> dict:
        """转换为字典"""
        return {
            "runner": {
                "headless": self.runner.headless,
                "extension": self.runner.extension,
                "finalize_on_abort": self.runner.finalize_on_abort,
            },
            "log": {
                "level": self.log.level.name,
                "format": self.log.format.value,
                "file_path": self.log.file_path,
            },
        }


# 全局配置实例
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """获取全局配置"""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def set_config(config: AppConfig) -> None:
    """设置全局配置"""
    global _config
    _config = config


def reset_config() -> None:
    """重置配置"""
    global _config
    _config = None


__all__ = [
    "Headless",
    "get_headless_env_var",
    "RunnerSettings",
    "LogSettings",
    "AppConfig",
    "get_config",
    "set_config",
    "reset_config",
]
