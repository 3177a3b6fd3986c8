"""
日志系统模块

提供回放引擎的日志配置、格式化和执行日志记录。

使用示例:
```python
from userflow.logger import LogConfig, configure_logging, ExecutionLogger

configure_logging(LogConfig.development())

execution_logger = ExecutionLogger(flow_title="登录流程")
runner = Runner(flow, extension, execution_logger=execution_logger)
await runner.run()
execution_logger.save_to_file("logs/login.json")
```
"""

from .config import (
    ROOT_LOGGER_NAME,
    LogLevel,
    LogFormat,
    LogConfig,
    configure_logging,
)

from .formatters import (
    STEP_FIELDS,
    SimpleFormatter,
    DetailedFormatter,
    JSONFormatter,
    FormatterFactory,
)

from .execution import (
    ExecutionLogEntry,
    ExecutionLogger,
)

__all__ = [
    # Config
    "ROOT_LOGGER_NAME",
    "LogLevel",
    "LogFormat",
    "LogConfig",
    "configure_logging",
    # Formatters
    "STEP_FIELDS",
    "SimpleFormatter",
    "DetailedFormatter",
    "JSONFormatter",
    "FormatterFactory",
    # Execution Logger
    "ExecutionLogEntry",
    "ExecutionLogger",
]
