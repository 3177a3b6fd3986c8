"""
流程异常模块

定义流程解析、步骤导入和回放执行相关的异常类型。
"""

from typing import Any, Dict


class FlowError(Exception):
    """流程基础异常"""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class FlowParseError(FlowError):
    """流程定义解析异常"""

    def __init__(self, message: str = "流程定义无效", errors: list = None, details: Dict[str, Any] = None):
        super().__init__(message, details)
        self.errors = errors or []


class StepImportError(FlowError):
    """
    步骤导入异常

    导入目标无法读取、无法解析或缺少 steps 字段时抛出。
    原始异常保存在 cause 中，同时作为 __cause__ 链接。
    """

    def __init__(self, target: str, cause: BaseException = None, details: Dict[str, Any] = None):
        message = f"读取导入文件失败: {target}"
        if cause is not None:
            message = f"{message}\n{cause}"
        super().__init__(message, details)
        self.target = target
        self.cause = cause


class UnsupportedSourceError(FlowError):
    """不支持的导入来源"""

    def __init__(self, source: str, details: Dict[str, Any] = None):
        super().__init__(f'不支持从 "{source}" 导入步骤', details)
        self.source = source


class StepExecutionError(FlowError):
    """步骤执行异常（由执行后端抛出）"""

    def __init__(self, message: str, step: Any = None, details: Dict[str, Any] = None):
        super().__init__(message, details)
        self.step = step


class FlowRunFailure(FlowError):
    """批量回放中存在失败的流程"""

    def __init__(self, message: str = "部分录制回放失败", failures: list = None):
        super().__init__(message)
        self.failures = failures or []


class ConfigError(FlowError):
    """配置异常"""
    pass


__all__ = [
    "FlowError",
    "FlowParseError",
    "StepImportError",
    "UnsupportedSourceError",
    "StepExecutionError",
    "FlowRunFailure",
    "ConfigError",
]
