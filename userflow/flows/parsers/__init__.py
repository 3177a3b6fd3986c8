"""
流程解析器模块

提供录制流程的数据解析功能。
"""

from .json import FlowParser, parse

__all__ = [
    "FlowParser",
    "parse",
]
