"""
执行后端模块

提供默认的空跑执行后端和执行后端加载工厂。
"""

from .dry_run import DryRunExtension
from .factory import (
    ExtensionFactory,
    load_extension_factory,
    create_default_extension,
    get_extension_factory,
)

__all__ = [
    "DryRunExtension",
    "ExtensionFactory",
    "load_extension_factory",
    "create_default_extension",
    "get_extension_factory",
]
