"""
执行后端工厂

根据配置加载或创建执行后端。Runner 本身不会创建后端，
需要默认后端的调用方（如命令行）通过这里获取。
"""

import importlib
import importlib.util
from pathlib import Path
from typing import Callable, Optional

from userflow.flows.errors import ConfigError
from userflow.flows.extension import RunnerExtension


DEFAULT_ATTRIBUTE = "Extension"

ExtensionFactory = Callable[..., RunnerExtension]


def _load_module_from_file(path: Path):
    module_name = f"userflow_extension_{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ConfigError(f"无法加载执行后端文件: {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def load_extension_factory(spec: str) -> ExtensionFactory:
    """
    加载执行后端工厂

    Args:
        spec: package.module[:attr] 或 path/to/file.py[:attr]，
              attr 默认为 Extension

    Returns:
        无参可调用对象（通常是执行后端类）

    Raises:
        ConfigError: 模块或属性不存在
    """
    target, _, attribute = spec.partition(":")
    attribute = attribute or DEFAULT_ATTRIBUTE

    try:
        if target.endswith(".py"):
            path = Path(target)
            if not path.is_absolute():
                path = Path.cwd() / path
            module = _load_module_from_file(path)
        else:
            module = importlib.import_module(target)
    except (ImportError, OSError) as e:
        raise ConfigError(f"无法加载执行后端: {spec}\n{e}") from e

    factory = getattr(module, attribute, None)
    if factory is None or not callable(factory):
        raise ConfigError(f"执行后端模块中没有可调用的 {attribute}: {spec}")
    return factory


def create_default_extension() -> RunnerExtension:
    """创建默认执行后端（空跑）"""
    from .dry_run import DryRunExtension
    return DryRunExtension()


def get_extension_factory(spec: Optional[str] = None) -> ExtensionFactory:
    """
    获取执行后端工厂

    未指定时返回默认后端工厂。
    """
    if spec:
        return load_extension_factory(spec)
    return create_default_extension


__all__ = [
    "ExtensionFactory",
    "load_extension_factory",
    "create_default_extension",
    "get_extension_factory",
]
