"""
步骤导入解析模块

在执行前把流程中的导入步骤替换为外部来源中的步骤。
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from pydantic import ValidationError

from .errors import StepImportError, UnsupportedSourceError
from .schema import ExtendableUserFlow, ImportSource, ImportStep, UserFlow, is_import_step, step_adapter

logger = logging.getLogger(__name__)


def _read_steps_file(target: str) -> List[Any]:
    """读取导入文件并返回其中的 steps"""
    content = Path(target).read_text(encoding="utf-8")
    data = json.loads(content)
    if not isinstance(data, dict) or "steps" not in data:
        raise ValueError(f"导入目标中没有找到 steps: {target}")
    steps = data["steps"]
    if not isinstance(steps, list):
        raise ValueError(f"导入目标中的 steps 必须是数组: {target}")
    return steps


async def _load_from_file(target: str) -> List[Any]:
    try:
        raw_steps = await asyncio.to_thread(_read_steps_file, target)
        steps = []
        for raw in raw_steps:
            if is_import_step(raw):
                # 导入只展开一层，嵌套的导入步骤无法交给执行后端，整体报错
                raise ValueError(f"不支持嵌套导入: {target}")
            steps.append(step_adapter.validate_python(raw))
        return steps
    except (OSError, ValueError, ValidationError) as e:
        raise StepImportError(target, e) from e


async def import_steps(flow: Union[ExtendableUserFlow, UserFlow, Dict[str, Any]]) -> UserFlow:
    """
    展开流程中的导入步骤

    从左到右单次扫描：普通步骤原样保留，导入步骤替换为目标文件中的
    steps（平铺，保持原顺序）。导入得到的步骤不会再次扫描。
    不修改传入的流程，返回新的 UserFlow。

    Args:
        flow: 可能包含导入步骤的流程

    Returns:
        UserFlow: 不含导入步骤的流程

    Raises:
        StepImportError: 目标无法读取、解析或缺少 steps 字段
        UnsupportedSourceError: 导入来源不是 file
    """
    if isinstance(flow, dict):
        flow = ExtendableUserFlow.model_validate(flow)

    steps = []
    for step in flow.steps:
        if not isinstance(step, ImportStep):
            steps.append(step)
            continue

        if step.source != ImportSource.FILE.value:
            raise UnsupportedSourceError(step.source)

        imported = await _load_from_file(step.target)
        logger.debug(f"从 {step.target} 导入 {len(imported)} 个步骤")
        steps.extend(imported)

    metadata = flow.model_dump(by_alias=False, exclude={"steps"})
    return UserFlow(**metadata, steps=steps)


__all__ = ["import_steps"]
