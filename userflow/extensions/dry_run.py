"""
空跑执行后端

不连接浏览器，只记录并输出每个步骤。
"""

import logging
from typing import Any, Dict, List, Union

from userflow.flows.extension import RunnerExtension
from userflow.flows.schema import Step, UserFlow

logger = logging.getLogger(__name__)


class DryRunExtension(RunnerExtension):
    """
    空跑执行后端

    用于检查录制文件和导入是否能正确展开，
    executed_steps 按执行顺序保存步骤的字典形式。

    Args:
        headless: 无头模式设置，空跑时只记录不使用
    """

    def __init__(self, headless: Union[bool, str] = True):
        self.headless = headless
        self.executed_steps: List[Dict[str, Any]] = []

    async def before_all_steps(self, flow: UserFlow) -> None:
        logger.info(f"[dry-run] 流程: {flow.title}")

    async def run_step(self, step: Step, flow: UserFlow) -> None:
        data = step.to_dict()
        self.executed_steps.append(data)
        logger.info(f"[dry-run] {len(self.executed_steps)}. {step.type} {data}")

    async def close(self) -> None:
        """空跑后端没有需要释放的资源"""
        pass


__all__ = ["DryRunExtension"]
