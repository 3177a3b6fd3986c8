"""
流程回放核心模块

提供按步骤顺序驱动执行后端的 Runner。
"""

import inspect
import logging
from enum import Enum
from typing import Any, Dict, Optional, Union

from userflow.logger import ExecutionLogger

from .extension import RunnerExtension
from .importer import import_steps
from .parsers import FlowParser
from .schema import ExtendableUserFlow, Step, UserFlow

logger = logging.getLogger(__name__)


class RunnerState(Enum):
    """Runner 状态"""
    IDLE = "idle"
    RUNNING = "running"
    COMPLETE = "complete"


class Runner:
    """
    流程回放器

    持有一个已解析的流程和一个执行后端，游标在多次 run 调用之间保留，
    因此可以分段执行并在之后继续。

    每次 run:
    1. 首次调用时执行 before_all_steps（只执行一次）
    2. 依次执行 before_each_step、run_step、after_each_step，游标加一
    3. 游标到达流程末尾时执行 after_all_steps 并返回 True

    钩子或 run_step 抛出的异常直接向上传播，游标停在失败的步骤上，
    再次调用 run 会重新执行该步骤。

    Attributes:
        flow: 已解析的流程
        extension: 执行后端
        next_step: 下一个待执行步骤的索引
    """

    def __init__(
        self,
        flow: UserFlow,
        extension: RunnerExtension,
        finalize_on_abort: bool = False,
        execution_logger: ExecutionLogger = None,
    ):
        if not callable(getattr(extension, "run_step", None)):
            raise TypeError(f"执行后端必须实现 run_step: {type(extension).__name__}")

        self._flow = flow
        self._extension = extension
        self._finalize_on_abort = finalize_on_abort
        self._execution_logger = execution_logger
        self._next_step = 0
        self._started = False
        self._completed = False
        self._finalized = False
        self._abort_requested = False
        self._running = False

    @property
    def flow(self) -> UserFlow:
        return self._flow

    @property
    def extension(self) -> RunnerExtension:
        return self._extension

    @property
    def next_step(self) -> int:
        """下一个待执行步骤的索引"""
        return self._next_step

    @property
    def is_complete(self) -> bool:
        """流程是否已全部执行"""
        return self._completed

    @property
    def is_finalized(self) -> bool:
        """是否因中止而结束（不可再继续）"""
        return self._finalized

    @property
    def state(self) -> RunnerState:
        if self._completed:
            return RunnerState.COMPLETE
        if self._next_step == 0:
            return RunnerState.IDLE
        return RunnerState.RUNNING

    def abort(self) -> None:
        """
        请求中止当前执行

        在下一个步骤开始前生效，正在执行的步骤会正常完成。
        中止请求在本次 run 返回时清除。
        """
        self._abort_requested = True

    async def run(self, up_to: Optional[int] = None) -> bool:
        """
        执行流程

        Args:
            up_to: 执行到该索引之前为止，默认执行全部步骤

        Returns:
            bool: 流程是否已全部完成
        """
        if self._completed:
            return True
        if self._finalized:
            logger.warning(f"流程 '{self._flow.title}' 已中止，不再执行")
            return False
        if self._running:
            raise RuntimeError("Runner 不支持并发调用 run")

        total = len(self._flow.steps)
        if up_to is None:
            up_to = total
        elif up_to < 0:
            raise ValueError(f"无效的步骤索引: {up_to}")

        self._running = True
        try:
            if not self._started:
                if self._execution_logger:
                    self._execution_logger.start()
                logger.info(f"开始回放流程: {self._flow.title} ({total} 个步骤)")
                await self._call_hook("before_all_steps", self._flow)
                self._started = True

            stop = min(up_to, total)
            while self._next_step < stop:
                if self._abort_requested:
                    return await self._handle_abort()
                await self._run_step(self._next_step, self._flow.steps[self._next_step])
                self._next_step += 1

            if self._next_step >= total:
                await self._call_hook("after_all_steps", self._flow)
                self._completed = True
                logger.info(f"流程回放完成: {self._flow.title}")
                return True

            return False
        finally:
            self._running = False
            self._abort_requested = False

    async def _run_step(self, index: int, step: Step) -> None:
        """执行单个步骤及其前后钩子"""
        logger.debug(
            f"执行步骤 {index}: {step.type}",
            extra={"flow_title": self._flow.title, "step_index": index, "step_type": step.type},
        )
        if self._execution_logger:
            self._execution_logger.step_start(index, step.type)

        try:
            await self._call_hook("before_each_step", step, self._flow)
            await self._extension.run_step(step, self._flow)
            await self._call_hook("after_each_step", step, self._flow)
        except Exception as e:
            if self._execution_logger:
                self._execution_logger.step_end(success=False, error=e)
            raise

        if self._execution_logger:
            self._execution_logger.step_end()

    async def _handle_abort(self) -> bool:
        logger.info(f"流程回放已中止: {self._flow.title}，停在步骤 {self._next_step}")
        if self._finalize_on_abort:
            await self._call_hook("after_all_steps", self._flow)
            self._finalized = True
        return False

    async def _call_hook(self, name: str, *args) -> None:
        """调用可选钩子，未实现时跳过"""
        hook = getattr(self._extension, name, None)
        if hook is None:
            return
        result = hook(*args)
        if inspect.isawaitable(result):
            await result

    def __repr__(self) -> str:
        return (
            f"Runner(flow={self._flow.title!r}, "
            f"next_step={self._next_step}/{len(self._flow.steps)}, "
            f"state={self.state.value})"
        )


# ========== 便捷函数 ==========

async def create_runner(
    flow: Union[UserFlow, ExtendableUserFlow, Dict[str, Any]],
    extension: RunnerExtension,
    finalize_on_abort: bool = False,
    execution_logger: ExecutionLogger = None,
) -> Runner:
    """
    创建 Runner

    原始字典会先解析；流程包含导入步骤时先展开导入。
    执行后端由调用方提供，不会自动启动浏览器。

    Args:
        flow: 流程（模型或原始字典）
        extension: 执行后端
        finalize_on_abort: 中止时是否执行 after_all_steps 并结束 Runner
        execution_logger: 执行日志记录器

    Returns:
        Runner
    """
    if isinstance(flow, dict):
        flow = FlowParser().parse(flow)
    if isinstance(flow, ExtendableUserFlow):
        flow = await import_steps(flow)

    return Runner(
        flow,
        extension,
        finalize_on_abort=finalize_on_abort,
        execution_logger=execution_logger,
    )


__all__ = [
    "RunnerState",
    "Runner",
    "create_runner",
]
