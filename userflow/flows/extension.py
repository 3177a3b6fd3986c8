"""
执行后端抽象基类

定义回放引擎依赖的执行后端接口。
"""

from abc import ABC, abstractmethod

from .schema import Step, UserFlow


class RunnerExtension(ABC):
    """
    执行后端抽象基类

    run_step 必须实现；四个生命周期钩子可选，默认不做任何事。
    执行后端（及其持有的浏览器会话等资源）由调用方创建和销毁，
    Runner 只引用不负责释放。

    不继承此类的对象也可作为后端使用，只要提供 run_step，
    缺失的钩子视为空操作。
    """

    async def before_all_steps(self, flow: UserFlow) -> None:
        """所有步骤执行前调用一次"""
        pass

    async def before_each_step(self, step: Step, flow: UserFlow) -> None:
        """每个步骤执行前调用"""
        pass

    @abstractmethod
    async def run_step(self, step: Step, flow: UserFlow) -> None:
        """
        执行单个步骤

        Args:
            step: 步骤
            flow: 步骤所属流程

        Raises:
            StepExecutionError: 找不到目标元素、超时或断言失败等
        """
        pass

    async def after_each_step(self, step: Step, flow: UserFlow) -> None:
        """每个步骤成功执行后调用"""
        pass

    async def after_all_steps(self, flow: UserFlow) -> None:
        """流程全部完成后调用一次"""
        pass


__all__ = ["RunnerExtension"]
