"""
流程回放模块

提供录制流程的数据模型、导入解析和按步骤回放功能。

主要组件:
- UserFlow: 录制流程数据模型
- FlowParser: 流程定义解析器
- import_steps: 导入步骤解析
- RunnerExtension: 执行后端接口
- Runner: 可分段继续的流程回放器

使用示例:
    ```python
    from userflow.flows import RunnerExtension, create_runner

    class PrintExtension(RunnerExtension):
        async def run_step(self, step, flow):
            print(step.type)

    flow_data = {
        "title": "登录流程",
        "steps": [
            {"type": "navigate", "url": "https://example.com/login"},
            {"type": "import", "from": "file", "target": "recordings/fill_login.json"},
            {"type": "click", "selectors": ["#submit"], "offsetX": 1, "offsetY": 1},
        ],
    }

    runner = await create_runner(flow_data, PrintExtension())
    await runner.run(1)      # 只执行第一个步骤
    done = await runner.run()  # 继续执行剩余步骤
    ```
"""

from .errors import (
    FlowError,
    FlowParseError,
    StepImportError,
    UnsupportedSourceError,
    StepExecutionError,
    FlowRunFailure,
    ConfigError,
)
from .schema import (
    StepType,
    ImportSource,
    NavigationEvent,
    ImportStep,
    Step,
    UserFlow,
    ExtendableUserFlow,
    is_import_step,
)
from .parsers import FlowParser, parse
from .importer import import_steps
from .extension import RunnerExtension
from .runner import Runner, RunnerState, create_runner

__all__ = [
    # Errors
    "FlowError",
    "FlowParseError",
    "StepImportError",
    "UnsupportedSourceError",
    "StepExecutionError",
    "FlowRunFailure",
    "ConfigError",
    # Schema
    "StepType",
    "ImportSource",
    "NavigationEvent",
    "ImportStep",
    "Step",
    "UserFlow",
    "ExtendableUserFlow",
    "is_import_step",
    # Parsers
    "FlowParser",
    "parse",
    # Importer
    "import_steps",
    # Runner
    "RunnerExtension",
    "Runner",
    "RunnerState",
    "create_runner",
]
