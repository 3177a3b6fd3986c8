"""
userflow

录制用户流程的回放引擎。读取录制的流程（导航、点击、输入、等待条件等步骤），
展开其中的导入步骤后，按顺序交给执行后端在浏览器中执行。

主要组件:
- UserFlow / FlowParser: 流程数据模型与解析
- import_steps: 导入步骤展开
- RunnerExtension: 执行后端接口
- Runner / create_runner: 可分段继续的回放器
"""

from userflow.flows import (
    FlowError,
    FlowParseError,
    StepImportError,
    UnsupportedSourceError,
    StepExecutionError,
    FlowRunFailure,
    ConfigError,
    StepType,
    ImportSource,
    ImportStep,
    Step,
    UserFlow,
    ExtendableUserFlow,
    FlowParser,
    parse,
    import_steps,
    RunnerExtension,
    Runner,
    RunnerState,
    create_runner,
)

__version__ = "0.1.0"

__all__ = [
    "FlowError",
    "FlowParseError",
    "StepImportError",
    "UnsupportedSourceError",
    "StepExecutionError",
    "FlowRunFailure",
    "ConfigError",
    "StepType",
    "ImportSource",
    "ImportStep",
    "Step",
    "UserFlow",
    "ExtendableUserFlow",
    "FlowParser",
    "parse",
    "import_steps",
    "RunnerExtension",
    "Runner",
    "RunnerState",
    "create_runner",
]
