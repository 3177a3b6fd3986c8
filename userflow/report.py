"""
批量回放模块

提供录制文件查找、批量回放和结果汇总功能。
"""

import asyncio
import inspect
import logging
import os
import signal
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from userflow.extensions import ExtensionFactory, create_default_extension
from userflow.flows import FlowParser, FlowRunFailure, create_runner
from userflow.logger import ExecutionLogger

logger = logging.getLogger(__name__)

RECORDING_SUFFIXES = (".json",)

# 颜色输出
GREEN = "\033[42;97m"
RED = "\033[41;97m"
YELLOW = "\033[43;97m"
BOLD = "\033[1m"
RESET = "\033[0m"


@dataclass
class RunResult:
    """单个录制文件的回放结果"""
    file: str
    title: str = ""
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None
    # None: 等待中
    success: Optional[bool] = None
    error: Optional[BaseException] = None

    @property
    def duration_ms(self) -> int:
        if self.finished_at is None:
            return 0
        return max(int((self.finished_at - self.started_at).total_seconds() * 1000), 0)

    def to_dict(self) -> dict:
        return {
            "file": self.file,
            "title": self.title,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "success": self.success,
            "duration_ms": self.duration_ms,
            "error": str(self.error) if self.error else None,
        }


def get_json_files_from_folder(path: str) -> List[str]:
    """列出目录下的录制文件"""
    return sorted(
        os.path.join(path, name)
        for name in os.listdir(path)
        if os.path.splitext(name)[1] in RECORDING_SUFFIXES
    )


def get_recording_paths(paths: Iterable[str], log: bool = True) -> List[str]:
    """
    展开录制文件路径

    目录展开为其中的录制文件，不存在的路径记录错误后跳过。
    """
    recording_paths = []

    for path in paths:
        if not os.path.exists(path):
            if log:
                logger.error(f"找不到文件或目录: {path}")
            continue

        if os.path.isdir(path):
            files = get_json_files_from_folder(path)
            if not files and log:
                logger.error(f"目录中没有录制文件: {path}")
            recording_paths.extend(files)
        else:
            recording_paths.append(path)

    return recording_paths


class StatusReport:
    """
    回放状态汇总

    记录每个文件的回放结果和错误，并渲染为文本表格。
    """

    headers = ("Title", "Status", "File", "Duration")

    def __init__(self, files: List[str], color: bool = True):
        self.results = [RunResult(file=file) for file in files]
        self.errors: List[Tuple[str, BaseException]] = []
        self.color = color

    def start(self, index: int) -> RunResult:
        result = self.results[index]
        result.started_at = datetime.now()
        return result

    def finish(self, index: int, success: bool, error: BaseException = None) -> RunResult:
        result = self.results[index]
        result.success = success
        result.error = error
        result.finished_at = datetime.now()
        if error is not None:
            self.errors.append((result.file, error))
        return result

    @property
    def all_passed(self) -> bool:
        return all(result.success for result in self.results)

    def _status(self, result: RunResult) -> str:
        if result.success is None:
            text, color = " Pending ", YELLOW
        elif result.success:
            text, color = " Success ", GREEN
        else:
            text, color = " Failure ", RED
        return f"{color}{text}{RESET}" if self.color else text.strip()

    def render(self) -> str:
        """渲染结果表格"""
        rows = []
        for result in self.results:
            try:
                file = os.path.relpath(result.file)
            except ValueError:
                file = result.file
            rows.append((result.title, self._status(result), file, f"{result.duration_ms}ms"))

        visible = [[_visible_len(cell) for cell in row] for row in rows]
        widths = [
            max([len(header)] + [cells[i] for cells in visible])
            for i, header in enumerate(self.headers)
        ]

        def line(cells, lengths):
            return "║ " + " │ ".join(
                cell + " " * (width - length)
                for cell, length, width in zip(cells, lengths, widths)
            ) + " ║"

        header = line(self.headers, [len(h) for h in self.headers])
        if self.color:
            header = f"{BOLD}{header}{RESET}"

        lines = ["╔" + "╤".join("═" * (w + 2) for w in widths) + "╗", header]
        lines.append("╟" + "┼".join("─" * (w + 2) for w in widths) + "╢")
        for row, lengths in zip(rows, visible):
            lines.append(line(row, lengths))
        lines.append("╚" + "╧".join("═" * (w + 2) for w in widths) + "╝")
        return "\n".join(lines)

    def render_errors(self) -> str:
        """渲染错误详情"""
        blocks = []
        for file, error in self.errors:
            title = "Error running file:"
            if self.color:
                title = f"{RED}{title}{RESET}"
            blocks.append(f"{title} {file}\n{type(error).__name__}: {error}")
        return "\n\n".join(blocks)


def _visible_len(text: str) -> int:
    for code in (GREEN, RED, YELLOW, BOLD, RESET):
        text = text.replace(code, "")
    return len(text)


def _create_extension(factory: ExtensionFactory, options: Optional[Dict[str, Any]]) -> Any:
    """
    创建执行后端

    只传入工厂签名中声明过的选项，接受 **kwargs 的工厂收到全部选项。
    """
    if not options:
        return factory()
    try:
        parameters = list(inspect.signature(factory).parameters.values())
    except (TypeError, ValueError):
        return factory()
    if any(p.kind is inspect.Parameter.VAR_KEYWORD for p in parameters):
        return factory(**options)
    accepted = {p.name for p in parameters}
    return factory(**{k: v for k, v in options.items() if k in accepted})


def _install_abort_handler(runner: Any) -> bool:
    """Ctrl+C 时中止当前 Runner，平台不支持时返回 False"""
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, runner.abort)
    except (NotImplementedError, RuntimeError):
        return False
    return True


async def _close_extension(extension: Any) -> None:
    close = getattr(extension, "close", None)
    if close is None:
        return
    result = close()
    if inspect.isawaitable(result):
        await result


async def run_files(
    files: List[str],
    extension_factory: ExtensionFactory = None,
    finalize_on_abort: bool = False,
    log_dir: Optional[str] = None,
    on_result: Callable[[RunResult], None] = None,
    report: StatusReport = None,
    extension_options: Optional[Dict[str, Any]] = None,
    abort_on_signal: bool = False,
) -> StatusReport:
    """
    依次回放录制文件

    每个文件使用新的执行后端实例，回放结束后关闭它。

    Args:
        files: 录制文件列表
        extension_factory: 执行后端工厂，默认空跑
        finalize_on_abort: 传给 Runner
        log_dir: 指定时把每个文件的执行日志保存为 JSON
        on_result: 每个文件完成后的回调
        report: 结果汇总，默认新建
        extension_options: 创建执行后端时传入的选项（如 headless），
                           工厂未声明的选项会被忽略
        abort_on_signal: 回放期间收到 SIGINT 时调用 Runner.abort()

    Returns:
        StatusReport

    Raises:
        FlowRunFailure: 存在回放失败的文件
    """
    extension_factory = extension_factory or create_default_extension
    parser = FlowParser()
    report = report or StatusReport(files)

    for index, file in enumerate(files):
        result = report.start(index)
        extension = None
        execution_logger = None
        try:
            flow = parser.load_file(file)
            result.title = flow.title
            execution_logger = ExecutionLogger(flow_title=flow.title)

            extension = _create_extension(extension_factory, extension_options)
            runner = await create_runner(
                flow,
                extension,
                finalize_on_abort=finalize_on_abort,
                execution_logger=execution_logger,
            )
            handled = abort_on_signal and _install_abort_handler(runner)
            try:
                success = await runner.run()
            finally:
                if handled:
                    asyncio.get_running_loop().remove_signal_handler(signal.SIGINT)
            report.finish(index, success)
        except Exception as e:
            logger.error(f"回放失败: {file}: {e}")
            report.finish(index, False, e)
        finally:
            if extension is not None:
                await _close_extension(extension)
            if log_dir and execution_logger is not None:
                execution_logger.save_to_file(str(Path(log_dir) / f"{Path(file).stem}.log.json"))

        if on_result:
            on_result(result)

    if not report.all_passed:
        failures = [result for result in report.results if not result.success]
        raise FlowRunFailure("部分录制回放失败", failures=failures)

    return report


__all__ = [
    "RunResult",
    "StatusReport",
    "get_json_files_from_folder",
    "get_recording_paths",
    "run_files",
]
