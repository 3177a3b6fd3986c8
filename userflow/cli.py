"""
命令行入口

回放一个或多个录制文件（或包含录制文件的目录）。
"""

import argparse
import asyncio
import logging
import sys
from typing import List

from userflow.config import get_config, get_headless_env_var
from userflow.extensions import get_extension_factory
from userflow.flows import ExtendableUserFlow, FlowError, FlowParser, import_steps
from userflow.logger import LogFormat, LogLevel, configure_logging
from userflow.report import StatusReport, get_recording_paths, run_files

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="userflow-replay",
        description="录制流程回放工具",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
    userflow-replay recordings/                      # 回放目录下所有录制（空跑）
    userflow-replay login.json --extension my_ext:BrowserExtension
    userflow-replay login.json --check               # 只检查解析和导入
    userflow-replay recordings/ --log --log-level DEBUG
        """,
    )

    parser.add_argument(
        "files",
        nargs="+",
        help="录制文件或目录",
    )
    parser.add_argument(
        "--extension",
        type=str,
        default=None,
        help="执行后端，package.module[:attr] 或 path/to/file.py[:attr] (默认: 空跑)",
    )
    parser.add_argument(
        "--headless",
        type=str,
        default=None,
        help="无头模式: true/false/chrome (默认: true)",
    )
    parser.add_argument(
        "--log",
        action="store_true",
        help="输出回放结果表格",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="只解析录制文件并展开导入，不执行",
    )
    parser.add_argument(
        "--finalize-on-abort",
        action="store_true",
        help="中止时仍执行 after_all_steps",
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default=None,
        help="保存每个录制的执行日志 (JSON)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=[level.name for level in LogLevel],
        help="日志级别 (默认: INFO)",
    )
    parser.add_argument(
        "--log-format",
        type=str,
        default=None,
        choices=[fmt.value for fmt in LogFormat],
        help="日志格式 (默认: simple)",
    )
    return parser


async def check_files(files: List[str]) -> bool:
    """解析录制文件并展开导入，返回是否全部有效"""
    parser = FlowParser()
    valid = True
    for file in files:
        try:
            flow = parser.load_file(file)
            if isinstance(flow, ExtendableUserFlow):
                flow = await import_steps(flow)
            print(f"OK   {file}: {flow.title} ({len(flow.steps)} 个步骤)")
        except (FlowError, OSError) as e:
            valid = False
            print(f"FAIL {file}: {e}")
    return valid


def main(argv: List[str] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = get_config()
        if args.headless is not None:
            config.runner.headless = get_headless_env_var(args.headless)
    except FlowError as e:
        logger.error(str(e))
        return 1

    if args.log_level:
        config.log.level = LogLevel[args.log_level]
    if args.log_format:
        config.log.format = LogFormat(args.log_format)
    configure_logging(config.log.to_log_config())

    files = get_recording_paths(args.files)
    if not files:
        logger.error("没有可回放的录制文件")
        return 1

    if args.check:
        return 0 if asyncio.run(check_files(files)) else 1

    try:
        extension_factory = get_extension_factory(args.extension or config.runner.extension)
    except FlowError as e:
        logger.error(str(e))
        return 1

    report = StatusReport(files, color=sys.stdout.isatty())

    try:
        asyncio.run(run_files(
            files,
            extension_factory,
            finalize_on_abort=args.finalize_on_abort or config.runner.finalize_on_abort,
            log_dir=args.log_dir,
            report=report,
            extension_options={"headless": config.runner.headless},
            abort_on_signal=True,
        ))
        return 0
    except FlowError as e:
        logger.error(str(e))
        return 1
    finally:
        if args.log:
            print(report.render())
        if report.errors:
            print(report.render_errors())


if __name__ == "__main__":
    sys.exit(main())
