"""
执行日志模块

记录一次流程回放中每个步骤的结构化日志。
"""

import json
import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class ExecutionLogEntry:
    """执行日志条目"""
    id: str
    timestamp: str
    level: str
    execution_id: str
    message: str
    step_index: Optional[int] = None
    step_type: Optional[str] = None
    duration_ms: Optional[int] = None
    error: Optional[Dict[str, Any]] = None
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "level": self.level,
            "execution_id": self.execution_id,
            "message": self.message,
            "step_index": self.step_index,
            "step_type": self.step_type,
            "duration_ms": self.duration_ms,
            "error": self.error,
            "context": self.context,
        }


class ExecutionLogger:
    """
    执行日志记录器

    专门用于记录流程回放的日志。条目保存在内存中，
    同时转发到标准日志记录器 userflow.execution。

    Attributes:
        execution_id: 执行 ID
        entries: 日志条目列表
    """

    def __init__(self, execution_id: str = None, flow_title: str = None):
        self.execution_id = execution_id or str(uuid.uuid4())
        self.flow_title = flow_title
        self.entries: List[ExecutionLogEntry] = []
        self.logger = logging.getLogger("userflow.execution")
        self._start_time: Optional[datetime] = None
        self._current_step: Optional[int] = None
        self._current_step_type: Optional[str] = None
        self._step_start_time: Optional[float] = None

    def start(self) -> None:
        """开始执行日志记录"""
        self._start_time = datetime.utcnow()

    def log(
        self,
        level: str,
        message: str,
        step_index: int = None,
        step_type: str = None,
        duration_ms: int = None,
        error: Dict[str, Any] = None,
        **context,
    ) -> str:
        """
        记录日志

        Args:
            level: 日志级别
            message: 日志消息
            step_index: 步骤索引
            step_type: 步骤类型
            duration_ms: 持续时间（毫秒）
            error: 错误信息
            **context: 额外上下文

        Returns:
            日志条目 ID
        """
        entry = ExecutionLogEntry(
            id=str(uuid.uuid4()),
            timestamp=datetime.utcnow().isoformat(),
            level=level,
            execution_id=self.execution_id,
            message=message,
            step_index=step_index,
            step_type=step_type,
            duration_ms=duration_ms,
            error=error,
            context=context,
        )
        self.entries.append(entry)

        extra = {"flow_title": self.flow_title}
        if step_index is not None:
            extra["step_index"] = step_index
            extra["step_type"] = step_type
        self.logger.log(getattr(logging, level.upper()), message, extra=extra)

        return entry.id

    def info(self, message: str, **context) -> str:
        """记录信息日志"""
        return self.log("info", message, **context)

    def error(self, message: str, error: Dict[str, Any] = None, **context) -> str:
        """记录错误日志"""
        return self.log("error", message, error=error, **context)

    def step_start(self, step_index: int, step_type: str) -> None:
        """步骤开始"""
        self._current_step = step_index
        self._current_step_type = step_type
        self._step_start_time = time.time()

    def step_end(self, success: bool = True, error: BaseException = None) -> None:
        """步骤结束"""
        duration_ms = None
        if self._step_start_time:
            duration_ms = int((time.time() - self._step_start_time) * 1000)

        err_info = None
        if error is not None:
            err_info = {
                "type": error.__class__.__name__,
                "message": str(error),
            }

        self.log(
            level="info" if success else "error",
            message=f"步骤 {self._current_step} ({self._current_step_type}) {'成功' if success else '失败'}",
            step_index=self._current_step,
            step_type=self._current_step_type,
            duration_ms=duration_ms,
            error=err_info,
        )

        self._current_step = None
        self._current_step_type = None
        self._step_start_time = None

    def get_entries_by_level(self, level: str) -> List[ExecutionLogEntry]:
        """按级别获取日志条目"""
        return [e for e in self.entries if e.level == level]

    def get_errors(self) -> List[ExecutionLogEntry]:
        """获取所有错误日志"""
        return self.get_entries_by_level("error")

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            "execution_id": self.execution_id,
            "flow_title": self.flow_title,
            "start_time": self._start_time.isoformat() if self._start_time else None,
            "entries": [e.to_dict() for e in self.entries],
            "entry_count": len(self.entries),
            "error_count": len(self.get_errors()),
        }

    def to_json(self, indent: int = 2) -> str:
        """转换为 JSON 字符串"""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)

    def save_to_file(self, filepath: str) -> None:
        """保存到文件"""
        Path(filepath).parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.to_json())


__all__ = [
    "ExecutionLogEntry",
    "ExecutionLogger",
]
