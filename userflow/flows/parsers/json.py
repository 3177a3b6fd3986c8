"""
流程解析器模块

提供录制流程的数据解析功能。
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

import yaml
from pydantic import ValidationError

from userflow.flows.errors import FlowParseError
from userflow.flows.schema import ExtendableUserFlow, UserFlow, is_import_step


class FlowParser:
    """
    流程解析器

    负责将 JSON / YAML 格式的录制文件解析为 UserFlow。
    步骤中包含导入步骤时返回 ExtendableUserFlow，需要先经过导入解析。
    """

    suffixes = {
        ".json": "json",
        ".yaml": "yaml",
        ".yml": "yaml",
    }

    def parse(self, data: Dict[str, Any]) -> Union[UserFlow, ExtendableUserFlow]:
        """
        解析流程定义

        Args:
            data: 原始流程数据

        Returns:
            UserFlow 或 ExtendableUserFlow

        Raises:
            FlowParseError: 流程定义无效
        """
        if not isinstance(data, dict):
            raise FlowParseError(f"流程定义必须是对象，实际为 {type(data).__name__}")

        steps = data.get("steps")
        model = UserFlow
        if isinstance(steps, list) and any(is_import_step(step) for step in steps):
            model = ExtendableUserFlow

        try:
            return model.model_validate(data)
        except ValidationError as e:
            errors = self._format_errors(e)
            raise FlowParseError(
                f"流程定义无效: {'; '.join(errors)}",
                errors=errors,
            ) from e

    def parse_from_json(self, json_data: str) -> Union[UserFlow, ExtendableUserFlow]:
        """从 JSON 字符串解析流程"""
        try:
            data = json.loads(json_data)
        except json.JSONDecodeError as e:
            raise FlowParseError(f"JSON 解析失败: {e}") from e
        return self.parse(data)

    def parse_from_yaml(self, yaml_data: str) -> Union[UserFlow, ExtendableUserFlow]:
        """从 YAML 字符串解析流程"""
        try:
            data = yaml.safe_load(yaml_data)
        except yaml.YAMLError as e:
            raise FlowParseError(f"YAML 解析失败: {e}") from e
        return self.parse(data)

    def load_file(self, path: Union[str, Path]) -> Union[UserFlow, ExtendableUserFlow]:
        """
        从文件加载流程

        根据扩展名选择格式，未知扩展名按 JSON 处理。
        """
        path = Path(path)
        content = path.read_text(encoding="utf-8")
        if self.suffixes.get(path.suffix.lower()) == "yaml":
            return self.parse_from_yaml(content)
        return self.parse_from_json(content)

    def validate(self, data: Dict[str, Any]) -> Tuple[bool, List[str]]:
        """
        验证流程定义

        Args:
            data: 流程数据

        Returns:
            (is_valid, errors)
        """
        try:
            self.parse(data)
        except FlowParseError as e:
            return False, e.errors or [e.message]
        return True, []

    def _format_errors(self, error: ValidationError) -> List[str]:
        """将 pydantic 校验错误转换为可读文本"""
        errors = []
        for item in error.errors():
            location = ".".join(str(part) for part in item.get("loc", ()))
            errors.append(f"{location or '<root>'}: {item.get('msg')}")
        return errors


def parse(data: Dict[str, Any]) -> Union[UserFlow, ExtendableUserFlow]:
    """解析流程定义（便捷函数）"""
    return FlowParser().parse(data)
