"""
用户流程数据模型

定义录制用户流程（UserFlow）及其步骤的数据结构。

步骤是以 type 字段区分的封闭联合类型。回放引擎只关心导入步骤
（type = "import"），其余步骤作为不透明的数据原样交给执行后端。
JSON 中的字段名保持 camelCase（如 selectorAttribute、assertedEvents），
Python 中使用 snake_case 属性访问。
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


Selector = Union[str, List[str]]
FrameSelector = List[int]


class StepType(str, Enum):
    """步骤类型"""
    CHANGE = "change"
    CLICK = "click"
    HOVER = "hover"
    CLOSE = "close"
    CUSTOM_STEP = "customStep"
    DOUBLE_CLICK = "doubleClick"
    EMULATE_NETWORK_CONDITIONS = "emulateNetworkConditions"
    KEY_DOWN = "keyDown"
    KEY_UP = "keyUp"
    NAVIGATE = "navigate"
    SCROLL = "scroll"
    SET_VIEWPORT = "setViewport"
    WAIT_FOR_ELEMENT = "waitForElement"
    WAIT_FOR_EXPRESSION = "waitForExpression"
    IMPORT = "import"


class ImportSource(str, Enum):
    """导入来源"""
    FILE = "file"
    URL = "url"


class _FlowModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="allow",
    )

    def to_dict(self) -> Dict[str, Any]:
        """转换为 JSON 兼容字典（camelCase，省略空字段）"""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class NavigationEvent(_FlowModel):
    """步骤执行后期望发生的导航事件"""
    type: Literal["navigation"] = "navigation"
    url: Optional[str] = None
    title: Optional[str] = None


AssertedEvent = NavigationEvent


# ========== 步骤基类 ==========

class BaseStep(_FlowModel):
    """所有步骤的公共属性"""
    type: str
    timeout: Optional[int] = None
    asserted_events: Optional[List[AssertedEvent]] = None


class StepWithTarget(BaseStep):
    # 默认为 main
    target: Optional[str] = None


class StepWithFrame(StepWithTarget):
    # 默认为主框架
    frame: Optional[FrameSelector] = None


class StepWithSelectors(StepWithFrame):
    """
    带选择器的步骤

    selectors 是一组备选选择器，每个选择器可以是字符串或字符串数组；
    数组时最后一项指向目标元素，前面的项依次指向其祖先（可跨越 shadow root）。
    """
    selectors: List[Selector]


class ClickAttributes(_FlowModel):
    device_type: Optional[Literal["mouse", "pen", "touch"]] = None
    button: Optional[Literal["primary", "auxiliary", "secondary", "back", "forward"]] = None
    offset_x: float
    offset_y: float


# ========== 用户操作步骤 ==========

class ChangeStep(StepWithSelectors):
    type: Literal["change"] = "change"
    value: str


class ClickStep(StepWithSelectors, ClickAttributes):
    type: Literal["click"] = "click"
    duration: Optional[int] = None  # mouse down 与 mouse up 之间的毫秒数


class DoubleClickStep(StepWithSelectors, ClickAttributes):
    type: Literal["doubleClick"] = "doubleClick"


class HoverStep(StepWithSelectors):
    type: Literal["hover"] = "hover"


class CloseStep(StepWithTarget):
    type: Literal["close"] = "close"


class CustomStep(StepWithFrame):
    type: Literal["customStep"] = "customStep"
    name: str
    parameters: Any = None


class EmulateNetworkConditionsStep(StepWithTarget):
    type: Literal["emulateNetworkConditions"] = "emulateNetworkConditions"
    download: float
    upload: float
    latency: float


class KeyDownStep(StepWithTarget):
    type: Literal["keyDown"] = "keyDown"
    key: str


class KeyUpStep(StepWithTarget):
    type: Literal["keyUp"] = "keyUp"
    key: str


class NavigateStep(StepWithTarget):
    type: Literal["navigate"] = "navigate"
    url: str


class ScrollStep(StepWithFrame):
    """滚动页面或元素（提供 selectors 时滚动元素）"""
    type: Literal["scroll"] = "scroll"
    x: Optional[float] = None
    y: Optional[float] = None
    selectors: Optional[List[Selector]] = None


class SetViewportStep(StepWithTarget):
    type: Literal["setViewport"] = "setViewport"
    width: int
    height: int
    device_scale_factor: float
    is_mobile: bool
    has_touch: bool
    is_landscape: bool


# ========== 断言步骤 ==========

class WaitForElementStep(StepWithSelectors):
    """
    等待匹配选择器的元素数量满足条件

    例如 {"type": "waitForElement", "selectors": [".item"], "operator": "<=", "count": 2}
    """
    type: Literal["waitForElement"] = "waitForElement"
    operator: Optional[Literal[">=", "==", "<="]] = None  # 默认 ==
    count: Optional[int] = None  # 默认 1


class WaitForExpressionStep(StepWithFrame):
    """等待 JavaScript 表达式结果为真值"""
    type: Literal["waitForExpression"] = "waitForExpression"
    expression: str


# ========== 导入步骤 ==========

class ImportStep(_FlowModel):
    """
    导入步骤

    执行前由导入解析器替换为外部来源中的步骤，本身不会被执行。
    JSON 字段 from 在 Python 中为 source。
    """
    type: Literal["import"] = "import"
    source: str = Field(alias="from")
    target: str


STEP_CLASSES = (
    ChangeStep,
    ClickStep,
    HoverStep,
    CloseStep,
    CustomStep,
    DoubleClickStep,
    EmulateNetworkConditionsStep,
    KeyDownStep,
    KeyUpStep,
    NavigateStep,
    ScrollStep,
    SetViewportStep,
    WaitForElementStep,
    WaitForExpressionStep,
)

Step = Annotated[Union[STEP_CLASSES], Field(discriminator="type")]
ExtendableStep = Annotated[Union[(ImportStep,) + STEP_CLASSES], Field(discriminator="type")]

step_adapter = TypeAdapter(Step)


# ========== 流程 ==========

class UserFlow(_FlowModel):
    """
    用户流程

    Attributes:
        title: 流程标题
        timeout: 超时时间（毫秒），作为元数据交给执行后端
        selector_attribute: 生成选择器时优先使用的属性名
        steps: 有序步骤列表（不含导入步骤）
    """
    title: str
    timeout: Optional[int] = None
    selector_attribute: Optional[str] = None
    steps: List[Step]


class ExtendableUserFlow(_FlowModel):
    """可能包含导入步骤的用户流程"""
    title: str
    timeout: Optional[int] = None
    selector_attribute: Optional[str] = None
    steps: List[ExtendableStep]

    @property
    def has_imports(self) -> bool:
        """是否包含导入步骤"""
        return any(is_import_step(step) for step in self.steps)


def is_import_step(step: Any) -> bool:
    """判断步骤是否为导入步骤（支持模型和原始字典）"""
    if isinstance(step, dict):
        return step.get("type") == StepType.IMPORT.value
    return getattr(step, "type", None) == StepType.IMPORT.value


__all__ = [
    "Selector",
    "FrameSelector",
    "StepType",
    "ImportSource",
    "NavigationEvent",
    "AssertedEvent",
    "BaseStep",
    "StepWithTarget",
    "StepWithFrame",
    "StepWithSelectors",
    "ChangeStep",
    "ClickStep",
    "DoubleClickStep",
    "HoverStep",
    "CloseStep",
    "CustomStep",
    "EmulateNetworkConditionsStep",
    "KeyDownStep",
    "KeyUpStep",
    "NavigateStep",
    "ScrollStep",
    "SetViewportStep",
    "WaitForElementStep",
    "WaitForExpressionStep",
    "ImportStep",
    "STEP_CLASSES",
    "Step",
    "ExtendableStep",
    "step_adapter",
    "UserFlow",
    "ExtendableUserFlow",
    "is_import_step",
]
