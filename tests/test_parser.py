from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from userflow.flows import (
    ExtendableUserFlow,
    FlowParseError,
    FlowParser,
    ImportStep,
    UserFlow,
    parse,
)
from userflow.flows.schema import ClickStep, ScrollStep, SetViewportStep, WaitForElementStep


RECORDING = {
    "title": "checkout",
    "timeout": 10000,
    "selectorAttribute": "data-testid",
    "steps": [
        {
            "type": "setViewport",
            "width": 1280,
            "height": 720,
            "deviceScaleFactor": 1,
            "isMobile": False,
            "hasTouch": False,
            "isLandscape": True,
        },
        {
            "type": "navigate",
            "url": "https://example.com/cart",
            "assertedEvents": [{"type": "navigation", "url": "https://example.com/cart", "title": "Cart"}],
        },
        {
            "type": "click",
            "target": "main",
            "selectors": [["aria/Checkout"], ["#checkout"]],
            "offsetX": 12.5,
            "offsetY": 8,
        },
        {"type": "waitForElement", "selectors": [".item"], "operator": "<=", "count": 2},
        {"type": "scroll", "x": 0, "y": 400},
    ],
}


def test_parse_recording_into_typed_steps() -> None:
    flow = parse(RECORDING)

    assert isinstance(flow, UserFlow)
    assert flow.selector_attribute == "data-testid"
    assert flow.timeout == 10000

    viewport, navigate, click, wait, scroll = flow.steps
    assert isinstance(viewport, SetViewportStep) and viewport.is_landscape
    assert navigate.asserted_events[0].title == "Cart"
    assert isinstance(click, ClickStep)
    assert click.offset_x == 12.5
    assert click.selectors == [["aria/Checkout"], ["#checkout"]]
    assert isinstance(wait, WaitForElementStep) and wait.operator == "<="
    assert isinstance(scroll, ScrollStep) and scroll.selectors is None


def test_to_dict_keeps_wire_field_names() -> None:
    data = parse(RECORDING).to_dict()

    assert data["selectorAttribute"] == "data-testid"
    assert data["steps"][2]["offsetX"] == 12.5
    assert data["steps"][0]["deviceScaleFactor"] == 1
    assert "selectors" not in data["steps"][4]


def test_unknown_fields_are_preserved() -> None:
    flow = parse({"title": "t", "steps": [{"type": "navigate", "url": "https://a", "vendorHint": 3}]})

    assert flow.steps[0].to_dict()["vendorHint"] == 3


def test_flow_with_import_marker_is_extendable() -> None:
    flow = parse(
        {
            "title": "t",
            "steps": [
                {"type": "navigate", "url": "https://a"},
                {"type": "import", "from": "file", "target": "shared.json"},
            ],
        }
    )

    assert isinstance(flow, ExtendableUserFlow)
    assert flow.has_imports
    marker = flow.steps[1]
    assert isinstance(marker, ImportStep)
    assert marker.source == "file"
    assert marker.to_dict() == {"type": "import", "from": "file", "target": "shared.json"}


def test_flows_are_immutable() -> None:
    flow = parse(RECORDING)

    with pytest.raises(ValidationError):
        flow.title = "changed"


def test_unknown_step_type_is_rejected() -> None:
    with pytest.raises(FlowParseError) as exc_info:
        parse({"title": "t", "steps": [{"type": "teleport"}]})

    assert exc_info.value.errors


def test_missing_required_step_field_is_rejected() -> None:
    with pytest.raises(FlowParseError, match="steps"):
        parse({"title": "t", "steps": [{"type": "click", "selectors": ["#a"]}]})


def test_non_object_flow_is_rejected() -> None:
    with pytest.raises(FlowParseError):
        parse(["not", "a", "flow"])


def test_validate_reports_errors_without_raising() -> None:
    parser = FlowParser()

    ok, errors = parser.validate(RECORDING)
    assert ok and errors == []

    ok, errors = parser.validate({"steps": []})
    assert not ok
    assert any(error.startswith("title") for error in errors)


def test_parse_from_json_rejects_invalid_text() -> None:
    with pytest.raises(FlowParseError):
        FlowParser().parse_from_json("{oops")


def test_parse_from_yaml() -> None:
    flow = FlowParser().parse_from_yaml(
        """
title: yaml flow
steps:
  - type: navigate
    url: https://example.com
  - type: keyDown
    key: Enter
"""
    )

    assert flow.title == "yaml flow"
    assert [step.type for step in flow.steps] == ["navigate", "keyDown"]


def test_load_file_dispatches_on_suffix(tmp_path: Path, write_json) -> None:
    json_path = write_json("flow.json", {"title": "from json", "steps": []})
    yaml_path = tmp_path / "flow.yml"
    yaml_path.write_text("title: from yaml\nsteps: []\n", encoding="utf-8")

    parser = FlowParser()
    assert parser.load_file(json_path).title == "from json"
    assert parser.load_file(yaml_path).title == "from yaml"
