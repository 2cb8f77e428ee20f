from __future__ import annotations

import json

import pytest

from campaign_import.models.validation_error import EMPTY_VALUE, ValidationError


@pytest.mark.parametrize("raw,text", [(None, EMPTY_VALUE), ("", EMPTY_VALUE), ("  ", EMPTY_VALUE), (91, "91"),
                                      ("abc", "abc")])
def test_create_renders_value(raw, text):
    e = ValidationError.create(row=2, column="Latitude", field_key="latitude", value=raw, message="m")
    assert e.value == text


def test_equal_errors_compare_equal():
    a = ValidationError.create(row=3, column="Ward Name", field_key="ward_name", value=None, message="Ward Name is required")
    b = ValidationError.create(row=3, column="Ward Name", field_key="ward_name", value="", message="Ward Name is required")
    assert a == b


def test_to_json_line_keeps_non_ascii():
    e = ValidationError.create(row=4, column="Ward Name", field_key="ward_name", value="அண்ணா நகர்", message="m")
    line = e.to_json_line()
    assert "அண்ணா நகர்" in line
    assert json.loads(line)["row"] == 4
