"""
Tests for stack parameter handling.
"""

import json

import pytest

from stackup.parameters import (
    format_value,
    load_parameters,
    merge_parameters,
    parse_parameter_overrides,
    to_parameter_records,
)


class TestToParameterRecords:
    """Test converting parameters to records."""

    def test_mapping(self):
        assert to_parameter_records({"B": 1, "A": "x"}) == [
            {"ParameterKey": "B", "ParameterValue": "1"},
            {"ParameterKey": "A", "ParameterValue": "x"},
        ]

    def test_records_passed_through(self):
        records = [
            {"ParameterKey": "A", "ParameterValue": "x"},
            {"ParameterKey": "B", "UsePreviousValue": True},
        ]
        result = to_parameter_records(records)
        assert result == records
        assert result[1] is records[1]

    def test_invalid_record(self):
        with pytest.raises(ValueError):
            to_parameter_records([{"Key": "A"}])


def test_format_value():
    assert format_value(True) == "true"
    assert format_value(False) == "false"
    assert format_value(["a", "b", 3]) == "a,b,3"
    assert format_value(42) == "42"


class TestOverrides:
    """Test KEY=VALUE overrides."""

    def test_parse(self):
        assert parse_parameter_overrides(["A=1", "B=x=y", "C="]) == {
            "A": "1",
            "B": "x=y",
            "C": "",
        }

    @pytest.mark.parametrize("item", ["A", "=1"])
    def test_parse_invalid(self, item):
        with pytest.raises(ValueError):
            parse_parameter_overrides([item])

    def test_merge_keeps_order(self):
        base = [
            {"ParameterKey": "A", "ParameterValue": "1"},
            {"ParameterKey": "B", "ParameterValue": "2"},
        ]
        assert merge_parameters(base, {"B": "3", "C": "4"}) == [
            {"ParameterKey": "A", "ParameterValue": "1"},
            {"ParameterKey": "B", "ParameterValue": "3"},
            {"ParameterKey": "C", "ParameterValue": "4"},
        ]
        assert base[1]["ParameterValue"] == "2"


class TestLoadParameters:
    """Test reading parameter files."""

    def test_yaml_mapping(self, tmp_path):
        param_file = tmp_path / "params.yaml"
        param_file.write_text("Env: dev\nDebug: true\nZones:\n  - a\n  - b\n")

        assert load_parameters(param_file) == [
            {"ParameterKey": "Env", "ParameterValue": "dev"},
            {"ParameterKey": "Debug", "ParameterValue": "true"},
            {"ParameterKey": "Zones", "ParameterValue": "a,b"},
        ]

    def test_json_records(self, tmp_path):
        records = [{"ParameterKey": "Env", "ParameterValue": "prod"}]
        param_file = tmp_path / "params.json"
        param_file.write_text(json.dumps(records))

        assert load_parameters(param_file) == records

    def test_empty_file(self, tmp_path):
        param_file = tmp_path / "params.yaml"
        param_file.write_text("")
        assert load_parameters(param_file) == []

    def test_scalar_file_rejected(self, tmp_path):
        param_file = tmp_path / "params.yaml"
        param_file.write_text("just a string\n")
        with pytest.raises(ValueError):
            load_parameters(param_file)
