"""
Stack parameter loading and normalisation.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Union

import yaml

ParameterRecord = Dict[str, Any]
Parameters = Union[Mapping[str, Any], Sequence[ParameterRecord]]


def format_value(value: Any) -> str:
    """Render a parameter value the way CloudFormation expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(format_value(v) for v in value)
    return str(value)


def to_parameter_records(parameters: Parameters) -> List[ParameterRecord]:
    """
    Convert parameters to CloudFormation parameter records.

    Records that already carry a ParameterKey are passed through unchanged;
    a mapping becomes one record per key, in iteration order.
    """
    if isinstance(parameters, Mapping):
        return [
            {"ParameterKey": str(key), "ParameterValue": format_value(value)}
            for key, value in parameters.items()
        ]

    records = []
    for record in parameters:
        if not isinstance(record, Mapping) or "ParameterKey" not in record:
            raise ValueError(f"Invalid parameter record: {record!r}")
        records.append(record)
    return records


def parse_parameter_overrides(overrides: Iterable[str]) -> Dict[str, str]:
    """Parse KEY=VALUE strings."""
    result: Dict[str, str] = {}
    for item in overrides:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise ValueError(f"Parameter override must be KEY=VALUE: {item!r}")
        result[key] = value
    return result


def merge_parameters(
    base: Parameters, overrides: Mapping[str, Any]
) -> List[ParameterRecord]:
    """Apply overrides on top of base parameters, keeping base order."""
    records = [dict(r) for r in to_parameter_records(base)]
    positions = {r["ParameterKey"]: i for i, r in enumerate(records)}

    for key, value in overrides.items():
        record = {"ParameterKey": key, "ParameterValue": format_value(value)}
        if key in positions:
            records[positions[key]] = record
        else:
            positions[key] = len(records)
            records.append(record)
    return records


def load_parameters(path: Union[str, Path]) -> List[ParameterRecord]:
    """
    Load parameters from a YAML or JSON file.

    The file holds either a mapping of key to value, or a list of parameter
    records as accepted by ``aws cloudformation create-stack``.
    """
    param_file = Path(path)
    with open(param_file, "r") as f:
        if param_file.suffix == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    if data is None:
        return []
    if not isinstance(data, (dict, list)):
        raise ValueError(f"Parameters file {param_file} must hold a mapping or a list")
    return to_parameter_records(data)
