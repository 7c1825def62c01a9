"""Parameter Coercion - Turns the oracle's text-typed parameter records into typed values."""

import json
import os
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, StrictBool, StrictFloat, StrictInt, StrictStr, TypeAdapter, ValidationError

VERBOSE = os.getenv("VERBOSE_LOGS", "0") == "1"

PARAMETER_KINDS = ("number", "string", "boolean", "array_string", "array_object", "object")


class _ParameterBase(BaseModel):
    name: str
    description: str = ""


class NumberParameter(_ParameterBase):
    kind: Literal["number"] = "number"
    value: Union[StrictInt, StrictFloat]


class StringParameter(_ParameterBase):
    kind: Literal["string"] = "string"
    value: StrictStr


class BooleanParameter(_ParameterBase):
    kind: Literal["boolean"] = "boolean"
    value: StrictBool


class StringListParameter(_ParameterBase):
    kind: Literal["array_string"] = "array_string"
    value: List[Any]


class RecordListParameter(_ParameterBase):
    kind: Literal["array_object"] = "array_object"
    value: List[Dict[str, Any]]


class RecordParameter(_ParameterBase):
    kind: Literal["object"] = "object"
    value: Dict[str, Any]


ConfigurableParameter = Annotated[
    Union[
        NumberParameter,
        StringParameter,
        BooleanParameter,
        StringListParameter,
        RecordListParameter,
        RecordParameter,
    ],
    Field(discriminator="kind"),
]

_parameter_adapter = TypeAdapter(ConfigurableParameter)


def _reject_constant(name: str):
    raise ValueError(f"{name} is not a JSON value")


def parse_value_text(value_text: Any) -> Any:
    """
    Decode a parameter value sent as JSON text.

    Single-quoted text is rewritten to a JSON string first. Anything that
    still fails to decode is returned unchanged as a plain string.
    """
    if not isinstance(value_text, str):
        return value_text

    candidate = value_text
    if len(candidate) >= 2 and candidate.startswith("'") and candidate.endswith("'"):
        inner = candidate[1:-1].replace('"', '\\"')
        candidate = f'"{inner}"'

    try:
        return json.loads(candidate, parse_constant=_reject_constant)
    except (json.JSONDecodeError, ValueError):
        if VERBOSE:
            print(f"⚠️ Could not JSON parse parameter value: {value_text!r}. Using as raw string.")
        return value_text


def infer_kind(value: Any) -> str:
    """Pick the parameter kind that matches a decoded value."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, list):
        if value and isinstance(value[0], dict):
            return "array_object"
        return "array_string"
    if isinstance(value, dict):
        return "object"
    return "string"


def refine_kind(declared: Optional[str], value: Any) -> str:
    """Correct the declared kind using the shape of the decoded value."""
    if isinstance(value, list) and value and isinstance(value[0], dict):
        return "array_object"
    if isinstance(value, dict):
        return "object"
    if declared in PARAMETER_KINDS and _fits(declared, value):
        return declared
    return infer_kind(value)


def _fits(kind: str, value: Any) -> bool:
    if kind == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if kind == "string":
        return isinstance(value, str)
    if kind == "boolean":
        return isinstance(value, bool)
    if kind == "array_string":
        return isinstance(value, list) and not (value and isinstance(value[0], dict))
    if kind == "array_object":
        return isinstance(value, list) and all(isinstance(item, dict) for item in value)
    if kind == "object":
        return isinstance(value, dict)
    return False


def coerce_parameter(record: Dict[str, Any]) -> ConfigurableParameter:
    """Build one typed parameter from a raw `{name, description, type, value}` record."""
    declared = record.get("kind", record.get("type"))
    value = parse_value_text(record.get("value"))
    if value is None:
        value = "" if record.get("value") is None else str(record.get("value"))
    kind = refine_kind(declared, value)

    payload = {
        "name": str(record.get("name", "")),
        "description": str(record.get("description", "") or ""),
        "kind": kind,
        "value": value,
    }
    try:
        return _parameter_adapter.validate_python(payload)
    except ValidationError:
        # array_object with mixed items lands here
        payload["kind"] = "array_string" if isinstance(value, list) else "string"
        if payload["kind"] == "string":
            payload["value"] = json.dumps(value, ensure_ascii=False)
        return _parameter_adapter.validate_python(payload)


def coerce_parameters(records: List[Any]) -> List[ConfigurableParameter]:
    """Coerce a batch of raw records. Records that are not mappings are skipped."""
    params = []
    for record in records or []:
        if not isinstance(record, dict):
            print(f"⚠️ Skipping malformed parameter record: {record!r}")
            continue
        params.append(coerce_parameter(record))
    return params


def dump_parameters(params: List[ConfigurableParameter]) -> List[Dict[str, Any]]:
    return [p.model_dump() for p in params]
