from typing import Any, Dict, Optional, Type
from pydantic import BaseModel, ConfigDict, Field, constr, create_model

_JSON_TYPES: Dict[str, type] = {
    "string": str,
    "integer": int,
    "number": float,
    "boolean": bool,
    "array": list,
    "object": dict,
}


def create_tool_validator(tool_name: str, parameters_schema: Dict[str, Any]) -> Type[BaseModel]:
    """
    Creates a Pydantic model class dynamically from a JSON Schema-like parameters definition.

    Supported per-property keys: type, default, pattern (strings only).
    "additionalProperties": false on the schema forbids unknown keys.
    """
    fields: Dict[str, Any] = {}
    props = parameters_schema.get("properties", {})
    required = set(parameters_schema.get("required", []))

    for field_name, field_def in props.items():
        json_type = field_def.get("type", "string")
        python_type: Any = _JSON_TYPES.get(json_type, str)

        pattern = field_def.get("pattern")
        if pattern and python_type is str:
            python_type = constr(pattern=pattern)

        is_req = field_name in required
        default_val = field_def.get("default")

        if is_req and default_val is None:
            field_info = Field(...)
            annotation = python_type
        else:
            field_info = Field(default=default_val)
            annotation = Optional[python_type]

        fields[field_name] = (annotation, field_info)

    extra_behavior = "forbid" if parameters_schema.get("additionalProperties") is False else "ignore"

    return create_model(
        f"{tool_name}_Validator",
        __config__=ConfigDict(extra=extra_behavior),
        **fields
    )
