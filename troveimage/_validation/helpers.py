"""
These functions return JSON objects that jsonschema can use to validate JSON
Data.
"""

from typing import Dict, List


def type_any_of(*schemas: Dict) -> Dict:
    """Any of the given schemas"""
    return {"anyOf": list(schemas)}


def type_dict(
    properties: Dict = None,
    required: List = None,
    additional_properties: Dict | bool | None = None,
) -> Dict:
    """Object"""

    val = {"type": "object"}

    if properties is not None:
        val["properties"] = properties

    if required is not None:
        val["required"] = required

    if additional_properties is not None:
        val["additionalProperties"] = additional_properties

    return val


def type_str(
    enum: List = None,
    pattern: str = None,
    format_name: str = None,
    min_length: int | None = None,
) -> Dict:
    """String"""

    val = {"type": "string"}

    if enum is not None:
        val["enum"] = enum

    if pattern is not None:
        val["pattern"] = pattern

    if format_name is not None:
        val["format"] = format_name

    if min_length is not None:
        val["minLength"] = min_length

    return val
