"""
Parsing of the Rust attributes the analyzer consumes.

Attributes arrive as text without `#[` and `]`, e.g.
`serde(rename_all = "camelCase")` or `validate(length(min = 1, max = 50))`.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from tauri_typegen.core.schema import ValidationConstraints
from tauri_typegen.core.constants import COMMAND_ATTRIBUTES


_KEY_VALUE_RE = re.compile(r'^([A-Za-z_]\w*)\s*=\s*(.+)$', re.S)
_CALL_RE = re.compile(r'^([A-Za-z_]\w*)\s*\((.*)\)$', re.S)

# Parsed attribute argument: bare word -> True, key = "lit" -> str, key(...) -> nested dict
AttributeValue = Union[bool, str, Dict[str, "AttributeValue"]]


@dataclass
class SerdeAttributes:
    rename: Optional[str] = None
    rename_all: Optional[str] = None
    skip: bool = False


def attribute_path(attribute: str) -> str:
    """Path part of an attribute: `tauri::command(...)` -> `tauri::command`."""
    match = re.match(r'^\s*([A-Za-z_][\w:]*)', attribute)
    return re.sub(r'\s+', '', match.group(1)) if match else ""


def attribute_arguments(attribute: str) -> Dict[str, AttributeValue]:
    """Parse the parenthesised arguments of an attribute into a dict."""
    match = _CALL_RE.match(attribute.strip())
    if not match:
        return {}
    return _parse_arguments(match.group(2))


def is_command_attribute(attribute: str) -> bool:
    return attribute_path(attribute) in COMMAND_ATTRIBUTES


def command_rename_all(attributes: List[str]) -> Optional[str]:
    """
    Command-level naming convention.

    Read from `#[tauri::command(rename_all = "...")]` or a `#[serde(rename_all = "...")]`
    placed on the command function.
    """
    for attribute in attributes:
        if is_command_attribute(attribute):
            value = attribute_arguments(attribute).get("rename_all")
            if isinstance(value, str):
                return value
    return parse_serde_attributes(attributes).rename_all


def parse_serde_attributes(attributes: List[str]) -> SerdeAttributes:
    """Merge every `serde(...)` attribute on one item."""
    result = SerdeAttributes()
    for attribute in attributes:
        if attribute_path(attribute) != "serde":
            continue
        arguments = attribute_arguments(attribute)

        rename = _directional_value(arguments.get("rename"))
        if rename:
            result.rename = rename

        rename_all = _directional_value(arguments.get("rename_all"))
        if rename_all:
            result.rename_all = rename_all

        if arguments.get("skip") is True:
            result.skip = True
    return result


def parse_validation(attributes: List[str]) -> Optional[ValidationConstraints]:
    """
    Extract constraints from `validate(...)` attributes.

    Supports length(min, max), range(min, max), email and url; the first
    `message = "..."` found (top level or nested) is kept.
    """
    constraints = ValidationConstraints()
    for attribute in attributes:
        if attribute_path(attribute) != "validate":
            continue
        arguments = attribute_arguments(attribute)

        length = arguments.get("length")
        if isinstance(length, dict):
            constraints.min_length = _as_int(length.get("min"), constraints.min_length)
            constraints.max_length = _as_int(length.get("max"), constraints.max_length)
            constraints.min_length = _as_int(length.get("equal"), constraints.min_length)
            if "equal" in length:
                constraints.max_length = constraints.min_length

        value_range = arguments.get("range")
        if isinstance(value_range, dict):
            constraints.min_value = _as_number(value_range.get("min"), constraints.min_value)
            constraints.max_value = _as_number(value_range.get("max"), constraints.max_value)

        if "email" in arguments:
            constraints.email = True
        if "url" in arguments:
            constraints.url = True

        if constraints.message is None:
            constraints.message = _find_message(arguments)

    return None if constraints.is_empty() else constraints


# === ARGUMENT PARSING === #

def _parse_arguments(text: str) -> Dict[str, AttributeValue]:
    arguments: Dict[str, AttributeValue] = {}
    for item in _split_top_level(text):
        item = item.strip()
        if not item:
            continue
        call = _CALL_RE.match(item)
        key_value = _KEY_VALUE_RE.match(item)
        if call:
            arguments[call.group(1)] = _parse_arguments(call.group(2))
        elif key_value:
            arguments[key_value.group(1)] = _unquote(key_value.group(2).strip())
        elif re.match(r'^[A-Za-z_]\w*$', item):
            arguments[item] = True
    return arguments


def _split_top_level(text: str) -> List[str]:
    """Split on commas outside parentheses and string literals."""
    parts = []
    current = []
    depth = 0
    in_string = False
    escaped = False
    for char in text:
        if in_string:
            current.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char in "([{":
            depth += 1
        elif char in ")]}":
            depth -= 1
        elif char == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return parts


def _unquote(value: str) -> str:
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1].replace('\\"', '"')
    return value


def _directional_value(value: Optional[AttributeValue]) -> Optional[str]:
    """`rename = "x"` or `rename(serialize = "x", deserialize = "y")` -> the serialize name."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        for key in ("serialize", "deserialize"):
            if isinstance(value.get(key), str):
                return value[key]
    return None


def _find_message(arguments: Dict[str, AttributeValue]) -> Optional[str]:
    message = arguments.get("message")
    if isinstance(message, str):
        return message
    for value in arguments.values():
        if isinstance(value, dict):
            nested = _find_message(value)
            if nested:
                return nested
    return None


def _as_number(value: Optional[AttributeValue], default: Optional[float]) -> Optional[float]:
    if not isinstance(value, str):
        return default
    try:
        number = float(value.replace("_", ""))
    except ValueError:
        return default
    return int(number) if number.is_integer() else number


def _as_int(value: Optional[AttributeValue], default: Optional[int]) -> Optional[int]:
    number = _as_number(value, None)
    return int(number) if number is not None else default

