"""
Command and channel extraction.

Finds functions marked `#[tauri::command]` / `#[command]`, drops parameters
the Tauri runtime injects, and separates Channel<T> parameters from regular
ones.
"""

import logging
from typing import Iterator, List, Optional

from tree_sitter import Node

from tauri_typegen.analysis.parser import ParsedFile, preceding_attributes, line_number, named_children_of_type
from tauri_typegen.analysis.attributes import is_command_attribute, command_rename_all, parse_serde_attributes
from tauri_typegen.core.constants import TAURI_INJECTED_TYPES
from tauri_typegen.core.schema import CommandInfo, ParameterInfo, ChannelInfo, TypeKind, VOID_TYPE
from tauri_typegen.core.type_conversion import map_rust_type, channel_message_type, base_type_name


logger = logging.getLogger(__name__)

_CONTAINER_NODES = {"mod_item", "impl_item", "declaration_list"}


def extract_commands(parsed: ParsedFile) -> List[CommandInfo]:
    """Extract every command function declared in one file."""
    commands = []
    for function_node in _iter_item_functions(parsed.root):
        attributes = preceding_attributes(function_node, parsed.source)
        if not any(is_command_attribute(attribute) for attribute in attributes):
            continue
        command = _function_to_command(parsed, function_node, attributes)
        if command:
            commands.append(command)
    return commands


def _iter_item_functions(node: Node) -> Iterator[Node]:
    """Yield item-level function_item nodes, descending into inline modules and impl blocks."""
    for child in node.named_children:
        if child.type == "function_item":
            yield child
        elif child.type in _CONTAINER_NODES:
            body = child.child_by_field_name("body") if child.type != "declaration_list" else child
            if body is not None:
                yield from _iter_item_functions(body)


def _function_to_command(parsed: ParsedFile, node: Node, attributes: List[str]) -> Optional[CommandInfo]:
    name = parsed.text(node.child_by_field_name("name"))
    if not name:
        return None

    command = CommandInfo(
        name=name,
        file_path=str(parsed.path),
        line_number=line_number(node),
        is_async=_is_async(parsed, node),
        rename_all=command_rename_all(attributes),
    )

    return_node = node.child_by_field_name("return_type")
    command.return_type = map_rust_type(parsed.text(return_node)) if return_node is not None else VOID_TYPE

    parameters_node = node.child_by_field_name("parameters")
    for param_node in named_children_of_type(parameters_node, "parameter"):
        _add_parameter(parsed, command, param_node)

    logger.debug(f"Found command {name} with {len(command.parameters)} parameters "
                 f"and {len(command.channels)} channels ({parsed.path}:{command.line_number})")
    return command


def _add_parameter(parsed: ParsedFile, command: CommandInfo, param_node: Node):
    """Classify one parameter as injected, channel, or regular."""
    raw_name = parsed.text(param_node.child_by_field_name("pattern"))
    raw_type = parsed.text(param_node.child_by_field_name("type"))
    name = _pattern_name(raw_name)
    if not name or not raw_type:
        return

    if is_tauri_injected(raw_type):
        return

    serde = parse_serde_attributes(preceding_attributes(param_node, parsed.source))

    message_type = channel_message_type(raw_type)
    if message_type is not None:
        command.channels.append(ChannelInfo(
            name=name,
            message_type=map_rust_type(message_type),
            rename=serde.rename,
        ))
        return

    param_type = map_rust_type(raw_type)
    is_optional = param_type.kind == TypeKind.OPTIONAL
    command.parameters.append(ParameterInfo(
        name=name,
        type=param_type.inner if is_optional else param_type,
        is_optional=is_optional,
        rename=serde.rename,
    ))


def is_tauri_injected(raw_type: str) -> bool:
    """True for AppHandle, State<..>, Window and other runtime-provided parameters."""
    return base_type_name(raw_type) in TAURI_INJECTED_TYPES


def _pattern_name(pattern: str) -> str:
    """`mut order_id` -> `order_id`, `r#type` -> `type`; destructuring patterns yield no usable name."""
    name = pattern.strip()
    if name.startswith("mut "):
        name = name[4:].strip()
    if name.startswith("r#"):
        name = name[2:]
    if not name.replace("_", "").isalnum() or name == "_":
        return ""
    return name


def _is_async(parsed: ParsedFile, node: Node) -> bool:
    for child in node.children:
        if child.type == "function_modifiers":
            return "async" in parsed.text(child).split()
        if child.type == "fn":
            break
    return False
