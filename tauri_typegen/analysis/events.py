"""
Event emission discovery.

Recognizes `.emit("name", payload)`, `.emit_to(target, "name", payload)` and
`.emit_filter("name", payload, filter)` calls. Payload types are inferred from
the expression shape on a best-effort basis; anything that cannot be inferred
becomes the `unknown` primitive.
"""

import logging
from typing import Dict, Iterator, List, Optional, Tuple

from tree_sitter import Node

from tauri_typegen.analysis.parser import ParsedFile, COMMENT_NODES, line_number, named_children_of_type, walk
from tauri_typegen.core.schema import (
    EventInfo, Diagnostic, TypeModel, TypeKind, BaseType, UNKNOWN_TYPE, VOID_TYPE,
)
from tauri_typegen.core.type_conversion import map_rust_type, base_type_name


logger = logging.getLogger(__name__)

# method name -> (event name argument index, payload argument index)
EMIT_METHODS = {
    "emit": (0, 1),
    "emit_to": (1, 2),
    "emit_filter": (0, 1),
}

_STRING_TYPE = TypeModel.primitive(BaseType.STRING)
_NUMBER_TYPE = TypeModel.primitive(BaseType.NUMBER)
_BOOLEAN_TYPE = TypeModel.primitive(BaseType.BOOLEAN)

_PASSTHROUGH_METHODS = {"clone", "into", "to_owned", "as_ref", "borrow", "unwrap", "expect"}
_STRING_METHODS = {"to_string", "to_uppercase", "to_lowercase", "trim", "display"}
_STRING_MACROS = {"format", "concat", "stringify"}

Symbols = Dict[str, TypeModel]


def extract_events(parsed: ParsedFile) -> Tuple[List[EventInfo], List[Diagnostic]]:
    """
    Extract event emissions from every function body in one file.

    Returns:
        Tuple of (events in source order, diagnostics for skipped call sites)
    """
    events: List[EventInfo] = []
    diagnostics: List[Diagnostic] = []

    for function_node in walk(parsed.root):
        if function_node.type != "function_item":
            continue
        symbols = _parameter_symbols(parsed, function_node)
        body = function_node.child_by_field_name("body")
        if body is None:
            continue

        for node in _walk_function_body(body):
            if node.type == "let_declaration":
                _bind_let(parsed, node, symbols)
            elif node.type == "call_expression":
                event = _call_to_event(parsed, node, symbols, diagnostics)
                if event:
                    events.append(event)

    return events, diagnostics


def _walk_function_body(body: Node) -> Iterator[Node]:
    """Pre-order walk that leaves nested function items to their own pass."""
    stack = [body]
    while stack:
        current = stack.pop()
        if current.type == "function_item" and current is not body:
            continue
        yield current
        stack.extend(reversed(current.children))


def _call_to_event(parsed: ParsedFile, call: Node, symbols: Symbols,
                   diagnostics: List[Diagnostic]) -> Optional[EventInfo]:
    function = call.child_by_field_name("function")
    if function is not None and function.type == "generic_function":
        function = function.child_by_field_name("function")
    if function is None or function.type != "field_expression":
        return None

    method = parsed.text(function.child_by_field_name("field"))
    if method not in EMIT_METHODS:
        return None

    name_index, payload_index = EMIT_METHODS[method]
    arguments = [
        child for child in call.child_by_field_name("arguments").named_children
        if child.type not in COMMENT_NODES and child.type != "attribute_item"
    ]
    if len(arguments) <= payload_index:
        return None

    event_name = _string_literal_value(parsed, arguments[name_index])
    if event_name is None:
        diagnostics.append(Diagnostic(
            message=f"Skipping {method}() call with non-literal event name "
                    f"`{parsed.text(arguments[name_index])}`",
            file_path=str(parsed.path),
            line_number=line_number(call),
        ))
        return None

    payload_type = infer_expression_type(parsed, arguments[payload_index], symbols)
    logger.debug(f"Found event '{event_name}' with payload {payload_type} ({parsed.path}:{line_number(call)})")
    return EventInfo(
        name=event_name,
        payload_type=payload_type,
        file_path=str(parsed.path),
        line_number=line_number(call),
    )


# === PAYLOAD INFERENCE === #

def infer_expression_type(parsed: ParsedFile, node: Node, symbols: Symbols) -> TypeModel:
    """Best-effort TypeModel of an emitted payload expression."""
    node_type = node.type

    if node_type == "struct_expression":
        return map_rust_type(base_type_name(parsed.text(node.child_by_field_name("name"))))
    if node_type in ("string_literal", "raw_string_literal", "char_literal"):
        return _STRING_TYPE
    if node_type in ("integer_literal", "float_literal"):
        return _NUMBER_TYPE
    if node_type == "boolean_literal":
        return _BOOLEAN_TYPE
    if node_type == "unit_expression":
        return VOID_TYPE
    if node_type == "identifier":
        return symbols.get(parsed.text(node), UNKNOWN_TYPE)

    if node_type == "reference_expression":
        return infer_expression_type(parsed, node.child_by_field_name("value"), symbols)
    if node_type in ("parenthesized_expression", "unary_expression"):
        inner = _first_expression(node)
        return infer_expression_type(parsed, inner, symbols) if inner is not None else UNKNOWN_TYPE

    if node_type == "tuple_expression":
        elements = [infer_expression_type(parsed, child, symbols) for child in _expressions(node)]
        return TypeModel.wrap(TypeKind.TUPLE, *elements) if elements else VOID_TYPE

    if node_type == "array_expression":
        elements = _expressions(node)
        if elements:
            return TypeModel.wrap(TypeKind.ARRAY, infer_expression_type(parsed, elements[0], symbols))
        return UNKNOWN_TYPE

    if node_type == "macro_invocation":
        macro_name = base_type_name(parsed.text(node.child_by_field_name("macro")))
        return _STRING_TYPE if macro_name in _STRING_MACROS else UNKNOWN_TYPE

    if node_type == "call_expression":
        return _infer_method_call(parsed, node, symbols)

    return UNKNOWN_TYPE


def _infer_method_call(parsed: ParsedFile, call: Node, symbols: Symbols) -> TypeModel:
    function = call.child_by_field_name("function")
    if function is None or function.type != "field_expression":
        return UNKNOWN_TYPE
    method = parsed.text(function.child_by_field_name("field"))
    if method in _STRING_METHODS:
        return _STRING_TYPE
    if method in _PASSTHROUGH_METHODS:
        return infer_expression_type(parsed, function.child_by_field_name("value"), symbols)
    return UNKNOWN_TYPE


def _parameter_symbols(parsed: ParsedFile, function_node: Node) -> Symbols:
    symbols: Symbols = {}
    for param in named_children_of_type(function_node.child_by_field_name("parameters"), "parameter"):
        name = parsed.text(param.child_by_field_name("pattern")).replace("mut ", "").strip()
        type_text = parsed.text(param.child_by_field_name("type"))
        if name and type_text:
            symbols[name] = map_rust_type(type_text)
    return symbols


def _bind_let(parsed: ParsedFile, node: Node, symbols: Symbols):
    """Record `let x: T = ...` or `let x = Struct { .. }` in the symbol table."""
    pattern = node.child_by_field_name("pattern")
    if pattern is None:
        return
    name = parsed.text(pattern).replace("mut ", "").strip()
    if not name.isidentifier():
        return

    type_node = node.child_by_field_name("type")
    value_node = node.child_by_field_name("value")
    if type_node is not None:
        symbols[name] = map_rust_type(parsed.text(type_node))
    elif value_node is not None:
        symbols[name] = infer_expression_type(parsed, value_node, symbols)
    else:
        symbols[name] = UNKNOWN_TYPE


def _string_literal_value(parsed: ParsedFile, node: Node) -> Optional[str]:
    text = parsed.text(node)
    if node.type == "string_literal":
        return text[1:-1]
    if node.type == "raw_string_literal":
        return text[text.index('"') + 1:text.rindex('"')]
    if node.type == "reference_expression":
        inner = node.child_by_field_name("value")
        return _string_literal_value(parsed, inner) if inner is not None else None
    return None


def _expressions(node: Node) -> List[Node]:
    return [child for child in node.named_children
            if child.type not in COMMENT_NODES and child.type != "attribute_item"]


def _first_expression(node: Node) -> Optional[Node]:
    expressions = _expressions(node)
    return expressions[0] if expressions else None
