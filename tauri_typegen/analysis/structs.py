"""
Struct and enum discovery.

Every struct and enum in a file is recorded, whether or not a command
refers to it; the closure computation decides what gets emitted.
"""

from typing import Iterator, List, Optional

from tree_sitter import Node

from tauri_typegen.analysis.parser import ParsedFile, preceding_attributes, has_visibility
from tauri_typegen.analysis.attributes import parse_serde_attributes, parse_validation
from tauri_typegen.core.schema import StructInfo, FieldInfo, EnumVariant, VariantShape, TypeKind, TypeModel
from tauri_typegen.core.type_conversion import map_rust_type


def extract_structs(parsed: ParsedFile) -> List[StructInfo]:
    """Extract every struct and enum declared in one file, including inside inline modules."""
    declarations = []
    for node in _iter_type_items(parsed.root):
        if node.type == "struct_item":
            declaration = _parse_struct(parsed, node)
        else:
            declaration = _parse_enum(parsed, node)
        if declaration:
            declarations.append(declaration)
    return declarations


def _iter_type_items(node: Node) -> Iterator[Node]:
    for child in node.named_children:
        if child.type in ("struct_item", "enum_item"):
            yield child
        elif child.type == "mod_item":
            body = child.child_by_field_name("body")
            if body is not None:
                yield from _iter_type_items(body)


def _parse_struct(parsed: ParsedFile, node: Node) -> Optional[StructInfo]:
    name = parsed.text(node.child_by_field_name("name"))
    if not name:
        return None
    serde = parse_serde_attributes(preceding_attributes(node, parsed.source))
    body = node.child_by_field_name("body")

    declaration = StructInfo(name=name, file_path=str(parsed.path), is_enum=False, rename_all=serde.rename_all)
    if body is None:
        declaration.shape = VariantShape.UNIT
    elif body.type == "field_declaration_list":
        declaration.fields = _parse_fields(parsed, body)
    elif body.type == "ordered_field_declaration_list":
        declaration.types = _tuple_types(parsed, body)
        declaration.shape = _tuple_shape(declaration.types)
    return declaration


def _tuple_types(parsed: ParsedFile, body: Node) -> List[TypeModel]:
    return [map_rust_type(parsed.text(type_node)) for type_node in body.children_by_field_name("type")]


def _tuple_shape(types: List[TypeModel]) -> VariantShape:
    """`Id(String)` is a newtype; `Empty()` serializes like a unit."""
    if len(types) == 1:
        return VariantShape.NEWTYPE
    return VariantShape.TUPLE if types else VariantShape.UNIT


def _parse_fields(parsed: ParsedFile, body: Node) -> List[FieldInfo]:
    fields = []
    for field_node in body.named_children:
        if field_node.type != "field_declaration":
            continue
        attributes = preceding_attributes(field_node, parsed.source)
        serde = parse_serde_attributes(attributes)
        if serde.skip:
            continue

        field_type = map_rust_type(parsed.text(field_node.child_by_field_name("type")))
        is_optional = field_type.kind == TypeKind.OPTIONAL
        fields.append(FieldInfo(
            name=parsed.text(field_node.child_by_field_name("name")),
            type=field_type.inner if is_optional else field_type,
            is_optional=is_optional,
            is_public=has_visibility(field_node),
            rename=serde.rename,
            validation=parse_validation(attributes),
        ))
    return fields


def _parse_enum(parsed: ParsedFile, node: Node) -> Optional[StructInfo]:
    name = parsed.text(node.child_by_field_name("name"))
    if not name:
        return None
    serde = parse_serde_attributes(preceding_attributes(node, parsed.source))
    body = node.child_by_field_name("body")

    variants = []
    if body is not None:
        for variant_node in body.named_children:
            if variant_node.type != "enum_variant":
                continue
            variant = _parse_variant(parsed, variant_node)
            if variant:
                variants.append(variant)

    return StructInfo(
        name=name,
        file_path=str(parsed.path),
        is_enum=True,
        variants=variants,
        rename_all=serde.rename_all,
    )


def _parse_variant(parsed: ParsedFile, node: Node) -> Optional[EnumVariant]:
    serde = parse_serde_attributes(preceding_attributes(node, parsed.source))
    if serde.skip:
        return None

    variant = EnumVariant(name=parsed.text(node.child_by_field_name("name")), rename=serde.rename)
    body = node.child_by_field_name("body")
    if body is None:
        return variant

    if body.type == "field_declaration_list":
        variant.shape = VariantShape.STRUCT
        variant.fields = _parse_fields(parsed, body)
    elif body.type == "ordered_field_declaration_list":
        variant.types = _tuple_types(parsed, body)
        variant.shape = _tuple_shape(variant.types)
    return variant
