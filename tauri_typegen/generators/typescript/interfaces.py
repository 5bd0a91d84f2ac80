"""
TypeScript structural type rendering

Converts TypeModel trees to TypeScript type expressions and builds template
context for interfaces and enum type aliases. Used directly by the plain
backend and for channel/event/return types by both backends.
"""

from typing import Dict, List, Optional

from tauri_typegen.core.naming import NamingPolicy, property_key, ts_string
from tauri_typegen.core.schema import (
    TypeModel, TypeKind, StructInfo, FieldInfo, EnumVariant, VariantShape, ValidationConstraints,
)


def convert_to_typescript(type_model: TypeModel, type_mappings: Optional[Dict[str, str]] = None,
                          namespace: str = "") -> str:
    """
    Convert a TypeModel to a TypeScript type string.

    Args:
        type_model: Type to render
        type_mappings: Rust name -> TypeScript type overrides for Custom leaves
        namespace: Prefix for custom type references, e.g. "types."

    Examples:
        Array[User] -> "User[]"
        Map[string, number] -> "Record<string, number>"
        Optional[string] -> "string | null"
    """
    mappings = type_mappings or {}

    def convert(model: TypeModel) -> str:
        kind = model.kind
        if kind == TypeKind.PRIMITIVE:
            return model.name
        if kind == TypeKind.CUSTOM:
            if model.name in mappings:
                return mappings[model.name]
            return f"{namespace}{model.name}"
        if kind == TypeKind.OPTIONAL:
            return f"{convert(model.inner)} | null"
        if kind == TypeKind.ARRAY:
            element = convert(model.inner)
            if " | " in element or " & " in element:
                element = f"({element})"
            return f"{element}[]"
        if kind == TypeKind.MAP:
            return f"Record<{convert(model.args[0])}, {convert(model.args[1])}>"
        if kind == TypeKind.TUPLE:
            return f"[{', '.join(convert(arg) for arg in model.args)}]"
        if kind == TypeKind.RESULT:
            return convert(model.inner)
        return "unknown"

    return convert(type_model)


# === DECLARATIONS === #

def build_interface(declaration: StructInfo, naming: NamingPolicy,
                    type_mappings: Optional[Dict[str, str]] = None) -> Dict:
    """Template context for `export interface Name { ... }`."""
    return {
        "name": declaration.name,
        "fields": [
            _field_context(field, naming.field_name(field, declaration.rename_all), type_mappings)
            for field in declaration.fields
        ],
    }


def build_struct_alias(declaration: StructInfo, type_mappings: Optional[Dict[str, str]] = None) -> Dict:
    """
    Template context for a unit, newtype or tuple struct.

    serde writes `struct Id(String)` as the bare string, `struct Point(i32, i32)`
    as an array, and `struct Marker;` as null.
    """
    if declaration.shape == VariantShape.NEWTYPE:
        member = convert_to_typescript(declaration.types[0], type_mappings)
    elif declaration.shape == VariantShape.TUPLE:
        member = f"[{', '.join(convert_to_typescript(t, type_mappings) for t in declaration.types)}]"
    else:
        member = "null"
    return {"name": declaration.name, "members": [member]}


def build_enum_alias(declaration: StructInfo, naming: NamingPolicy,
                     type_mappings: Optional[Dict[str, str]] = None) -> Dict:
    """
    Template context for `export type Name = ...` describing a serde enum.

    Unit variants render as string literals; variants with payloads use serde's
    default externally tagged form `{ Variant: payload }`.
    """
    members = [
        _variant_type(variant, naming.variant_name(variant, declaration), naming, type_mappings)
        for variant in declaration.variants
    ]
    return {
        "name": declaration.name,
        "members": members or ["never"],
    }


def _variant_type(variant: EnumVariant, tag: str, naming: NamingPolicy,
                  type_mappings: Optional[Dict[str, str]]) -> str:
    if variant.shape == VariantShape.UNIT:
        return ts_string(tag)
    key = property_key(tag)
    if variant.shape == VariantShape.NEWTYPE:
        return f"{{ {key}: {convert_to_typescript(variant.types[0], type_mappings)} }}"
    if variant.shape == VariantShape.TUPLE:
        elements = ", ".join(convert_to_typescript(t, type_mappings) for t in variant.types)
        return f"{{ {key}: [{elements}] }}"
    fields = "; ".join(
        _inline_field(field, naming.field_name(field, None), type_mappings)
        for field in variant.fields
    )
    return f"{{ {key}: {{ {fields} }} }}"


def _inline_field(field: FieldInfo, name: str, type_mappings: Optional[Dict[str, str]]) -> str:
    optional = "?" if field.is_optional else ""
    return f"{property_key(name)}{optional}: {convert_to_typescript(field.type, type_mappings)}"


def _field_context(field: FieldInfo, name: str, type_mappings: Optional[Dict[str, str]]) -> Dict:
    return {
        "key": property_key(name),
        "optional": field.is_optional,
        "type": convert_to_typescript(field.type, type_mappings),
        "docs": constraint_docs(field.validation),
    }


def constraint_docs(constraints: Optional[ValidationConstraints]) -> List[str]:
    """JSDoc tags describing validation constraints."""
    if constraints is None:
        return []
    docs = []
    if constraints.min_length is not None:
        docs.append(f"@minLength {constraints.min_length}")
    if constraints.max_length is not None:
        docs.append(f"@maxLength {constraints.max_length}")
    if constraints.min_value is not None:
        docs.append(f"@minimum {constraints.min_value}")
    if constraints.max_value is not None:
        docs.append(f"@maximum {constraints.max_value}")
    if constraints.email:
        docs.append("@format email")
    if constraints.url:
        docs.append("@format url")
    return docs
