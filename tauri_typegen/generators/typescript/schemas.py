"""
zod schema rendering

Converts TypeModel trees and validation constraints to zod expressions, and
orders schema declarations so that every `const` is defined before use.
"""

from typing import Dict, List, Optional, Set

from tauri_typegen.core.errors import SchemaDependencyCycle
from tauri_typegen.core.naming import NamingPolicy, property_key, ts_string
from tauri_typegen.core.schema import (
    TypeModel, TypeKind, BaseType, StructInfo, FieldInfo, EnumVariant, VariantShape, ValidationConstraints,
)


_PRIMITIVE_SCHEMAS = {
    BaseType.STRING.value: "z.string()",
    BaseType.NUMBER.value: "z.number()",
    BaseType.BOOLEAN.value: "z.boolean()",
    BaseType.VOID.value: "z.void()",
    BaseType.UNKNOWN.value: "z.unknown()",
}


def schema_name(type_name: str) -> str:
    return f"{type_name}Schema"


def convert_to_zod(type_model: TypeModel, type_mappings: Optional[Dict[str, str]] = None) -> str:
    """
    Convert a TypeModel to a zod schema expression.

    Examples:
        Array[User] -> "z.array(UserSchema)"
        Map[string, number] -> "z.record(z.string(), z.number())"
        Optional[string] -> "z.string().nullable()"
    """
    mappings = type_mappings or {}

    def convert(model: TypeModel) -> str:
        kind = model.kind
        if kind == TypeKind.PRIMITIVE:
            return _PRIMITIVE_SCHEMAS.get(model.name, "z.unknown()")
        if kind == TypeKind.CUSTOM:
            if model.name in mappings:
                return _mapped_schema(mappings[model.name])
            return schema_name(model.name)
        if kind == TypeKind.OPTIONAL:
            return f"{convert(model.inner)}.nullable()"
        if kind == TypeKind.ARRAY:
            return f"z.array({convert(model.inner)})"
        if kind == TypeKind.MAP:
            return f"z.record({convert(model.args[0])}, {convert(model.args[1])})"
        if kind == TypeKind.TUPLE:
            return f"z.tuple([{', '.join(convert(arg) for arg in model.args)}])"
        if kind == TypeKind.RESULT:
            return convert(model.inner)
        return "z.unknown()"

    return convert(type_model)


def _mapped_schema(typescript_type: str) -> str:
    if typescript_type in _PRIMITIVE_SCHEMAS:
        return _PRIMITIVE_SCHEMAS[typescript_type]
    return f"z.custom<{typescript_type}>(() => true)"


def apply_constraints(schema: str, type_model: TypeModel, constraints: Optional[ValidationConstraints]) -> str:
    """
    Compose validation constraints onto a base schema.

    Order is fixed: format checks (email, url) first, then length or range
    bounds, minimum before maximum.
    """
    if constraints is None:
        return schema

    options = f", {{ message: {ts_string(constraints.message)} }}" if constraints.message else ""
    bare_options = f"{{ message: {ts_string(constraints.message)} }}" if constraints.message else ""

    if type_model.is_primitive(BaseType.STRING):
        if constraints.email:
            schema += f".email({bare_options})"
        if constraints.url:
            schema += f".url({bare_options})"

    if type_model.is_primitive(BaseType.STRING) or type_model.kind == TypeKind.ARRAY:
        if constraints.min_length is not None:
            schema += f".min({constraints.min_length}{options})"
        if constraints.max_length is not None:
            schema += f".max({constraints.max_length}{options})"

    if type_model.is_primitive(BaseType.NUMBER):
        if constraints.min_value is not None:
            schema += f".min({constraints.min_value}{options})"
        if constraints.max_value is not None:
            schema += f".max({constraints.max_value}{options})"

    return schema


def field_schema(field: FieldInfo, type_mappings: Optional[Dict[str, str]] = None) -> str:
    schema = apply_constraints(convert_to_zod(field.type, type_mappings), field.type, field.validation)
    if field.is_optional:
        schema += ".optional()"
    return schema


# === DECLARATIONS === #

def build_object_schema(declaration: StructInfo, naming: NamingPolicy,
                        type_mappings: Optional[Dict[str, str]] = None) -> Dict:
    """Template context for `export const NameSchema = z.object({ ... })`."""
    return {
        "name": declaration.name,
        "schema_name": schema_name(declaration.name),
        "fields": [
            {
                "key": property_key(naming.field_name(field, declaration.rename_all)),
                "schema": field_schema(field, type_mappings),
            }
            for field in declaration.fields
        ],
    }


def build_struct_schema(declaration: StructInfo, type_mappings: Optional[Dict[str, str]] = None) -> Dict:
    """Template context for a unit, newtype or tuple struct schema expression."""
    if declaration.shape == VariantShape.NEWTYPE:
        expression = convert_to_zod(declaration.types[0], type_mappings)
    elif declaration.shape == VariantShape.TUPLE:
        expression = f"z.tuple([{', '.join(convert_to_zod(t, type_mappings) for t in declaration.types)}])"
    else:
        expression = "z.null()"
    return {
        "name": declaration.name,
        "schema_name": schema_name(declaration.name),
        "expression": expression,
    }


def build_enum_schema(declaration: StructInfo, naming: NamingPolicy,
                      type_mappings: Optional[Dict[str, str]] = None) -> Dict:
    """
    Template context for an enum schema expression.

    Unit-only enums become `z.enum([...])`; enums with payloads become a
    `z.union` of literals and single-key objects (serde's externally tagged form).
    """
    tags = [naming.variant_name(variant, declaration) for variant in declaration.variants]
    if not declaration.variants:
        expression = "z.never()"
    elif declaration.is_unit_enum:
        expression = f"z.enum([{', '.join(ts_string(tag) for tag in tags)}])"
    else:
        members = [
            _variant_schema(variant, tag, naming, type_mappings)
            for variant, tag in zip(declaration.variants, tags)
        ]
        expression = members[0] if len(members) == 1 else f"z.union([{', '.join(members)}])"
    return {
        "name": declaration.name,
        "schema_name": schema_name(declaration.name),
        "expression": expression,
    }


def _variant_schema(variant: EnumVariant, tag: str, naming: NamingPolicy,
                    type_mappings: Optional[Dict[str, str]]) -> str:
    if variant.shape == VariantShape.UNIT:
        return f"z.literal({ts_string(tag)})"
    key = property_key(tag)
    if variant.shape == VariantShape.NEWTYPE:
        payload = convert_to_zod(variant.types[0], type_mappings)
    elif variant.shape == VariantShape.TUPLE:
        payload = f"z.tuple([{', '.join(convert_to_zod(t, type_mappings) for t in variant.types)}])"
    else:
        fields = ", ".join(
            f"{property_key(naming.field_name(field, None))}: {field_schema(field, type_mappings)}"
            for field in variant.fields
        )
        payload = f"z.object({{ {fields} }})"
    return f"z.object({{ {key}: {payload} }})"


# === ORDERING === #

def order_declarations(names: List[str], dependencies: Dict[str, Set[str]]) -> List[str]:
    """
    Topologically order schema declarations so dependencies come first.

    Ties keep the order of `names`. Dependencies outside `names` are ignored.

    Raises:
        SchemaDependencyCycle: If declarations reference each other in a cycle
    """
    known = set(names)
    ordered: List[str] = []
    done: Set[str] = set()
    stack: List[str] = []

    def visit(name: str):
        if name in done:
            return
        if name in stack:
            raise SchemaDependencyCycle(stack[stack.index(name):] + [name])
        stack.append(name)
        for dependency in sorted(dependencies.get(name, ())):
            if dependency in known:
                visit(dependency)
        stack.pop()
        done.add(name)
        ordered.append(name)

    for name in names:
        visit(name)
    return ordered
