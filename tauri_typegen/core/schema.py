"""
tauri-typegen Semantic Model

Backend-neutral data structures produced by the analyzer and consumed by the
generator backends. The Type Model is a closed tagged union: every raw Rust
type expression maps to exactly one TypeModel tree.
"""

from enum import Enum
from pathlib import Path
from dataclasses import dataclass, field
from typing import List, Dict, Optional, Set, Tuple

# === TYPE SYSTEM === #

class BaseType(Enum):
    """Primitive leaf types."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    VOID = "void"
    UNKNOWN = "unknown"    # unresolvable event payloads


class TypeKind(Enum):
    """Variants of the Type Model union."""
    PRIMITIVE = "primitive"  # String -> string
    OPTIONAL = "optional"    # Option<T>
    ARRAY = "array"          # Vec<T>, HashSet<T>, [T; N]
    MAP = "map"              # HashMap<K, V>
    TUPLE = "tuple"          # (A, B)
    RESULT = "result"        # Result<T, E>, only T is kept
    CUSTOM = "custom"        # User


@dataclass(frozen=True)
class TypeModel:
    """
    Recursive type representation for Rust type expressions.

    Instances are immutable so that the mapper can memoise them and so that
    two mappings of the same text compare equal.

    Examples:
        String -> TypeModel.primitive(BaseType.STRING)
        Vec<User> -> TypeModel(TypeKind.ARRAY, args=(TypeModel.custom("User"),))
        HashMap<String, i32> -> TypeModel(TypeKind.MAP, args=(string, number))
    """
    kind: TypeKind
    name: Optional[str] = None                  # primitive value or custom name
    args: Tuple['TypeModel', ...] = ()

    @classmethod
    def primitive(cls, base_type: BaseType) -> 'TypeModel':
        return cls(TypeKind.PRIMITIVE, name=base_type.value)

    @classmethod
    def custom(cls, name: str) -> 'TypeModel':
        return cls(TypeKind.CUSTOM, name=name)

    @classmethod
    def wrap(cls, kind: TypeKind, *args: 'TypeModel') -> 'TypeModel':
        return cls(kind, args=tuple(args))

    @property
    def inner(self) -> 'TypeModel':
        """First type argument of a single-argument wrapper."""
        return self.args[0]

    def is_primitive(self, base_type: Optional[BaseType] = None) -> bool:
        if self.kind != TypeKind.PRIMITIVE:
            return False
        return base_type is None or self.name == base_type.value

    def is_custom(self) -> bool:
        return self.kind == TypeKind.CUSTOM

    def is_optional(self) -> bool:
        return self.kind == TypeKind.OPTIONAL

    def get_referenced_types(self) -> Set[str]:
        """
        Get all custom type names referenced in this type tree.

        Returns:
            Set of Custom leaf names; wrapper names never appear here.
        """
        if self.kind == TypeKind.CUSTOM:
            return {self.name}
        types = set()
        for arg in self.args:
            types.update(arg.get_referenced_types())
        return types

    def __str__(self) -> str:
        if self.kind in (TypeKind.PRIMITIVE, TypeKind.CUSTOM):
            return self.name
        inner = ", ".join(str(arg) for arg in self.args)
        return f"{self.kind.value.capitalize()}[{inner}]"


UNKNOWN_TYPE = TypeModel.primitive(BaseType.UNKNOWN)
VOID_TYPE = TypeModel.primitive(BaseType.VOID)


# === VALIDATION === #

@dataclass
class ValidationConstraints:
    """Constraints captured from a field's #[validate(...)] attribute."""
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    email: bool = False
    url: bool = False
    message: Optional[str] = None

    def is_empty(self) -> bool:
        return (self.min_length is None and self.max_length is None
                and self.min_value is None and self.max_value is None
                and not self.email and not self.url)


# === DECLARATIONS === #

@dataclass
class FieldInfo:
    """Struct field or named enum-variant field."""
    name: str
    type: TypeModel
    is_optional: bool = False
    is_public: bool = False
    rename: Optional[str] = None
    validation: Optional[ValidationConstraints] = None


class VariantShape(Enum):
    """Payload shapes an enum variant or a struct can carry."""
    UNIT = "unit"          # Active
    NEWTYPE = "newtype"    # Move(Point)
    TUPLE = "tuple"        # Move(i32, i32)
    STRUCT = "struct"      # Move { x: i32, y: i32 }


@dataclass
class EnumVariant:
    name: str
    shape: VariantShape = VariantShape.UNIT
    rename: Optional[str] = None
    types: List[TypeModel] = field(default_factory=list)    # NEWTYPE / TUPLE payload
    fields: List[FieldInfo] = field(default_factory=list)   # STRUCT payload

    def get_referenced_types(self) -> Set[str]:
        types = set()
        for payload_type in self.types:
            types.update(payload_type.get_referenced_types())
        for variant_field in self.fields:
            types.update(variant_field.type.get_referenced_types())
        return types


@dataclass
class StructInfo:
    """A struct or enum declaration discovered anywhere in the project."""
    name: str
    file_path: str
    is_enum: bool = False
    fields: List[FieldInfo] = field(default_factory=list)
    variants: List[EnumVariant] = field(default_factory=list)
    rename_all: Optional[str] = None
    shape: VariantShape = VariantShape.STRUCT
    types: List[TypeModel] = field(default_factory=list)    # NEWTYPE / TUPLE struct payload

    @property
    def is_unit_enum(self) -> bool:
        """True for enums whose variants carry no payload."""
        return self.is_enum and all(v.shape == VariantShape.UNIT for v in self.variants)

    @property
    def is_alias_struct(self) -> bool:
        """True for unit, newtype and tuple structs, which serde writes without field names."""
        return not self.is_enum and self.shape != VariantShape.STRUCT

    def get_referenced_types(self) -> Set[str]:
        types = set()
        for struct_field in self.fields:
            types.update(struct_field.type.get_referenced_types())
        for payload_type in self.types:
            types.update(payload_type.get_referenced_types())
        for variant in self.variants:
            types.update(variant.get_referenced_types())
        return types


# === COMMANDS & EVENTS === #

@dataclass
class ParameterInfo:
    name: str
    type: TypeModel
    is_optional: bool = False
    rename: Optional[str] = None


@dataclass
class ChannelInfo:
    """A Channel<T> parameter; never counted among regular parameters."""
    name: str
    message_type: TypeModel
    rename: Optional[str] = None


@dataclass
class CommandInfo:
    name: str
    file_path: str
    line_number: int = 0
    parameters: List[ParameterInfo] = field(default_factory=list)
    return_type: TypeModel = VOID_TYPE
    is_async: bool = False
    channels: List[ChannelInfo] = field(default_factory=list)
    rename_all: Optional[str] = None

    @property
    def has_arguments(self) -> bool:
        return bool(self.parameters or self.channels)

    def get_referenced_types(self) -> Set[str]:
        """Custom names reachable from this command's signature."""
        types = set(self.return_type.get_referenced_types())
        for param in self.parameters:
            types.update(param.type.get_referenced_types())
        for channel in self.channels:
            types.update(channel.message_type.get_referenced_types())
        return types


@dataclass
class EventInfo:
    name: str
    payload_type: TypeModel = UNKNOWN_TYPE
    file_path: str = ""
    line_number: int = 0


# === PROJECT === #

@dataclass
class Diagnostic:
    """Recoverable problem recorded during analysis."""
    message: str
    file_path: Optional[str] = None
    line_number: Optional[int] = None

    def __str__(self) -> str:
        if self.file_path and self.line_number:
            return f"{self.file_path}:{self.line_number}: {self.message}"
        if self.file_path:
            return f"{self.file_path}: {self.message}"
        return self.message


@dataclass
class ProjectModel:
    """
    Complete analysis result for one project.

    Owned by a single analyzer run; generators treat it as read-only input.
    `emitted_types` and `unresolved_types` are filled in by the closure
    computation.
    """
    project_root: Path
    commands: List[CommandInfo] = field(default_factory=list)
    structs: Dict[str, StructInfo] = field(default_factory=dict)
    events: List[EventInfo] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    emitted_types: List[str] = field(default_factory=list)
    unresolved_types: Dict[str, Set[str]] = field(default_factory=dict)

    def get_emitted_structs(self) -> List[StructInfo]:
        return [self.structs[name] for name in self.emitted_types]

    def __repr__(self) -> str:
        return (f"ProjectModel(commands={len(self.commands)}, structs={len(self.structs)}, "
                f"events={len(self.events)}, emitted={len(self.emitted_types)})")
