"""
Identifier case conversion and serde-style rename resolution.

Every emitted identifier (struct field, parameter, channel, enum variant)
goes through resolve_name() so that rename precedence is decided in one place
for all backends.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Union

from tauri_typegen.core.schema import (
    FieldInfo, ParameterInfo, ChannelInfo, CommandInfo, EnumVariant, StructInfo,
)


CAMEL_CASE = "camelCase"
SNAKE_CASE = "snake_case"
PASCAL_CASE = "PascalCase"
SCREAMING_SNAKE_CASE = "SCREAMING_SNAKE_CASE"
KEBAB_CASE = "kebab-case"
SCREAMING_KEBAB_CASE = "SCREAMING-KEBAB-CASE"
LOWERCASE = "lowercase"
UPPERCASE = "UPPERCASE"

NAMING_CONVENTIONS = (
    CAMEL_CASE, SNAKE_CASE, PASCAL_CASE, SCREAMING_SNAKE_CASE,
    KEBAB_CASE, SCREAMING_KEBAB_CASE, LOWERCASE, UPPERCASE,
)

_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z0-9]|\b|_|-|$)|[A-Z]?[a-z0-9]+|[A-Z]+")


def split_words(name: str) -> List[str]:
    """
    Split an identifier into lowercase words.

    Handles snake_case, kebab-case, camelCase, PascalCase and acronyms:
    "order_id" -> ["order", "id"], "HTTPServer" -> ["http", "server"].
    """
    name = name.strip()
    if name.startswith("r#"):
        name = name[2:]
    return [word.lower() for word in _WORD_RE.findall(name)]


def to_camel_case(name: str) -> str:
    words = split_words(name)
    if not words:
        return name
    return words[0] + "".join(word.capitalize() for word in words[1:])


def to_pascal_case(name: str) -> str:
    words = split_words(name)
    if not words:
        return name
    return "".join(word.capitalize() for word in words)


def to_snake_case(name: str) -> str:
    return "_".join(split_words(name)) or name


def apply_convention(name: str, convention: str) -> str:
    """
    Apply a serde rename_all convention to a Rust identifier.

    Rust fields arrive in snake_case and variants in PascalCase; the word
    splitter accepts both, so conventions are applied uniformly.
    """
    words = split_words(name)
    if not words:
        return name
    if convention == CAMEL_CASE:
        return to_camel_case(name)
    if convention == PASCAL_CASE:
        return to_pascal_case(name)
    if convention == SNAKE_CASE:
        return "_".join(words)
    if convention == SCREAMING_SNAKE_CASE:
        return "_".join(words).upper()
    if convention == KEBAB_CASE:
        return "-".join(words)
    if convention == SCREAMING_KEBAB_CASE:
        return "-".join(words).upper()
    if convention == LOWERCASE:
        return "".join(words)
    if convention == UPPERCASE:
        return "".join(words).upper()
    raise ValueError(f"Unsupported naming convention '{convention}'. "
                     f"Supported: {', '.join(NAMING_CONVENTIONS)}")


def resolve_name(name: str, rename: Optional[str], rename_all: Optional[str],
                 default_case: Optional[str]) -> str:
    """
    Resolve the serialized name of one identifier.

    Precedence: explicit rename > enclosing declaration's rename_all > default case.
    A default_case of None keeps the Rust spelling.
    """
    if rename:
        return rename
    if rename_all in NAMING_CONVENTIONS:
        return apply_convention(name, rename_all)
    if default_case is None:
        return name
    return apply_convention(name, default_case)


def is_valid_identifier(name: str) -> bool:
    """True when name can be used unquoted as a TypeScript property key."""
    return re.match(r"^[A-Za-z_$][A-Za-z0-9_$]*$", name) is not None


def property_key(name: str) -> str:
    """Quote a property key when it is not a plain identifier (e.g. kebab-case)."""
    return name if is_valid_identifier(name) else ts_string(name)


def property_access(target: str, name: str) -> str:
    """`params.onProgress`, or `params['on-progress']` when name is not an identifier."""
    return f"{target}.{name}" if is_valid_identifier(name) else f"{target}[{ts_string(name)}]"


def ts_string(value: str) -> str:
    """Quote a value as a single-quoted TypeScript string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n")
    return f"'{escaped}'"


@dataclass(frozen=True)
class NamingPolicy:
    """
    Output identifier rules for one generation run.

    Defaults mirror Tauri's wire format: command arguments are camelCase,
    struct fields keep serde's native snake_case, enum variants keep their
    Rust spelling.
    """
    parameter_case: str = CAMEL_CASE
    field_case: str = SNAKE_CASE
    variant_case: Optional[str] = None

    def field_name(self, field: FieldInfo, rename_all: Optional[str]) -> str:
        return resolve_name(field.name, field.rename, rename_all, self.field_case)

    def parameter_name(self, param: Union[ParameterInfo, ChannelInfo], command: CommandInfo) -> str:
        return resolve_name(param.name, param.rename, command.rename_all, self.parameter_case)

    def variant_name(self, variant: EnumVariant, declaration: StructInfo) -> str:
        return resolve_name(variant.name, variant.rename, declaration.rename_all, self.variant_case)

    @staticmethod
    def function_name(command: CommandInfo) -> str:
        """Call-site name; never affected by the command's rename_all."""
        return to_camel_case(command.name)

    @staticmethod
    def params_type_name(command: CommandInfo) -> str:
        return f"{to_pascal_case(command.name)}Params"

    @staticmethod
    def listener_name(event_name: str) -> str:
        """'status-update' -> 'onStatusUpdate'"""
        return f"on{to_pascal_case(event_name)}"
