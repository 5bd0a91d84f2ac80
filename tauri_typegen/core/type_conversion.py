"""
tauri-typegen Type Mapper

Converts raw Rust type expressions (as written in source) to the closed
TypeModel union. All knowledge of which generic names are wrappers and which
are leaves lives here; backends only ever see TypeModel trees.
"""

import re
from functools import lru_cache
from typing import List, Optional, Set, Tuple, Union

from tauri_typegen.core.schema import TypeModel, TypeKind, BaseType
from tauri_typegen.core.constants import (
    PRIMITIVE_TYPE_MAP, OPTION_TYPES, ARRAY_TYPES, MAP_TYPES, RESULT_TYPES,
    TRANSPARENT_TYPES, CHANNEL_TYPES, UNKNOWN_CUSTOM,
)


_TOKEN_RE = re.compile(r"\s*(?:(::)|('[A-Za-z_]\w*)|([A-Za-z_]\w*)|(\d+)|(\S))")

_TYPE_KEYWORDS = {"dyn", "impl"}


class MalformedType(ValueError):
    """Raised internally when type text does not form a well-nested type."""


@lru_cache(maxsize=1024)
def map_rust_type(raw_type: str) -> TypeModel:
    """
    Convert a Rust type expression to a TypeModel.

    Pure and deterministic: identical text always yields an equal (and, thanks
    to the cache, identical) model. Malformed text never raises; it maps to
    Custom("unknown") so generation can report it later.

    Examples:
        map_rust_type("Option<Vec<User>>") -> Optional[Array[User]]
        map_rust_type("&str") -> string
        map_rust_type("std::collections::HashMap<String, i32>") -> Map[string, number]
    """
    try:
        return _TypeParser(raw_type).parse()
    except MalformedType:
        return TypeModel.custom(UNKNOWN_CUSTOM)


def extract_custom_types(source: Union[str, TypeModel]) -> Set[str]:
    """Return the Custom leaf names of a raw type expression or TypeModel."""
    model = map_rust_type(source) if isinstance(source, str) else source
    return model.get_referenced_types()


def channel_message_type(raw_type: str) -> Optional[str]:
    """
    Return the raw message type of a Channel<T> parameter type, else None.

    Accepts path-qualified and referenced spellings such as
    `tauri::ipc::Channel<Progress>` or `&Channel<u32>`.
    """
    try:
        parser = _TypeParser(raw_type)
        segment, raw_args = parser.parse_raw_path()
    except MalformedType:
        return None
    if segment in CHANNEL_TYPES and len(raw_args) == 1:
        return raw_args[0]
    return None


def base_type_name(raw_type: str) -> str:
    """Last path segment of a type with references and generics removed."""
    try:
        segment, _ = _TypeParser(raw_type).parse_raw_path()
    except MalformedType:
        return raw_type.strip()
    return segment


# === RECURSIVE DESCENT PARSER === #

class _TypeParser:
    """Single-use parser over one type expression."""

    def __init__(self, text: str):
        self.text = text or ""
        self.tokens = self._tokenize(self.text)
        self.pos = 0

    @staticmethod
    def _tokenize(text: str) -> List[str]:
        tokens = []
        for match in _TOKEN_RE.finditer(text):
            token = next((group for group in match.groups() if group), None)
            if token is not None:
                tokens.append(token)
        return tokens

    def _peek(self) -> Optional[str]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _next(self) -> str:
        token = self._peek()
        if token is None:
            raise MalformedType(f"unexpected end of type: {self.text!r}")
        self.pos += 1
        return token

    def _expect(self, token: str):
        found = self._next()
        if found != token:
            raise MalformedType(f"expected {token!r}, found {found!r} in {self.text!r}")

    def parse(self) -> TypeModel:
        if not self.tokens:
            raise MalformedType("empty type")
        model = self._parse_type()
        if self._peek() is not None:
            raise MalformedType(f"trailing tokens in {self.text!r}")
        return model

    def parse_raw_path(self) -> Tuple[str, List[str]]:
        """Parse a (possibly referenced) path and return its last segment and raw generic args."""
        self._skip_reference()
        segment, args = self._parse_path()
        if self._peek() is not None:
            raise MalformedType(f"trailing tokens in {self.text!r}")
        return segment, [self._render(arg_tokens) for arg_tokens in args]

    # --- grammar --- #

    def _skip_reference(self):
        while self._peek() in ("&", "*"):
            self._next()
            if self._peek() and self._peek().startswith("'"):
                self._next()
            if self._peek() in ("mut", "const"):
                self._next()

    def _parse_type(self) -> TypeModel:
        token = self._peek()
        if token in ("&", "*"):
            self._skip_reference()
            return self._parse_type()
        if token == "(":
            return self._parse_tuple()
        if token == "[":
            return self._parse_slice()
        if token in _TYPE_KEYWORDS:
            self._next()
        segment, args = self._parse_path()
        arg_models = [_TypeParser(self._render(arg)).parse() for arg in args]
        return _build_model(segment, arg_models)

    def _parse_tuple(self) -> TypeModel:
        self._expect("(")
        elements = []
        trailing_comma = False
        while self._peek() != ")":
            elements.append(self._parse_type())
            trailing_comma = False
            if self._peek() == ",":
                self._next()
                trailing_comma = True
            elif self._peek() != ")":
                raise MalformedType(f"bad tuple in {self.text!r}")
        self._expect(")")
        if not elements:
            return TypeModel.primitive(BaseType.VOID)
        if len(elements) == 1 and not trailing_comma:
            return elements[0]
        return TypeModel.wrap(TypeKind.TUPLE, *elements)

    def _parse_slice(self) -> TypeModel:
        self._expect("[")
        element = self._parse_type()
        if self._peek() == ";":
            self._next()
            depth = 0
            while not (self._peek() == "]" and depth == 0):
                token = self._next()
                if token in ("[", "(", "{"):
                    depth += 1
                elif token in ("]", ")", "}"):
                    depth -= 1
        self._expect("]")
        return TypeModel.wrap(TypeKind.ARRAY, element)

    def _parse_path(self) -> Tuple[str, List[List[str]]]:
        """Parse `a::b::Name<args>` and return the last segment with raw arg token lists."""
        if self._peek() == "::":
            self._next()
        segment = self._next()
        if not re.match(r"[A-Za-z_]\w*$", segment):
            raise MalformedType(f"expected type name, found {segment!r} in {self.text!r}")
        args: List[List[str]] = []
        while True:
            if self._peek() == "::":
                self._next()
                if self._peek() == "<":
                    continue
                segment = self._next()
                if not re.match(r"[A-Za-z_]\w*$", segment):
                    raise MalformedType(f"bad path segment {segment!r} in {self.text!r}")
            elif self._peek() == "<":
                args = self._parse_generic_args()
                if self._peek() == "::":
                    raise MalformedType(f"associated paths are not supported: {self.text!r}")
                break
            else:
                break
        return segment, args

    def _parse_generic_args(self) -> List[List[str]]:
        """Split `<A, B<C, D>>` at depth zero into raw token lists, dropping lifetimes."""
        self._expect("<")
        args: List[List[str]] = []
        current: List[str] = []
        depth = 0
        while True:
            token = self._next()
            if token in ("<", "(", "["):
                depth += 1
            elif token in (">", ")", "]"):
                if depth == 0:
                    if token != ">":
                        raise MalformedType(f"unbalanced generics in {self.text!r}")
                    break
                depth -= 1
            elif token == "," and depth == 0:
                args.append(current)
                current = []
                continue
            current.append(token)
        if current:
            args.append(current)
        args = [arg for arg in args if not (len(arg) == 1 and arg[0].startswith("'"))]
        if any(not arg for arg in args):
            raise MalformedType(f"empty generic argument in {self.text!r}")
        return args

    @staticmethod
    def _render(tokens: List[str]) -> str:
        text = ""
        for token in tokens:
            if text and re.match(r"\w", token) and re.search(r"\w$", text):
                text += " "
            text += token
        return text


def _build_model(segment: str, args: List[TypeModel]) -> TypeModel:
    """Turn a path's last segment and its mapped generic arguments into a TypeModel."""
    if segment in PRIMITIVE_TYPE_MAP and not args:
        return TypeModel.primitive(PRIMITIVE_TYPE_MAP[segment])

    if segment in OPTION_TYPES:
        _require_arity(segment, args, 1)
        return TypeModel.wrap(TypeKind.OPTIONAL, args[0])

    if segment in ARRAY_TYPES:
        _require_arity(segment, args, 1)
        return TypeModel.wrap(TypeKind.ARRAY, args[0])

    if segment in MAP_TYPES:
        # HashMap<K, V, S> carries a hasher parameter
        if len(args) not in (2, 3):
            raise MalformedType(f"{segment} expects 2 type arguments")
        return TypeModel.wrap(TypeKind.MAP, args[0], args[1])

    if segment in RESULT_TYPES:
        if len(args) not in (1, 2):
            raise MalformedType(f"{segment} expects 1 or 2 type arguments")
        return TypeModel.wrap(TypeKind.RESULT, args[0])

    if segment in TRANSPARENT_TYPES:
        _require_arity(segment, args, 1)
        return args[0]

    return TypeModel.custom(segment)


def _require_arity(segment: str, args: List[TypeModel], count: int):
    if len(args) != count:
        raise MalformedType(f"{segment} expects {count} type argument(s), got {len(args)}")
