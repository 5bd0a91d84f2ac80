"""
tree-sitter wrapper for Rust sources.

Produces ParsedFile objects and small node helpers shared by the command,
struct and event extractors.
"""

from pathlib import Path
from dataclasses import dataclass
from typing import Iterator, List, Optional

import tree_sitter_rust as ts_rust
from tree_sitter import Language, Node, Parser, Tree

from tauri_typegen.core.errors import FileParseFailure


RUST_LANGUAGE = Language(ts_rust.language())

COMMENT_NODES = {"line_comment", "block_comment"}


@dataclass
class ParsedFile:
    """One successfully parsed Rust file."""
    path: Path
    source: bytes
    tree: Tree

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text(self, node: Optional[Node]) -> str:
        return node_text(node, self.source)


class RustSourceParser:
    """Parse Rust source files with tree-sitter-rust."""

    def __init__(self):
        self.parser = Parser(RUST_LANGUAGE)

    def parse_source(self, source: str, path: Path = Path("<memory>")) -> ParsedFile:
        """
        Parse Rust source text.

        Raises:
            FileParseFailure: If the syntax tree contains errors
        """
        data = source.encode("utf-8")
        tree = self.parser.parse(data)
        if tree.root_node.has_error:
            error_node = _first_error(tree.root_node)
            line = error_node.start_point[0] + 1 if error_node is not None else None
            raise FileParseFailure(str(path), "syntax error", line)
        return ParsedFile(path=path, source=data, tree=tree)

    def parse_file(self, file_path: Path) -> ParsedFile:
        """
        Read and parse a Rust file.

        Raises:
            FileParseFailure: If the file cannot be read, decoded, or parsed
        """
        try:
            source = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise FileParseFailure(str(file_path), str(e)) from e
        return self.parse_source(source, file_path)


# === NODE HELPERS === #

def node_text(node: Optional[Node], source: bytes) -> str:
    """Source text of a node; tree-sitter offsets are byte offsets."""
    if node is None:
        return ""
    return source[node.start_byte:node.end_byte].decode("utf-8")


def line_number(node: Node) -> int:
    return node.start_point[0] + 1


def preceding_attributes(node: Node, source: bytes) -> List[str]:
    """
    Return the `#[...]` attributes written directly above a node, in source order.

    tree-sitter-rust stores outer attributes as preceding siblings rather than
    children, so walk backwards past comments until a non-attribute sibling.
    Each entry is the attribute body without the surrounding `#[` and `]`.
    """
    attributes = []
    sibling = node.prev_named_sibling
    while sibling is not None:
        if sibling.type == "attribute_item":
            text = node_text(sibling, source).strip()
            if text.startswith("#[") and text.endswith("]"):
                text = text[2:-1]
            attributes.append(text.strip())
        elif sibling.type not in COMMENT_NODES:
            break
        sibling = sibling.prev_named_sibling
    attributes.reverse()
    return attributes


def has_visibility(node: Node) -> bool:
    return any(child.type == "visibility_modifier" for child in node.children)


def named_children_of_type(node: Optional[Node], *types: str) -> List[Node]:
    if node is None:
        return []
    return [child for child in node.named_children if child.type in types]


def walk(node: Node) -> Iterator[Node]:
    """Depth-first pre-order traversal of a subtree."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def _first_error(node: Node) -> Optional[Node]:
    for child in walk(node):
        if child.type == "ERROR" or child.is_missing:
            return child
    return None
