"""
Read-only dependency view over a ProjectModel, for diagnostics.

Renders a plain-text adjacency listing and a Graphviz DOT description. The
graph never feeds back into generation.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Set

from tauri_typegen.core.schema import ProjectModel, CommandInfo


@dataclass
class DependencyGraph:
    """
    Adjacency lists derived from a model.

    Attributes:
        type_dependencies: declared type -> custom names its fields/variants reference
        command_types: command -> every custom type reachable from its signature
    """
    model: ProjectModel
    type_dependencies: Dict[str, Set[str]] = field(default_factory=dict)
    command_types: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def from_model(cls, model: ProjectModel) -> 'DependencyGraph':
        graph = cls(model=model)
        for name, declaration in model.structs.items():
            graph.type_dependencies[name] = declaration.get_referenced_types()
        for command in model.commands:
            graph.command_types[command.name] = graph.reachable_types(command.get_referenced_types())
        return graph

    def reachable_types(self, roots: Set[str]) -> List[str]:
        """Transitively referenced custom names, sorted."""
        seen: Set[str] = set()
        pending = list(roots)
        while pending:
            name = pending.pop()
            if name in seen:
                continue
            seen.add(name)
            pending.extend(self.type_dependencies.get(name, ()))
        return sorted(seen)

    def to_text(self) -> str:
        lines = ["Type Dependency Graph", "=====================", "", "Commands:"]

        for command in self.model.commands:
            lines.append(f"- {command.name} ({command.file_path}:{command.line_number})")
            for param in command.parameters:
                lines.append(f"    param {param.name}: {param.type}")
            for channel in command.channels:
                lines.append(f"    channel {channel.name}: Channel[{channel.message_type}]")
            lines.append(f"    returns: {command.return_type}")
            reachable = self.command_types.get(command.name, [])
            lines.append(f"    uses: {', '.join(reachable) if reachable else '(none)'}")

        lines.extend(["", "Types:"])
        for name in sorted(self.type_dependencies):
            declaration = self.model.structs[name]
            kind = "enum" if declaration.is_enum else "struct"
            if declaration.is_enum:
                members = len(declaration.variants)
            else:
                members = len(declaration.fields) or len(declaration.types)
            lines.append(f"- {name} ({kind}, {members} members) in {declaration.file_path}")
            dependencies = sorted(self.type_dependencies[name])
            if dependencies:
                lines.append(f"    depends on: {', '.join(dependencies)}")

        if self.model.unresolved_types:
            lines.extend(["", "Unresolved:"])
            for name, referrers in sorted(self.model.unresolved_types.items()):
                lines.append(f"- {name} (referenced by {', '.join(sorted(referrers))})")

        lines.extend([
            "",
            "Summary:",
            f"- {len(self.model.commands)} commands analyzed",
            f"- {len(self.model.structs)} types discovered",
            f"- {len(self.model.emitted_types)} types emitted",
            f"- {len(self.model.events)} events discovered",
        ])
        return "\n".join(lines) + "\n"

    def to_dot(self) -> str:
        lines = [
            "digraph Dependencies {",
            "  rankdir=LR;",
            "  node [shape=box];",
            "",
        ]
        for command in self.model.commands:
            lines.append(f'  "{command.name}" [color=blue, style=filled, fillcolor=lightblue];')
        for name in sorted(self.type_dependencies):
            lines.append(f'  "{name}" [color=green];')
        for name in sorted(self.model.unresolved_types):
            lines.append(f'  "{name}" [color=red, style=dashed];')
        lines.append("")

        for command in self.model.commands:
            lines.extend(self._command_edges(command))
        for name in sorted(self.type_dependencies):
            for dependency in sorted(self.type_dependencies[name]):
                lines.append(f'  "{name}" -> "{dependency}";')

        lines.append("}")
        return "\n".join(lines) + "\n"

    @staticmethod
    def _command_edges(command: CommandInfo) -> List[str]:
        edges = []
        labelled = [("param", param.type) for param in command.parameters]
        labelled += [("channel", channel.message_type) for channel in command.channels]
        labelled.append(("return", command.return_type))
        seen = set()
        for label, type_model in labelled:
            for name in sorted(type_model.get_referenced_types()):
                if (label, name) in seen:
                    continue
                seen.add((label, name))
                edges.append(f'  "{command.name}" -> "{name}" [label="{label}"];')
        return edges
