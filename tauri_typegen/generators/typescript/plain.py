"""
Plain TypeScript backend

Structural declarations only: interfaces, string-literal unions, and
command wrappers that pass parameters straight to `invoke`.
"""

from typing import Dict, List

from tauri_typegen.core.schema import ProjectModel
from tauri_typegen.generators.typescript.base import BaseGenerator
from tauri_typegen.generators.typescript.interfaces import (
    build_interface, build_enum_alias, build_struct_alias,
)


class PlainGenerator(BaseGenerator):
    name = "none"

    def render_types(self, model: ProjectModel) -> str:
        # Interfaces and type aliases tolerate forward references, so model order is kept
        declarations: List[Dict] = []
        for declaration in model.get_emitted_structs():
            if declaration.is_enum:
                declarations.append({"kind": "alias", **build_enum_alias(declaration, self.naming, self.type_mappings)})
            elif declaration.is_alias_struct:
                declarations.append({"kind": "alias", **build_struct_alias(declaration, self.type_mappings)})
            else:
                declarations.append({"kind": "interface", **build_interface(declaration, self.naming, self.type_mappings)})

        for command in model.commands:
            if command.has_arguments:
                declarations.append({
                    "kind": "interface",
                    "name": self.naming.params_type_name(command),
                    "fields": self.parameter_fields(command),
                })

        return self.renderer.render(
            "plain/types.ts.j2",
            declarations=declarations,
            uses_channels=any(command.channels for command in model.commands),
        )

    def render_commands(self, model: ProjectModel) -> str:
        return self.renderer.render(
            "plain/commands.ts.j2",
            commands=[self.command_context(command) for command in model.commands],
            uses_types=self.commands_use_types(model),
        )
