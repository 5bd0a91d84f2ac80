"""
zod schema backend

Emits a runtime schema plus a derived `z.infer` type per declaration. Schema
constants are evaluated in order, so declarations are topologically sorted;
command wrappers validate their parameters object before calling `invoke`.
"""

from typing import Dict, List

from tauri_typegen.core.naming import property_key
from tauri_typegen.core.schema import ProjectModel, CommandInfo, FieldInfo
from tauri_typegen.generators.typescript.base import BaseGenerator
from tauri_typegen.generators.typescript.schemas import (
    build_object_schema, build_enum_schema, build_struct_schema, field_schema, order_declarations, schema_name,
)


class ZodGenerator(BaseGenerator):
    name = "zod"

    def render_types(self, model: ProjectModel) -> str:
        mapped = set(self.type_mappings)
        dependencies = {
            name: model.structs[name].get_referenced_types() - mapped
            for name in model.emitted_types
        }
        ordered = order_declarations(model.emitted_types, dependencies)

        declarations: List[Dict] = []
        for name in ordered:
            declaration = model.structs[name]
            if declaration.is_enum:
                declarations.append({"kind": "expression", "channels": [],
                                     **build_enum_schema(declaration, self.naming, self.type_mappings)})
            elif declaration.is_alias_struct:
                declarations.append({"kind": "expression", "channels": [],
                                     **build_struct_schema(declaration, self.type_mappings)})
            else:
                declarations.append({"kind": "object", "channels": [],
                                     **build_object_schema(declaration, self.naming, self.type_mappings)})

        # Parameter schemas only reference struct schemas, never each other
        for command in model.commands:
            if command.has_arguments:
                declarations.append(self._params_schema(command))

        return self.renderer.render(
            "zod/types.ts.j2",
            declarations=declarations,
            uses_channels=any(command.channels for command in model.commands),
        )

    def render_commands(self, model: ProjectModel) -> str:
        commands = []
        for command in model.commands:
            context = self.command_context(command)
            if context["params_type"]:
                context["params_schema"] = schema_name(context["params_type"])
            commands.append(context)

        return self.renderer.render(
            "zod/commands.ts.j2",
            commands=commands,
            uses_types=self.commands_use_types(model),
        )

    def _params_schema(self, command: CommandInfo) -> Dict:
        """Schema over regular parameters; channels are typed but never validated."""
        type_name = self.naming.params_type_name(command)
        fields = [
            {
                "key": property_key(self.naming.parameter_name(param, command)),
                "schema": field_schema(
                    FieldInfo(name=param.name, type=param.type, is_optional=param.is_optional),
                    self.type_mappings,
                ),
            }
            for param in command.parameters
        ]
        return {
            "kind": "object",
            "name": type_name,
            "schema_name": schema_name(type_name),
            "fields": fields,
            "channels": self.channel_fields(command),
        }
