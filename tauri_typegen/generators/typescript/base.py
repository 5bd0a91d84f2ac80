"""
tauri-typegen Generator Backend contract

A backend turns a ProjectModel into output files. The base class owns what
every backend shares: the unresolved-type check, emission gating, the events
and index files, and the auto-generated header. Subclasses render the types
and commands files.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from tauri_typegen.core.config import GenerateConfig
from tauri_typegen.core.constants import GenerationPaths, AUTO_GENERATED_HEADER
from tauri_typegen.core.errors import UnresolvedCustomType
from tauri_typegen.core.naming import NamingPolicy, property_access, property_key
from tauri_typegen.core.schema import ProjectModel, CommandInfo, ChannelInfo, EventInfo, TypeModel
from tauri_typegen.generators.typescript.interfaces import convert_to_typescript
from tauri_typegen.generators.typescript.templates import TemplateRenderer


logger = logging.getLogger(__name__)

TYPES_NAMESPACE = "types."


class BaseGenerator(ABC):
    """
    Strategy interface for one output flavour.

    Args:
        config: Generation options (naming defaults, type mappings)
        renderer: Template renderer, shared default when omitted
    """

    name = "base"

    def __init__(self, config: Optional[GenerateConfig] = None, renderer: Optional[TemplateRenderer] = None):
        self.config = config or GenerateConfig()
        self.renderer = renderer or TemplateRenderer()
        self.naming = NamingPolicy(
            parameter_case=self.config.default_parameter_case,
            field_case=self.config.default_field_case,
        )
        self.type_mappings = dict(self.config.type_mappings)

    def generate(self, model: ProjectModel) -> Dict[str, str]:
        """
        Render every output file for a model.

        Returns:
            Dict mapping output file name (e.g. "types.ts") -> content

        Raises:
            UnresolvedCustomType: If a referenced type was never declared
            SchemaDependencyCycle: If expression-style declarations form a cycle
        """
        if model.unresolved_types:
            raise UnresolvedCustomType(model.unresolved_types)

        modules: List[str] = [GenerationPaths.TYPES]
        files = {_file_name(GenerationPaths.TYPES): self.render_types(model)}

        if model.commands:
            files[_file_name(GenerationPaths.COMMANDS)] = self.render_commands(model)
            modules.append(GenerationPaths.COMMANDS)

        if model.events:
            files[_file_name(GenerationPaths.EVENTS)] = self.render_events(model)
            modules.append(GenerationPaths.EVENTS)

        files[_file_name(GenerationPaths.INDEX)] = self.render_index(modules)

        logger.debug(f"{self.name} backend rendered {', '.join(files)}")
        return {file_name: AUTO_GENERATED_HEADER + _normalize(content) for file_name, content in files.items()}

    @abstractmethod
    def render_types(self, model: ProjectModel) -> str:
        """Render the types module (declarations and parameter objects)."""

    @abstractmethod
    def render_commands(self, model: ProjectModel) -> str:
        """Render the command wrapper module."""

    def render_events(self, model: ProjectModel) -> str:
        events = []
        seen_listeners = set()
        for event in model.events:
            listener = self.naming.listener_name(event.name)
            if listener in seen_listeners:
                logger.warning(f"Event '{event.name}' maps to an existing listener name {listener}; skipped")
                continue
            seen_listeners.add(listener)
            events.append(self._event_context(event, listener))

        return self.renderer.render(
            "events.ts.j2",
            events=events,
            uses_types=any(event["uses_types"] for event in events),
        )

    def render_index(self, modules: List[str]) -> str:
        ordered = [module for module in GenerationPaths.INDEX_ORDER if module in modules]
        return self.renderer.render("index.ts.j2", modules=ordered)

    # === SHARED CONTEXT === #

    def to_typescript(self, type_model: TypeModel, namespace: str = "") -> str:
        return convert_to_typescript(type_model, self.type_mappings, namespace)

    def references_types(self, type_model: TypeModel) -> bool:
        return bool(type_model.get_referenced_types() - set(self.type_mappings))

    def command_context(self, command: CommandInfo) -> Dict:
        """Fields every commands template needs for one wrapper function."""
        return {
            "name": command.name,
            "function_name": self.naming.function_name(command),
            "params_type": self.naming.params_type_name(command) if command.has_arguments else None,
            "return_type": self.to_typescript(command.return_type, TYPES_NAMESPACE),
            "channels": [self._channel_context(channel, command) for channel in command.channels],
        }

    def _channel_context(self, channel: ChannelInfo, command: CommandInfo) -> Dict:
        name = self.naming.parameter_name(channel, command)
        return {"key": property_key(name), "access": property_access("params", name)}

    def parameter_fields(self, command: CommandInfo) -> List[Dict]:
        """Structural fields of a command's parameters object, channels last."""
        fields = [
            {
                "key": property_key(self.naming.parameter_name(param, command)),
                "optional": param.is_optional,
                "type": self.to_typescript(param.type),
                "docs": [],
            }
            for param in command.parameters
        ]
        fields.extend(self.channel_fields(command))
        return fields

    def channel_fields(self, command: CommandInfo) -> List[Dict]:
        return [
            {
                "key": property_key(self.naming.parameter_name(channel, command)),
                "optional": False,
                "type": f"Channel<{self.to_typescript(channel.message_type)}>",
                "docs": [],
            }
            for channel in command.channels
        ]

    def commands_use_types(self, model: ProjectModel) -> bool:
        return any(command.has_arguments or self.references_types(command.return_type)
                   for command in model.commands)

    def _event_context(self, event: EventInfo, listener: str) -> Dict:
        return {
            "name": event.name,
            "listener_name": listener,
            "payload_type": self.to_typescript(event.payload_type, TYPES_NAMESPACE),
            "uses_types": self.references_types(event.payload_type),
        }


def _file_name(module: str) -> str:
    return f"{module}.ts"


def _normalize(content: str) -> str:
    """Collapse template whitespace: no trailing blank lines, single final newline."""
    lines = [line.rstrip() for line in content.strip().splitlines()]
    collapsed = []
    for line in lines:
        if not line and collapsed and not collapsed[-1]:
            continue
        collapsed.append(line)
    return "\n".join(collapsed) + "\n"
