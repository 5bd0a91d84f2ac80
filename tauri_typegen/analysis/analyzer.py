"""
tauri-typegen Project Analyzer

Walks every Rust file of a project, collects commands, struct/enum
declarations and event emissions into a ProjectModel, then computes the
closure of custom types the generated client must declare.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

from tauri_typegen.analysis.parser import RustSourceParser
from tauri_typegen.analysis.commands import extract_commands
from tauri_typegen.analysis.structs import extract_structs
from tauri_typegen.analysis.events import extract_events
from tauri_typegen.core.errors import PathNotFound, FileParseFailure
from tauri_typegen.core.schema import ProjectModel, Diagnostic, EventInfo, TypeModel, UNKNOWN_TYPE
from tauri_typegen.core.utils import iter_rust_files


logger = logging.getLogger(__name__)


class CommandAnalyzer:
    """
    Builds the semantic model for one project.

    An instance owns its tables for a single run; create a new analyzer for
    every project analysis.

    Args:
        type_mappings: Rust type name -> TypeScript type. Mapped names count as
            resolved and are never emitted as declarations.
    """

    def __init__(self, type_mappings: Optional[Dict[str, str]] = None):
        self.type_mappings = dict(type_mappings or {})
        self.parser = RustSourceParser()

    def analyze_project(self, project_root) -> ProjectModel:
        """
        Analyze every .rs file below project_root.

        Raises:
            PathNotFound: If project_root does not exist or is not a directory
        """
        root = Path(project_root)
        if not root.is_dir():
            raise PathNotFound(str(project_root))

        model = ProjectModel(project_root=root.resolve())
        file_count = 0
        for file_path in iter_rust_files(root):
            file_count += 1
            self._analyze_file(file_path, model)

        compute_closure(model, self.type_mappings)

        logger.debug(f"Analyzed {file_count} files: {len(model.commands)} commands, "
                     f"{len(model.structs)} types, {len(model.events)} events")
        return model

    def _analyze_file(self, file_path: Path, model: ProjectModel):
        try:
            parsed = self.parser.parse_file(file_path)
        except FileParseFailure as e:
            model.diagnostics.append(Diagnostic(message=str(e), file_path=e.file_path, line_number=e.line_number))
            logger.warning(str(e))
            return

        seen_commands = {command.name for command in model.commands}
        for command in extract_commands(parsed):
            if command.name in seen_commands:
                message = f"Duplicate command '{command.name}' ignored; first declaration wins"
                model.diagnostics.append(Diagnostic(message, command.file_path, command.line_number))
                logger.warning(message)
                continue
            seen_commands.add(command.name)
            model.commands.append(command)

        for declaration in extract_structs(parsed):
            if declaration.name in model.structs:
                logger.debug(f"Type {declaration.name} declared more than once; keeping the first declaration")
                continue
            model.structs[declaration.name] = declaration

        events, diagnostics = extract_events(parsed)
        model.events.extend(events)
        for diagnostic in diagnostics:
            model.diagnostics.append(diagnostic)
            logger.warning(str(diagnostic))


# === CLOSURE === #

def compute_closure(model: ProjectModel, type_mappings: Optional[Dict[str, str]] = None):
    """
    Fill model.emitted_types and model.unresolved_types.

    Starts from every command's parameters, return type and channel message
    types, then follows struct fields and enum variant payloads. Declared
    event payload types are added afterwards; undeclared ones demote to
    `unknown` since events never fail generation.
    """
    mapped = set(type_mappings or {})
    emitted: List[str] = []
    unresolved: Dict[str, Set[str]] = {}

    def visit(names: Iterable[str], referrer: str):
        for name in sorted(names):
            if name in mapped or name in emitted:
                continue
            declaration = model.structs.get(name)
            if declaration is None:
                unresolved.setdefault(name, set()).add(referrer)
                continue
            emitted.append(name)
            visit(declaration.get_referenced_types(), name)

    for command in model.commands:
        visit(command.get_referenced_types(), command.name)

    events = []
    for event in _deduplicate_events(model.events):
        payload_names = event.payload_type.get_referenced_types() - mapped
        missing = {name for name in payload_names if name not in model.structs}
        if missing:
            logger.warning(f"Event '{event.name}' payload references undeclared types "
                           f"{', '.join(sorted(missing))}; typing it as unknown")
            event = EventInfo(event.name, UNKNOWN_TYPE, event.file_path, event.line_number)
        else:
            visit(payload_names, f"event {event.name}")
        events.append(event)

    model.events = events
    model.emitted_types = emitted
    model.unresolved_types = unresolved


def _deduplicate_events(events: List[EventInfo]) -> List[EventInfo]:
    """One entry per event name; a known payload type wins over `unknown`."""
    by_name: Dict[str, EventInfo] = {}
    for event in events:
        existing = by_name.get(event.name)
        if existing is None or (_is_unknown(existing.payload_type) and not _is_unknown(event.payload_type)):
            by_name[event.name] = event
    return list(by_name.values())


def _is_unknown(type_model: TypeModel) -> bool:
    return type_model == UNKNOWN_TYPE
