"""
Exception hierarchy for analysis and generation failures.

Library callers catch TypegenError; the CLI turns it into a stderr line and a
non-zero exit status.
"""

from typing import Dict, List, Optional, Set


class TypegenError(Exception):
    """Base class for every fatal tauri-typegen error."""


class PathNotFound(TypegenError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Project path does not exist: {path}")


class FileParseFailure(TypegenError):
    """A single source file could not be parsed. Recorded as a diagnostic, not raised by analysis."""

    def __init__(self, file_path: str, reason: str, line_number: Optional[int] = None):
        self.file_path = file_path
        self.reason = reason
        self.line_number = line_number
        location = f"{file_path}:{line_number}" if line_number else file_path
        super().__init__(f"Failed to parse {location}: {reason}")


class UnknownValidationLibrary(TypegenError):
    def __init__(self, name: str, supported=("zod", "none")):
        self.name = name
        super().__init__(f"Unknown validation library '{name}'. Use one of: {', '.join(supported)}")


class ConfigError(TypegenError):
    """Configuration file missing, unreadable, or invalid."""


class UnresolvedCustomType(TypegenError):
    """
    One or more referenced custom types were never declared in the project.

    Attributes:
        missing: Mapping of undeclared type name -> names of the commands/types referencing it
    """

    def __init__(self, missing: Dict[str, Set[str]]):
        self.missing = missing
        details = "; ".join(
            f"{name} (referenced by {', '.join(sorted(users))})"
            for name, users in sorted(missing.items())
        )
        super().__init__(f"Unresolved custom types: {details}")


class SchemaDependencyCycle(TypegenError):
    def __init__(self, cycle: List[str]):
        self.cycle = cycle
        super().__init__(f"Circular dependency between schema declarations: {' -> '.join(cycle)}")


class TemplateError(TypegenError):
    """A template is missing or failed to render."""
