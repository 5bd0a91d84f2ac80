"""
tauri-typegen Generation Orchestration

Config-driven entry points: analyze a Tauri project, render the selected
backend, and write the generated TypeScript files (plus the optional
dependency graph) to the output directory.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set

from tauri_typegen.analysis.analyzer import CommandAnalyzer
from tauri_typegen.analysis.dependency_graph import DependencyGraph
from tauri_typegen.core.config import GenerateConfig
from tauri_typegen.core.constants import GenerationPaths
from tauri_typegen.core.errors import TypegenError
from tauri_typegen.core.schema import ProjectModel, Diagnostic
from tauri_typegen.generators import create_generator


logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Outcome of one generate() run."""
    model: ProjectModel
    files: List[Path] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)


def analyze(project_path, type_mappings: Optional[Dict[str, str]] = None) -> ProjectModel:
    """Run analysis only and return the project model."""
    return CommandAnalyzer(type_mappings).analyze_project(project_path)


def generate(config: Optional[GenerateConfig] = None) -> GenerationResult:
    """
    Analyze a Tauri project and write its TypeScript client.

    Args:
        config: Generation options; defaults when omitted

    Returns:
        GenerationResult with the written file paths, model and diagnostics

    Raises:
        UnknownValidationLibrary: Before analysis, for an unsupported backend name
        PathNotFound: If config.project_path does not exist
        UnresolvedCustomType: If a referenced type is never declared (nothing is written)
        SchemaDependencyCycle: If zod schemas reference each other in a cycle
        TemplateError: If a template fails to render
    """
    config = config or GenerateConfig()
    generator = create_generator(config.validation_library, config)

    logger.debug(f"Project path: {config.project_path}")
    logger.debug(f"Output path: {config.output_path}")
    logger.debug(f"Validation library: {config.validation_library}")

    model = analyze(config.project_path, config.type_mappings)
    if not model.commands:
        logger.warning(f"No Tauri commands found in {config.project_path}")

    # Render everything before touching the output directory
    generated_files = generator.generate(model)

    output_dir = Path(config.output_path)
    if config.visualize_deps:
        graph = DependencyGraph.from_model(model)
        generated_files[GenerationPaths.DEPENDENCY_TEXT] = graph.to_text()
        generated_files[GenerationPaths.DEPENDENCY_DOT] = graph.to_dot()

    written = _write_generated_files(output_dir, generated_files)
    _cleanup_stale_files(output_dir, set(generated_files))

    logger.info(f"Generated {len(written)} files in {output_dir} "
                f"({len(model.commands)} commands, {len(model.emitted_types)} types, {len(model.events)} events)")
    return GenerationResult(model=model, files=written, diagnostics=list(model.diagnostics))


def _write_generated_files(output_dir: Path, generated_files: Dict[str, str]) -> List[Path]:
    """Write generated files below output_dir, creating it as needed."""
    written = []
    for file_name, content in generated_files.items():
        file_path = output_dir / file_name
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                f.write(content)
        except OSError as e:
            raise TypegenError(f"Failed to write {file_path}: {e}") from e

        logger.debug(f"Generated: {file_path}")
        written.append(file_path)
    return written


def _cleanup_stale_files(output_dir: Path, current_files: Set[str]) -> None:
    """Remove managed files left behind by an earlier run, e.g. events.ts once no event is emitted."""
    for file_name in GenerationPaths.MANAGED_FILES:
        if file_name in current_files:
            continue
        file_path = output_dir / file_name
        if not file_path.is_file():
            continue
        try:
            file_path.unlink()
        except OSError as e:
            raise TypegenError(f"Failed to remove stale {file_path}: {e}") from e
        logger.debug(f"Removed stale: {file_path}")
