"""
tauri-typegen - TypeScript client generation for Tauri commands
"""

from .core.config import get_version, GenerateConfig, load_config, discover_config
from .core.integrator import generate, analyze, GenerationResult
from .core.errors import (
    TypegenError,
    PathNotFound,
    FileParseFailure,
    UnknownValidationLibrary,
    ConfigError,
    UnresolvedCustomType,
    SchemaDependencyCycle,
    TemplateError,
)

__version__ = get_version()

__all__ = [
    # Main functions
    'generate',
    'analyze',

    # Configuration
    'GenerateConfig',
    'GenerationResult',
    'load_config',
    'discover_config',

    # Errors
    'TypegenError',
    'PathNotFound',
    'FileParseFailure',
    'UnknownValidationLibrary',
    'ConfigError',
    'UnresolvedCustomType',
    'SchemaDependencyCycle',
    'TemplateError',

    # Version
    '__version__'
]
