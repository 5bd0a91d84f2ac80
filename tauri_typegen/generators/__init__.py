"""
Output backends, selected by the configured validation library.
"""

from typing import Optional

from tauri_typegen.core.config import GenerateConfig
from tauri_typegen.core.errors import UnknownValidationLibrary
from tauri_typegen.generators.typescript.base import BaseGenerator
from tauri_typegen.generators.typescript.plain import PlainGenerator
from tauri_typegen.generators.typescript.zod import ZodGenerator


GENERATORS = {
    "zod": ZodGenerator,
    "schema": ZodGenerator,
    "none": PlainGenerator,
}


def create_generator(validation_library: str, config: Optional[GenerateConfig] = None) -> BaseGenerator:
    """
    Select the backend for a validation library name.

    Raises:
        UnknownValidationLibrary: If the name is not zod, schema or none
    """
    name = (validation_library or "").strip().lower()
    if name not in GENERATORS:
        raise UnknownValidationLibrary(validation_library)
    return GENERATORS[name](config)


__all__ = ["BaseGenerator", "PlainGenerator", "ZodGenerator", "create_generator"]
