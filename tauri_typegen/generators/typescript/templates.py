"""
Jinja2 template rendering for generated TypeScript files.

Backends build plain context data (names, rendered type strings, flags);
templates own the file layout.
"""

from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound
from jinja2 import TemplateError as Jinja2TemplateError

from tauri_typegen.core.constants import TauriRuntime
from tauri_typegen.core.errors import TemplateError
from tauri_typegen.core.naming import ts_string


TEMPLATES_DIR = Path(__file__).with_name("templates")


class TemplateRenderer:
    """Render `(template id, context)` pairs from the bundled template directory."""

    def __init__(self, templates_dir: Optional[Path] = None):
        directories = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(TEMPLATES_DIR))
        self.env = Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self.env.filters["ts_string"] = ts_string
        self.env.globals["runtime"] = TauriRuntime

    def render(self, template_id: str, **context: Any) -> str:
        try:
            template = self.env.get_template(template_id)
        except TemplateNotFound as e:
            raise TemplateError(f"Template not found: {template_id}") from e
        try:
            return template.render(**context)
        except Jinja2TemplateError as e:
            raise TemplateError(f"Failed to render {template_id}: {e}") from e
