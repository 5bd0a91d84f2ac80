# core/config.py
"""
tauri-typegen Configuration Management

Handles loading, validation, and default generation for typegen.json and the
`plugins.typegen` section of tauri.conf.json.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from tauri_typegen.core.constants import VALIDATION_LIBRARIES
from tauri_typegen.core.errors import ConfigError, UnknownValidationLibrary
from tauri_typegen.core.naming import NAMING_CONVENTIONS, CAMEL_CASE, SNAKE_CASE


__version__ = "0.3.0"

CONFIG_FILE_NAME = "typegen.json"
TAURI_CONFIG_FILE_NAME = "tauri.conf.json"

logger = logging.getLogger(__name__)


def get_version() -> str:
    return __version__


class GenerateConfig(BaseModel):
    """
    Options for one generation run.

    Field names are snake_case in Python; the camelCase aliases match the keys
    used inside tauri.conf.json.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    project_path: str = Field("./src-tauri", alias="projectPath")
    output_path: str = Field("./src/generated", alias="outputPath")
    validation_library: str = Field("none", alias="validationLibrary")
    verbose: bool = False
    visualize_deps: bool = Field(False, alias="visualizeDeps")
    type_mappings: Dict[str, str] = Field(default_factory=dict, alias="typeMappings")
    default_parameter_case: str = Field(CAMEL_CASE, alias="defaultParameterCase")
    default_field_case: str = Field(SNAKE_CASE, alias="defaultFieldCase")

    @field_validator("validation_library", mode="before")
    @classmethod
    def _check_validation_library(cls, value: Any) -> str:
        # Not a ValueError, so pydantic lets it propagate as the fatal TypegenError
        name = str(value).strip().lower()
        if name not in VALIDATION_LIBRARIES:
            raise UnknownValidationLibrary(name)
        return name

    @field_validator("default_parameter_case", "default_field_case")
    @classmethod
    def _check_naming_convention(cls, value: str) -> str:
        if value not in NAMING_CONVENTIONS:
            raise ValueError(f"unsupported naming convention '{value}'; "
                             f"use one of {', '.join(NAMING_CONVENTIONS)}")
        return value

    def to_json_dict(self) -> Dict[str, Any]:
        """Serialize with snake_case keys, the typegen.json format."""
        return self.model_dump(by_alias=False)

    def to_tauri_dict(self) -> Dict[str, Any]:
        """Serialize with camelCase keys, the tauri.conf.json plugin format."""
        return self.model_dump(by_alias=True)


def build_config(overrides: Optional[Dict[str, Any]] = None, base: Optional[GenerateConfig] = None) -> GenerateConfig:
    """Merge explicit option values over a base config (or defaults)."""
    data = base.to_json_dict() if base else {}
    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value
    return _validate_config(data, source="options")


def load_config(config_path: Path) -> GenerateConfig:
    """Load configuration from a standalone typegen.json file."""
    config_data = _read_json(config_path)
    if not isinstance(config_data, dict):
        raise ConfigError(f"Invalid configuration in {config_path}: expected a JSON object")
    config = _validate_config(config_data, source=str(config_path))
    logger.debug(f"Loaded tauri-typegen config from {config_path}")
    return config


def load_tauri_config(tauri_config_path: Path) -> Optional[GenerateConfig]:
    """
    Load configuration from the plugins.typegen section of tauri.conf.json.

    Returns:
        GenerateConfig, or None when the file has no typegen section
    """
    tauri_config = _read_json(tauri_config_path)
    plugins = tauri_config.get("plugins") if isinstance(tauri_config, dict) else None
    if not isinstance(plugins, dict) or not isinstance(plugins.get("typegen"), dict):
        return None
    config = _validate_config(plugins["typegen"], source=str(tauri_config_path))
    logger.debug(f"Loaded tauri-typegen config from {tauri_config_path}")
    return config


def discover_config(search_root: Optional[str] = None) -> Optional[GenerateConfig]:
    """
    Find configuration for the current project.

    Looks for typegen.json first, then tauri.conf.json in the search root and
    in its src-tauri directory.
    """
    root = Path(search_root) if search_root else Path.cwd()

    standalone = root / CONFIG_FILE_NAME
    if standalone.exists():
        return load_config(standalone)

    for candidate in (root / TAURI_CONFIG_FILE_NAME, root / "src-tauri" / TAURI_CONFIG_FILE_NAME):
        if candidate.exists():
            config = load_tauri_config(candidate)
            if config is not None:
                return config

    return None


def save_config(config: GenerateConfig, config_path: Path):
    """Write configuration as a standalone typegen.json file."""
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, 'w', encoding='utf-8') as f:
            json.dump(config.to_json_dict(), f, indent=2)
            f.write("\n")
    except OSError as e:
        raise ConfigError(f"Failed to write config to {config_path}: {e}") from e


def _read_json(path: Path) -> Any:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config from {path}: {e}") from e


def _validate_config(config_data: Dict[str, Any], source: str) -> GenerateConfig:
    try:
        return GenerateConfig.model_validate(config_data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {source}: {e}") from e
