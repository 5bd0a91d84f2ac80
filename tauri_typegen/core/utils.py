import logging
from pathlib import Path
from typing import Iterator

from tauri_typegen.core.constants import SKIPPED_DIRECTORIES


_LOGGER_NAME = "tauri_typegen"


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Attach a single stderr handler to the tauri_typegen logger hierarchy."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)

    # Repeated CLI invocations in one process must not stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[tauri-typegen] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)
    return logger


def iter_rust_files(project_root: Path) -> Iterator[Path]:
    """
    Yield every .rs file below project_root in sorted order.

    Build output, node_modules and hidden directories are skipped.
    """
    for path in sorted(project_root.rglob("*.rs")):
        relative_parts = path.relative_to(project_root).parts[:-1]
        if any(part in SKIPPED_DIRECTORIES or part.startswith(".") for part in relative_parts):
            continue
        if path.is_file():
            yield path
