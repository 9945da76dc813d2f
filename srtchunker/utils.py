"""Utility functions for srtchunker."""

import json
import logging
import os
from typing import Any

from .exceptions import FileSystemError

logger = logging.getLogger(__name__)

def ensure_dir_exists(dir_path: str) -> None:
    """
    Ensures that a directory exists. Creates it if it doesn't.

    Args:
        dir_path: The path to the directory.

    Raises:
        FileSystemError: If the directory cannot be created due to permissions
                         or if the path exists but is not a directory.
    """
    if not dir_path:
        raise ValueError("Directory path cannot be empty.")
    try:
        if not os.path.exists(dir_path):
            os.makedirs(dir_path)
            logger.info(f"Created directory: {dir_path}")
        elif not os.path.isdir(dir_path):
            raise FileSystemError(f"Path exists but is not a directory: {dir_path}")
    except OSError as e:
        logger.error(f"Error creating or accessing directory {dir_path}: {e}", exc_info=True)
        raise FileSystemError(f"Could not create or access directory {dir_path}: {e}") from e

def write_text(path: str, content: str) -> None:
    """Writes UTF-8 text, raising FileSystemError on failure."""
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
    except OSError as e:
        logger.error(f"Could not write {path}: {e}", exc_info=True)
        raise FileSystemError(f"Could not write {path}: {e}") from e

def write_json(path: str, data: Any) -> None:
    """Writes data as indented UTF-8 JSON."""
    write_text(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")
