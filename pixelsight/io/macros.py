"""
Macro file management for PixelSight

Macros are operation log files kept in a configurable directory and named
by the user. They are discovered by their ops extension.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..config import get_config_value, get_default_config

logger = logging.getLogger(__name__)

SAFE_FILENAME_CHARS = "-_ "
FILENAME_REPLACEMENT_CHAR = "_"


def sensible_ops_name(name: str, ops_extension: str = "ops") -> str:
    """
    Make sure a file name ends with the ops extension.

    "blur" -> "blur.ops", "blur." -> "blur.ops", "blur.ops" -> "blur.ops"
    """
    if name.lower().endswith(f".{ops_extension.lower()}"):
        return name
    if name.endswith("."):
        return name + ops_extension
    return f"{name}.{ops_extension}"


class MacroLibrary:
    """Lists and names macro files in the macro directory."""

    def __init__(self, directory: Optional[Union[str, Path]] = None,
                 ops_extension: Optional[str] = None, config: Optional[Dict] = None):
        """
        Initialize the macro library

        Args:
            directory: Macro directory; defaults to ``macros.directory``
            ops_extension: Extension of macro files; defaults to ``editor.ops_extension``
            config: Configuration dictionary
        """
        config = config or get_default_config()
        self.directory = Path(directory or get_config_value(config, 'macros.directory')).expanduser()
        self.ops_extension = ops_extension or get_config_value(config, 'editor.ops_extension', 'ops')

    def ensure_directory(self) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        return self.directory

    def list_macros(self) -> List[Path]:
        """All macro files in the directory, sorted by name."""
        if not self.directory.is_dir():
            logger.debug(f"Macro directory does not exist: {self.directory}")
            return []
        return sorted(
            path for path in self.directory.glob(f"*.{self.ops_extension}")
            if path.is_file()
        )

    def macro_names(self) -> List[str]:
        return [path.stem for path in self.list_macros()]

    def path_for(self, name: str) -> Path:
        """
        Path of the macro called ``name`` inside the directory.

        Characters other than letters, digits and ``-_`` or spaces are
        replaced so the name cannot escape the directory.
        """
        stem = name[:-len(self.ops_extension) - 1] if name.lower().endswith(
            f".{self.ops_extension.lower()}") else name
        safe = "".join(
            c if c.isalnum() or c in SAFE_FILENAME_CHARS else FILENAME_REPLACEMENT_CHAR
            for c in stem
        ).strip()
        if not safe.strip(FILENAME_REPLACEMENT_CHAR):
            safe = "macro"
        return self.directory / sensible_ops_name(safe, self.ops_extension)
