"""Configuration management for RedSplit CLI."""

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from cli.utils import parse_size
from common.constants import DEFAULT_MAX_WORKERS, DEFAULT_SIZE_LIMIT_BYTES

logger = logging.getLogger(__name__)

SIZE_LIMIT_ENV = "REDSPLIT_SIZE_LIMIT"


def default_config_path() -> Path:
    """Config location, honouring the REDSPLIT_CONFIG override."""
    override = os.environ.get("REDSPLIT_CONFIG")
    if override:
        return Path(override)
    return Path.home() / '.redsplit' / 'config.json'


class Config:
    """Manages CLI configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "size_limit": DEFAULT_SIZE_LIMIT_BYTES,
        "output_dir": ".",
        "input_dir": None,
        "compress": False,
        "max_workers": DEFAULT_MAX_WORKERS,
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.redsplit/config.json)
        """
        self.config_path = Path(config_path)
        self.data = self._load()
        if not self.config_path.exists():
            self.save()

    def _load(self) -> dict:
        """
        Load configuration from file, falling back to defaults.

        A file that cannot be parsed is copied to ``config.json.bak`` and the
        defaults are used instead.

        Returns:
            Configuration dictionary
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            self.config_path = Path(tempfile.gettempdir()) / '.redsplit' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if not self.config_path.exists():
            return self.DEFAULT_CONFIG.copy()

        try:
            with open(self.config_path, 'r') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("config root must be an object")
        except (ValueError, OSError) as e:
            logger.warning(f"Ignoring unreadable config {self.config_path}: {e}")
            backup_path = self.config_path.with_suffix('.json.bak')
            try:
                shutil.copy(self.config_path, backup_path)
            except OSError as copy_error:
                logger.warning(f"Could not back up config to {backup_path}: {copy_error}")
            return self.DEFAULT_CONFIG.copy()

        config = self.DEFAULT_CONFIG.copy()
        config.update(data)
        return config

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except OSError as e:
            logger.warning(f"Could not save config {self.config_path}: {e}")

    def get_size_limit(self) -> int:
        """
        Get default part size in bytes.

        ``REDSPLIT_SIZE_LIMIT`` (a byte count or a size such as ``100MB``)
        takes precedence over the file. Unparseable values are logged and
        skipped.

        Returns:
            Size limit used when a split command gives none
        """
        override = os.environ.get(SIZE_LIMIT_ENV)
        if override:
            try:
                return parse_size(override)
            except ValueError as e:
                logger.warning(f"Ignoring {SIZE_LIMIT_ENV}: {e}")

        value = self.data.get('size_limit', DEFAULT_SIZE_LIMIT_BYTES)
        if isinstance(value, str):
            try:
                return parse_size(value)
            except ValueError as e:
                logger.warning(f"Ignoring size_limit in {self.config_path}: {e}")
                return DEFAULT_SIZE_LIMIT_BYTES
        return value

    def get_output_dir(self) -> str:
        return self.data.get('output_dir') or '.'

    def get_input_dir(self) -> Optional[str]:
        """Chunk root for restore; None means each manifest's own split output root."""
        return self.data.get('input_dir') or None

    def get_compress(self) -> bool:
        return bool(self.data.get('compress', False))

    def get_max_workers(self) -> int:
        """
        Get number of files processed in parallel.

        Returns:
            Worker count, at least 1
        """
        return max(1, int(self.data.get('max_workers', DEFAULT_MAX_WORKERS)))
