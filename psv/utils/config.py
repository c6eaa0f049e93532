#!/usr/bin/env python3
"""
Shared configuration utility for psv.

Provides flexible .env file discovery and typed access to the PSV_*
settings that control table extraction.
"""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv
from typing import Optional

from ..tables.data_models import ExtractionSettings, TableIndexScope, TABLE_ID_MAX_LENGTH

logger = logging.getLogger(__name__)

ENV_FILE_NAMES = (".env.psv", ".env")


class ConfigManager:
    """
    Centralized configuration management for psv.

    Features:
    - Flexible .env file discovery (current dir + up to 2 parent dirs)
    - Typed environment helpers with sensible defaults
    - ExtractionSettings built from PSV_* variables
    """

    def __init__(self, search_root: Optional[Path] = None):
        self._env_loaded = False
        self._env_path: Optional[Path] = None
        self._search_root = Path(search_root) if search_root else None
        self.load_environment()

    def load_environment(self) -> bool:
        """
        Search for and load a .env file with flexible path discovery.

        Search order:
        1. Current working directory
        2. One level up (parent directory)
        3. Two levels up (grandparent directory)

        In each directory `.env.psv` is preferred over `.env`. Variables
        already present in the process environment are not overridden.

        Returns:
            bool: True if a .env file was found and loaded, False otherwise
        """
        if self._env_loaded:
            return True

        root = self._search_root or Path.cwd()
        search_paths = [root, root.parent, root.parent.parent]

        for search_path in search_paths:
            for name in ENV_FILE_NAMES:
                env_file = search_path / name
                if env_file.exists() and env_file.is_file():
                    logger.debug(f"Loading {name} from: {env_file}")
                    load_dotenv(env_file, override=False)
                    self._env_path = env_file
                    self._env_loaded = True
                    return True

        logger.debug("No .env file found in current directory or up to 2 parent directories")
        return False

    @property
    def env_path(self) -> Optional[Path]:
        return self._env_path

    def get_env_string(self, key: str, default: str = None) -> str:
        """
        Get string environment variable.

        Args:
            key: Environment variable name
            default: Default value if not found

        Returns:
            str: Environment variable value or default
        """
        return os.getenv(key, default)

    def get_env_int(self, key: str, default: int) -> int:
        """
        Get integer environment variable.

        Args:
            key: Environment variable name
            default: Default value if not found or invalid

        Returns:
            int: Environment variable value or default
        """
        value = os.getenv(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            logger.warning(f"Invalid integer value for {key}, using default {default}")
            return default

    def get_env_bool(self, key: str, default: bool) -> bool:
        """
        Get boolean environment variable.

        Args:
            key: Environment variable name
            default: Default value if not found

        Returns:
            bool: True if value is 'true', '1', 'yes', 'on' (case-insensitive)
        """
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ('true', '1', 'yes', 'on')

    def get_index_scope(self) -> TableIndexScope:
        """Table position scope from PSV_TABLE_INDEX_SCOPE (default: global)."""
        value = self.get_env_string("PSV_TABLE_INDEX_SCOPE", TableIndexScope.GLOBAL.value)
        try:
            return TableIndexScope.parse(value)
        except ValueError:
            logger.warning(f"Invalid PSV_TABLE_INDEX_SCOPE '{value}', using 'global'")
            return TableIndexScope.GLOBAL

    def get_delimiter(self) -> str:
        """Delimiter from PSV_DELIMITER (first character; default '|')."""
        value = self.get_env_string("PSV_DELIMITER", "|")
        if not value:
            return "|"
        return value[0]

    def get_log_level(self) -> str:
        return self.get_env_string("PSV_LOG_LEVEL", "WARNING").upper()

    def get_extraction_settings(self) -> ExtractionSettings:
        """
        Build extraction settings from PSV_* environment variables.

        Returns:
            ExtractionSettings with no table selector
        """
        max_length = self.get_env_int("PSV_TABLE_ID_MAX_LENGTH", TABLE_ID_MAX_LENGTH)
        if max_length < 1:
            logger.warning(
                f"Invalid PSV_TABLE_ID_MAX_LENGTH {max_length}, using {TABLE_ID_MAX_LENGTH}"
            )
            max_length = TABLE_ID_MAX_LENGTH

        return ExtractionSettings(
            delimiter=self.get_delimiter(),
            index_scope=self.get_index_scope(),
            omit_null=self.get_env_bool("PSV_OMIT_NULL", False),
            compact=self.get_env_bool("PSV_COMPACT", False),
            legacy_line_consumption=self.get_env_bool("PSV_LEGACY_LINE_CONSUMPTION", False),
            table_id_max_length=max_length,
        )


_config: Optional[ConfigManager] = None


def get_config() -> ConfigManager:
    """Return the shared ConfigManager, creating it on first use."""
    global _config
    if _config is None:
        _config = ConfigManager()
    return _config

