#!/usr/bin/env python3
"""
FileWriter component for table extraction.

Handles writing JSON output files with optional backup of a previous
output.
"""

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import IO

logger = logging.getLogger(__name__)


class FileWriter:
    """
    Writes extraction output to a file.

    Features:
    - UTF-8 encoding for all files
    - Optional timestamped backup of an existing output file
    - Parent directory creation as needed
    """

    def __init__(self, output_path: str | Path):
        """
        Initialize file writer.

        Args:
            output_path: File the JSON output is written to
        """
        self.output_path = Path(output_path)
        self.backup_dir = self.output_path.parent / "backups"

    def prepare(self, create_backup: bool = False) -> None:
        """
        Create the output directory and back up an existing output file.

        Args:
            create_backup: Whether to back up an existing output file first

        Raises:
            OSError: If the directory or backup cannot be created
        """
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        if create_backup and self.output_path.exists():
            self.create_backup(self.output_path)

    def open_stream(self, create_backup: bool = False) -> IO[str]:
        """
        Open the output file for incremental writes.

        The caller is responsible for closing the returned stream.

        Raises:
            OSError: If the file cannot be opened
        """
        self.prepare(create_backup)
        logger.info(f"Streaming output to: {self.output_path}")
        return open(self.output_path, "w", encoding="utf-8")

    def create_backup(self, original_path: Path) -> Path:
        """
        Create timestamped backup of a file.

        Args:
            original_path: Path to file to backup

        Returns:
            Path to created backup file

        Raises:
            OSError: If backup creation fails
        """
        self.backup_dir.mkdir(parents=True, exist_ok=True)
        backup_path = self.get_backup_path(original_path)
        shutil.copyfile(original_path, backup_path)

        logger.info(f"Created backup: {backup_path}")
        return backup_path

    def get_backup_path(self, original_path: Path) -> Path:
        """
        Get the backup path that would be used for a file.

        Example: 'tables.json' -> 'backups/tables_20240101_120000.json'

        Args:
            original_path: Path to original file

        Returns:
            Path where backup would be created (with current timestamp)
        """
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        backup_filename = f"{original_path.stem}_{timestamp}{original_path.suffix}"
        return self.backup_dir / backup_filename
