# ============================================================================
# DDL SCRIPT WRITER
# ============================================================================
# EPOCH: 1 - SCHEMA MAPPING
# STATUS: Infrastructure - DDL script output
# PURPOSE: Write schema statements to a file instead of executing them
# CREATED: 18 OCT 2026
# ============================================================================
"""
DDL Script Writer

Script mode for create/delete: statements go to a file, one per line,
each terminated by ";". An existing file is replaced and missing parent
directories are created.

    ------------------------------------------------------------------
    -- Wide-Column SchemaTool 0.1.0.0 (ran at 18/10/2026 09:30:00)
    ------------------------------------------------------------------
    CREATE TABLE app.person (name varchar, age int, PRIMARY KEY (name));

Usage:
    with DdlScriptWriter("out/schema.cql") as writer:
        writer.write("CREATE TABLE ...")
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, TextIO

from __version__ import TOOL_NAME

logger = logging.getLogger(__name__)

RULE = "-" * 66


class DdlScriptWriter:
    """Writes statements to a DDL script file."""

    def __init__(
        self,
        filename: str,
        tool_name: str = TOOL_NAME,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.path = Path(filename)
        self.tool_name = tool_name
        self._clock = clock or datetime.now
        self._file: Optional[TextIO] = None
        self.written = 0

    def open(self) -> "DdlScriptWriter":
        """
        Replace the file and write the header.

        Raises:
            OSError: The file cannot be created
        """
        if self.path.exists():
            self.path.unlink()
        if not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)

        self._file = open(self.path, "w")
        ran_at = self._clock().strftime("%d/%m/%Y %H:%M:%S")
        self._file.write(f"{RULE}\n")
        self._file.write(f"-- {self.tool_name} (ran at {ran_at})\n")
        self._file.write(f"{RULE}\n")
        logger.info(f"Writing DDL to {self.path}")
        return self

    def write(self, statement: str) -> None:
        """Append one statement; a failed write is logged and skipped."""
        if self._file is None:
            raise RuntimeError("DDL writer is not open")
        try:
            self._file.write(f"{statement};\n")
            self.written += 1
        except OSError as e:
            logger.error(f"Failed to write DDL statement to {self.path}: {e}")

    def close(self) -> None:
        if self._file is None:
            return
        try:
            self._file.close()
        except OSError as e:
            logger.error(f"Failed to close DDL file {self.path}: {e}")
        finally:
            self._file = None
        logger.info(f"Wrote {self.written} statements to {self.path}")

    def __enter__(self) -> "DdlScriptWriter":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "DdlScriptWriter",
]
