#!/usr/bin/env python3
"""
Filesystem Reader Module

This module provides the filesystem collaborator used by root discovery,
topology building and config reading. Blocking calls run in a worker thread
via asyncio.to_thread so that each directory read is a suspension point for
the event loop.

This module is part of the Core Layer and should have no dependencies on
Presentation or Integration layers.

Links to documentation:
- os.scandir: https://docs.python.org/3/library/os.html#os.scandir
- asyncio.to_thread: https://docs.python.org/3/library/asyncio-task.html#asyncio.to_thread

Sample input:
- path: "/path/to/repo"

Expected output:
- List of DirEntry(name, path, is_dir) in filesystem listing order
- File text for read_text
"""

import asyncio
import os
from dataclasses import dataclass
from typing import List, Protocol

from loguru import logger


@dataclass(frozen=True)
class DirEntry:
    """A directory listing entry."""
    name: str
    path: str
    is_dir: bool


class FilesystemReader(Protocol):
    async def list_entries(self, path: str) -> List[DirEntry]:
        ...

    async def read_text(self, path: str) -> str:
        ...

    async def is_dir(self, path: str) -> bool:
        ...


class LocalFilesystemReader:
    """
    Reads the local filesystem.

    Directory-ness is taken from the entry type without following symlinks
    unless follow_symlinks is set.
    """

    def __init__(self, follow_symlinks: bool = False, encoding: str = "utf-8"):
        self.follow_symlinks = follow_symlinks
        self.encoding = encoding

    def _scan(self, path: str) -> List[DirEntry]:
        entries = []
        with os.scandir(path) as it:
            for entry in it:
                entries.append(
                    DirEntry(
                        name=entry.name,
                        path=entry.path,
                        is_dir=entry.is_dir(follow_symlinks=self.follow_symlinks),
                    )
                )
        return entries

    def _is_dir(self, path: str) -> bool:
        if not self.follow_symlinks and os.path.islink(path):
            return False
        return os.path.isdir(path)

    def _read(self, path: str) -> str:
        with open(path, "r", encoding=self.encoding) as f:
            return f.read()

    async def list_entries(self, path: str) -> List[DirEntry]:
        """
        List the entries of a directory.

        Args:
            path: Directory to list

        Returns:
            List[DirEntry]: Entries in the order the filesystem yields them

        Raises:
            OSError: If the directory cannot be read
        """
        logger.trace(f"Listing {path}")
        return await asyncio.to_thread(self._scan, path)

    async def read_text(self, path: str) -> str:
        """
        Read a file as text.

        Raises:
            OSError: If the file cannot be opened
            UnicodeDecodeError: If the content is not valid text
        """
        return await asyncio.to_thread(self._read, path)

    async def is_dir(self, path: str) -> bool:
        """Check that path is a directory without listing its parent."""
        return await asyncio.to_thread(self._is_dir, path)
