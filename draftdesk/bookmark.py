"""Bookmarks of files and their last known cursor position."""

from __future__ import annotations

import os
from datetime import datetime


class Bookmark:
    """A file path together with the last known cursor position in it.

    A bookmark created without a file path is null.  Negative cursor
    positions are stored as zero.  Two bookmarks are equal when they
    refer to the same absolute file path, whatever their cursor position.
    """

    __slots__ = ("file_path", "cursor_position")

    def __init__(self, file_path: str | os.PathLike[str] | None = None, position: int = 0) -> None:
        if file_path is None:
            self.file_path: str | None = None
            self.cursor_position = 0
            return

        self.file_path = os.path.abspath(os.fspath(file_path))
        self.cursor_position = max(position, 0)

    def is_valid(self) -> bool:
        """Return True if the bookmarked path exists and is a regular file."""
        if self.is_null():
            return False
        return os.path.isfile(self.file_path)

    def is_null(self) -> bool:
        """Return True if this bookmark has no file path."""
        return self.file_path is None

    def last_read(self) -> datetime | None:
        """Return the time the file was last read, or None if unavailable."""
        if self.file_path is None:
            return None
        try:
            return datetime.fromtimestamp(os.stat(self.file_path).st_atime)
        except OSError:
            return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bookmark):
            return NotImplemented
        return self.file_path == other.file_path

    def __hash__(self) -> int:
        return hash(self.file_path)

    def __repr__(self) -> str:
        return f"Bookmark({self.file_path!r}, {self.cursor_position})"