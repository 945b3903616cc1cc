"""File operations used when loading, saving and backing up documents."""

from __future__ import annotations

import codecs
import os
import shutil

BACKUP_SUFFIX = ".backup"

_BOMS = (
    (codecs.BOM_UTF32_LE, "utf-32"),
    (codecs.BOM_UTF32_BE, "utf-32"),
    (codecs.BOM_UTF8, "utf-8-sig"),
    (codecs.BOM_UTF16_LE, "utf-16"),
    (codecs.BOM_UTF16_BE, "utf-16"),
)


class StorageError(Exception):
    """Raised when a file cannot be read, written or backed up."""


def read_text(file_path: str | os.PathLike[str]) -> str:
    """Read a text file as UTF-8, honouring a UTF-8, UTF-16 or UTF-32 BOM."""
    try:
        with open(file_path, "rb") as stream:
            data = stream.read()
    except OSError as error:
        raise StorageError(error.strerror or str(error)) from error

    encoding = "utf-8"
    for bom, name in _BOMS:
        if data.startswith(bom):
            encoding = name
            break
    return data.decode(encoding, errors="replace")


def write_text(file_path: str | os.PathLike[str] | None, text: str) -> None:
    """Write text to the given path in UTF-8."""
    if not file_path:
        raise StorageError("No file path specified")
    try:
        with open(file_path, "w", encoding="utf-8", newline="") as stream:
            stream.write(text)
    except OSError as error:
        raise StorageError(error.strerror or str(error)) from error


def ensure_directory(directory: str | os.PathLike[str]) -> str:
    """Create the directory (and its parents) if needed; return its absolute path."""
    path = os.path.abspath(os.fspath(directory))
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as error:
        raise StorageError(error.strerror or str(error)) from error
    return path


def backup_file(file_path: str | os.PathLike[str], backup_location: str | os.PathLike[str]) -> str:
    """Copy a file to ``<backup_location>/<name>.backup``.

    Any earlier backup of the same name is replaced.  If the file does not
    exist no backup is made.  Returns the backup path.
    """
    backup_dir = os.fspath(backup_location)
    name = os.path.basename(os.fspath(file_path))
    backup_path = os.path.join(backup_dir, name + BACKUP_SUFFIX)

    if not os.path.isdir(backup_dir):
        try:
            os.makedirs(backup_dir, exist_ok=True)
        except OSError as error:
            raise StorageError("Error creating backup location!") from error

    if os.path.exists(backup_path):
        try:
            os.remove(backup_path)
        except OSError as error:
            raise StorageError(error.strerror or str(error)) from error

    if os.path.exists(file_path):
        try:
            shutil.copyfile(file_path, backup_path)
        except OSError as error:
            raise StorageError(error.strerror or str(error)) from error

    return backup_path


def next_draft_path(draft_location: str | os.PathLike[str], draft_name: str) -> str:
    """Return the first ``<draft_name>-<n>.md`` path in the location that does not exist."""
    location = os.fspath(draft_location)
    number = 1
    while True:
        candidate = f"{location}/{draft_name}-{number}.md"
        if not os.path.exists(candidate):
            return candidate
        number += 1


def is_draft_path(
    file_path: str | os.PathLike[str] | None,
    draft_location: str | os.PathLike[str],
    draft_name: str,
) -> bool:
    """Return True if the path lies in the draft location and is named like a draft."""
    if not file_path:
        return False
    path = os.path.abspath(os.fspath(file_path))
    directory = os.path.dirname(path)
    base_name = os.path.basename(path).split(".", 1)[0]
    return (
        directory == os.path.abspath(os.fspath(draft_location))
        and base_name.startswith(draft_name)
    )