# rush/directory_scanner.py

import enum
import logging
import os
import stat
from dataclasses import dataclass
from typing import List

logger = logging.getLogger(__name__)

HIDDEN_MARKER = "."
EXECUTABLE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


class DirectoryError(Exception):
    """Raised when a directory cannot be listed."""
    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class FileKind(enum.Enum):
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"


@dataclass(frozen=True)
class EntryView:
    """A snapshot of one directory entry's metadata."""
    name: str
    kind: FileKind
    mode: int
    uid: int
    gid: int
    size: int
    mtime: float

    @property
    def is_executable(self) -> bool:
        return bool(self.mode & EXECUTABLE_BITS)

    @property
    def permission_bits(self) -> int:
        return stat.S_IMODE(self.mode) & 0o777

    @classmethod
    def from_stat(cls, name: str, st: os.stat_result) -> "EntryView":
        if stat.S_ISLNK(st.st_mode):
            kind = FileKind.SYMLINK
        elif stat.S_ISDIR(st.st_mode):
            kind = FileKind.DIRECTORY
        else:
            kind = FileKind.FILE
        return cls(
            name=name,
            kind=kind,
            mode=st.st_mode,
            uid=st.st_uid,
            gid=st.st_gid,
            size=st.st_size,
            mtime=st.st_mtime,
        )


def sort_entries(entries: List[EntryView]) -> List[EntryView]:
    """Orders entries by name, comparing the raw filename bytes."""
    return sorted(entries, key=lambda entry: os.fsencode(entry.name))


def scan_directory(path: str, show_hidden: bool = False) -> List[EntryView]:
    """
    Reads every entry of `path` with its metadata (symlinks are not followed).

    Hidden entries are dropped unless `show_hidden` is set, then the result is
    sorted by name. An entry removed between the directory read and its stat
    is skipped.

    Raises:
        DirectoryError: If the directory, or an entry's metadata, is unreadable.
    """
    entries = []
    try:
        with os.scandir(path) as it:
            for dir_entry in it:
                if not show_hidden and dir_entry.name.startswith(HIDDEN_MARKER):
                    continue
                try:
                    st = dir_entry.stat(follow_symlinks=False)
                except FileNotFoundError:
                    logger.warning(f"Entry '{dir_entry.name}' in '{path}' vanished during scan; skipping.")
                    continue
                entries.append(EntryView.from_stat(dir_entry.name, st))
    except FileNotFoundError:
        raise DirectoryError(path, "No such file or directory")
    except NotADirectoryError:
        raise DirectoryError(path, "Not a directory")
    except PermissionError as e:
        raise DirectoryError(path, f"Permission denied ({e.filename or path})")
    except OSError as e:
        raise DirectoryError(path, e.strerror or str(e))

    logger.debug(f"Scanned '{path}': {len(entries)} entries (show_hidden={show_hidden})")
    return sort_entries(entries)
