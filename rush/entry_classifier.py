# rush/entry_classifier.py

import enum
import os
from dataclasses import dataclass
from typing import Optional

from rush.directory_scanner import EntryView, FileKind


class EntryKind(enum.Enum):
    """Which classification rule matched an entry."""
    DIRECTORY_WELL_KNOWN = enum.auto()
    DIRECTORY = enum.auto()
    SYMLINK = enum.auto()
    EXECUTABLE = enum.auto()
    REGULAR = enum.auto()


class ExtensionClass(enum.Enum):
    IMAGE = "image"
    ARCHIVE = "archive"
    NEUTRAL = "file"


@dataclass(frozen=True)
class Classification:
    kind: EntryKind
    icon: str
    color_class: str
    extension_class: Optional[ExtensionClass] = None


FOLDER_ICON = "📁"
LINK_ICON = "🔗"
EXECUTABLE_ICON = ">_"
FILE_ICON = "📄"
CONFIG_ICON = "⚙️"

WELL_KNOWN_FOLDERS = {
    "Downloads": "📥",
    "Desktop": "🖥️",
    "Documents": "📄",
    "Documentos": "📄",
    "Dev": "</>",
    "dev": "</>",
    "Projects": "🗂️",
    "projects": "🗂️",
    "Pictures": "🖼️",
    "Imagens": "🖼️",
    "Music": "🎵",
    "Música": "🎵",
    "Videos": "🎥",
    "Vídeos": "🎥",
    ".config": CONFIG_ICON,
    ".git": "🗃️",
    "node_modules": "📦",
    "__pycache__": "📦",
    "target": "🛠️",
    "build": "🛠️",
    "dist": "🛠️",
}

# Checked in order; the first suffix that matches wins. Dotfiles are tested
# between the two tables, so `.notes.txt` gets the config icon.
SUFFIX_ICONS = (
    (".rs", "🦀"),
    (".go", "🐹"),
    (".c", "C"),
    (".cpp", "C++"),
    (".h", "H"),
    (".py", "🐍"),
    (".r", "𝐑"),
    (".js", "JS"),
    (".ts", "TS"),
    (".html", "🌐"),
    (".css", "🎨"),
    (".md", ""),
    (".json", "{}"),
    (".toml", CONFIG_ICON),
    (".yaml", CONFIG_ICON),
    (".yml", CONFIG_ICON),
    (".conf", CONFIG_ICON),
    (".config", CONFIG_ICON),
)

AFTER_DOTFILE_ICONS = (
    (".sh", ">_"),
    (".txt", ""),
    (".sql", ""),
    (".java", "☕"),
    (".zip", "🗜️"),
    (".gz", "🗜️"),
    (".tar", "🗜️"),
    (".jpg", "🖼️"),
    (".png", "🖼️"),
    (".gif", "🖼️"),
)

EXTENSION_CLASSES = {
    "jpg": ExtensionClass.IMAGE,
    "png": ExtensionClass.IMAGE,
    "gif": ExtensionClass.IMAGE,
    "zip": ExtensionClass.ARCHIVE,
    "gz": ExtensionClass.ARCHIVE,
    "tar": ExtensionClass.ARCHIVE,
}


def folder_icon(name: str) -> Optional[str]:
    return WELL_KNOWN_FOLDERS.get(name)


def _match_suffix(name: str, table) -> Optional[str]:
    for suffix, icon in table:
        if name.endswith(suffix):
            return icon
    return None


def file_icon(name: str) -> str:
    icon = _match_suffix(name, SUFFIX_ICONS)
    if icon is not None:
        return icon
    # Dotfiles are almost always configuration
    if name.startswith("."):
        return CONFIG_ICON
    icon = _match_suffix(name, AFTER_DOTFILE_ICONS)
    return icon if icon is not None else FILE_ICON


def extension_class(name: str) -> ExtensionClass:
    """Coarse color grouping by the final extension (a dotfile has none)."""
    _, ext = os.path.splitext(name)
    return EXTENSION_CLASSES.get(ext[1:], ExtensionClass.NEUTRAL)


def classify(entry: EntryView) -> Classification:
    """
    Maps an entry to its icon and color class.

    Rules are tried in order: directory, symlink, executable, regular file.
    """
    if entry.kind is FileKind.DIRECTORY:
        icon = folder_icon(entry.name)
        if icon is not None:
            return Classification(EntryKind.DIRECTORY_WELL_KNOWN, icon, "directory")
        return Classification(EntryKind.DIRECTORY, FOLDER_ICON, "directory")

    if entry.kind is FileKind.SYMLINK:
        return Classification(EntryKind.SYMLINK, LINK_ICON, "link")

    if entry.is_executable:
        return Classification(EntryKind.EXECUTABLE, EXECUTABLE_ICON, "executable")

    ext_class = extension_class(entry.name)
    return Classification(EntryKind.REGULAR, file_icon(entry.name), ext_class.value, ext_class)
