# rush/listing_renderer.py

import datetime
import logging
import shutil
from typing import Any, Callable, Dict, List, Optional, Sequence

from prompt_toolkit.formatted_text import FormattedText

from rush.directory_scanner import EntryView
from rush.entry_classifier import classify

logger = logging.getLogger(__name__)

ELLIPSIS = "…"
SIZE_UNITS = ("B", "K", "M", "G", "T")
MTIME_FORMAT = "%Y-%m-%d %H:%M"
LONG_HEADER = "Permissions  Owner   Group     Size    Modification       Name"
# Space taken by the icon and its separators in a grid cell
GRID_ICON_ALLOWANCE = 3


def truncate_name(name: str, width: int) -> str:
    """Shortens `name` to `width` characters, marking the cut with an ellipsis."""
    if len(name) <= width:
        return name
    if width > 1:
        return name[:width - 1] + ELLIPSIS
    return ELLIPSIS


def format_size(size: int) -> str:
    """Binary-scaled size with one decimal place, e.g. 1536 -> '1.5K'."""
    value = float(size)
    unit_idx = 0
    while value >= 1024.0 and unit_idx < len(SIZE_UNITS) - 1:
        value /= 1024.0
        unit_idx += 1
    return f"{value:.1f}{SIZE_UNITS[unit_idx]}"


def format_permissions(mode: int) -> str:
    """The low nine permission bits as three octal digits."""
    return f"{mode & 0o777:03o}"


def format_mtime(timestamp: float) -> str:
    return datetime.datetime.fromtimestamp(timestamp).strftime(MTIME_FORMAT)


def probe_terminal_width(default: int = 80) -> int:
    """Width of the controlling terminal, or `default` when it cannot be probed."""
    columns = shutil.get_terminal_size((default, 24)).columns
    return columns if columns > 0 else default


class ListingRenderer:
    """
    Lays out classified entries either as a fixed-column grid or as a long
    table. Every method returns lines of prompt_toolkit formatted text; the
    name of each entry carries the `ls.<color class>` style.
    """
    def __init__(self, settings: Optional[Dict[str, Any]] = None,
                 width_probe: Callable[[int], int] = probe_terminal_width):
        settings = settings or {}
        self.columns = settings.get("columns", 4)
        self.default_terminal_width = settings.get("default_terminal_width", 80)
        self.min_terminal_width = settings.get("min_terminal_width", 40)
        self.long_name_allowance = settings.get("long_name_allowance", 50)
        self.min_long_name_width = settings.get("min_long_name_width", 20)
        self.width_probe = width_probe

    def terminal_width(self) -> int:
        return self.width_probe(self.default_terminal_width)

    def render(self, entries: Sequence[EntryView], long_format: bool = False,
               human_readable: bool = False,
               on_error: Optional[Callable[[str], None]] = None) -> List[FormattedText]:
        if long_format:
            return self.render_long(entries, human_readable, on_error=on_error)
        return self.render_grid(entries)

    def render_grid(self, entries: Sequence[EntryView]) -> List[FormattedText]:
        term_width = max(self.min_terminal_width, self.terminal_width())
        name_width = term_width // self.columns - GRID_ICON_ALLOWANCE

        lines = []
        row: List[tuple] = []
        for i, entry in enumerate(entries, start=1):
            classification = classify(entry)
            name = truncate_name(entry.name, name_width)
            row.append(("", f"{classification.icon} "))
            row.append((f"class:ls.{classification.color_class}", f"{name:<{name_width}}"))
            if i % self.columns == 0:
                lines.append(FormattedText(row))
                row = []
        if row:
            lines.append(FormattedText(row))
        return lines

    def render_long(self, entries: Sequence[EntryView], human_readable: bool = False,
                    on_error: Optional[Callable[[str], None]] = None) -> List[FormattedText]:
        name_width = max(self.min_long_name_width, self.terminal_width() - self.long_name_allowance)
        lines = [FormattedText([("class:ls.header", LONG_HEADER)])]

        for entry in entries:
            try:
                lines.append(self._long_row(entry, human_readable, name_width))
            except (OverflowError, OSError, ValueError) as e:
                message = f"{entry.name}: cannot format entry: {e}"
                logger.error(message)
                if on_error:
                    on_error(message)
        return lines

    def _long_row(self, entry: EntryView, human_readable: bool, name_width: int) -> FormattedText:
        size = format_size(entry.size) if human_readable else str(entry.size)
        modified = format_mtime(entry.mtime)
        classification = classify(entry)
        prefix = f"{format_permissions(entry.mode):10} {entry.uid:6} {entry.gid:6} {size:>8} {modified} {classification.icon} "
        return FormattedText([
            ("", prefix),
            (f"class:ls.{classification.color_class}", truncate_name(entry.name, name_width)),
        ])
