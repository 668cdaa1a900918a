# tests/test_listing_renderer.py
import datetime
import os

import pytest
from prompt_toolkit.formatted_text import fragment_list_to_text

from rush.directory_scanner import FileKind
from rush.listing_renderer import (
    ELLIPSIS, LONG_HEADER, ListingRenderer,
    format_mtime, format_permissions, format_size, probe_terminal_width, truncate_name,
)

def fixed_width(width):
    return lambda default: width

def as_text(lines):
    return [fragment_list_to_text(line) for line in lines]

# --- Shared formatting helpers ---

@pytest.mark.parametrize("size, expected", [
    (0, "0.0B"),
    (1023, "1023.0B"),
    (1024, "1.0K"),
    (1536, "1.5K"),
    (2048, "2.0K"),
    (1048576, "1.0M"),
    (1073741824, "1.0G"),
    (1024 ** 4, "1.0T"),
    (1024 ** 5, "1024.0T"),
])
def test_format_size(size, expected):
    assert format_size(size) == expected

@pytest.mark.parametrize("mode, expected", [
    (0o100755, "755"),
    (0o100644, "644"),
    (0o040700, "700"),
    (0o104755, "755"),
    (0o100007, "007"),
])
def test_format_permissions_uses_low_nine_bits(mode, expected):
    assert format_permissions(mode) == expected

def test_format_mtime_local_time():
    ts = datetime.datetime(2024, 3, 9, 7, 5, 59).timestamp()
    assert format_mtime(ts) == "2024-03-09 07:05"

@pytest.mark.parametrize("name, width, expected", [
    ("abcdef", 6, "abcdef"),
    ("abcdefg", 6, "abcde" + ELLIPSIS),
    ("abc", 10, "abc"),
    ("abcdef", 2, "a" + ELLIPSIS),
    ("abcdef", 1, ELLIPSIS),
    ("abcdef", 0, ELLIPSIS),
    ("", 0, ""),
])
def test_truncate_name(name, width, expected):
    assert truncate_name(name, width) == expected

# --- Grid mode ---

def test_grid_breaks_rows_every_four_entries(make_entry):
    renderer = ListingRenderer(width_probe=fixed_width(80))
    entries = [make_entry(f"f{i}") for i in range(6)]

    lines = as_text(renderer.render_grid(entries))

    assert len(lines) == 2
    assert lines[0].split() == ["📄", "f0", "📄", "f1", "📄", "f2", "📄", "f3"]
    assert lines[1].split() == ["📄", "f4", "📄", "f5"]

def test_grid_exact_multiple_has_no_trailing_partial_row(make_entry):
    renderer = ListingRenderer(width_probe=fixed_width(80))
    lines = renderer.render_grid([make_entry(f"f{i}") for i in range(8)])
    assert len(lines) == 2

def test_grid_empty_directory(make_entry):
    assert ListingRenderer(width_probe=fixed_width(80)).render_grid([]) == []

def test_grid_pads_and_truncates_to_column_width(make_entry):
    renderer = ListingRenderer(width_probe=fixed_width(80))
    # 80 // 4 - 3 = 17 characters for the name
    [line] = renderer.render_grid([make_entry("short"), make_entry("a" * 30)])
    fragments = list(line)

    assert fragments[1] == ("class:ls.file", "short".ljust(17))
    assert fragments[3] == ("class:ls.file", "a" * 16 + ELLIPSIS)

def test_grid_clamps_narrow_terminal(make_entry):
    renderer = ListingRenderer(width_probe=fixed_width(12))
    # Clamped to 40 columns: 40 // 4 - 3 = 7
    [line] = renderer.render_grid([make_entry("abcdefghij")])
    assert list(line)[1][1] == "abcdef" + ELLIPSIS

def test_terminal_width_reports_real_columns(mocker):
    mocker.patch("rush.listing_renderer.shutil.get_terminal_size",
                 return_value=os.terminal_size((132, 40)))
    assert probe_terminal_width() == 132

def test_terminal_width_falls_back_on_zero_columns(mocker):
    mocker.patch("rush.listing_renderer.shutil.get_terminal_size",
                 return_value=os.terminal_size((0, 0)))
    assert probe_terminal_width() == 80
    assert probe_terminal_width(100) == 100

def test_default_renderer_clamps_narrow_real_terminal(mocker, make_entry):
    mocker.patch("rush.listing_renderer.shutil.get_terminal_size",
                 return_value=os.terminal_size((30, 24)))
    [line] = ListingRenderer().render_grid([make_entry("abcdefghij")])
    assert list(line)[1][1] == "abcdef" + ELLIPSIS

def test_default_renderer_uses_fallback_width_when_unknown(mocker, make_entry):
    mocker.patch("rush.listing_renderer.shutil.get_terminal_size",
                 return_value=os.terminal_size((0, 0)))
    [line] = ListingRenderer().render_grid([make_entry("short")])
    assert list(line)[1][1] == "short".ljust(17)

def test_grid_styles_names_by_color_class(make_entry):
    renderer = ListingRenderer(width_probe=fixed_width(80))
    entries = [
        make_entry("bin", kind=FileKind.DIRECTORY, mode=0o040755),
        make_entry("link", kind=FileKind.SYMLINK, mode=0o120777),
        make_entry("run", mode=0o100755),
        make_entry("pic.gif"),
    ]
    [line] = renderer.render_grid(entries)
    styles = [style for style, _ in list(line)[1::2]]
    assert styles == ["class:ls.directory", "class:ls.link", "class:ls.executable", "class:ls.image"]

# --- Long mode ---

def test_long_format_rows(make_entry):
    renderer = ListingRenderer(width_probe=fixed_width(80))
    mtime = datetime.datetime(2023, 12, 31, 23, 59).timestamp()
    entries = [make_entry("notes.txt", mode=0o100644, size=2048, uid=501, gid=20, mtime=mtime)]

    header, row = as_text(renderer.render_long(entries))

    assert header == LONG_HEADER
    assert row.startswith("644           501     20     2048 2023-12-31 23:59 ")
    assert row.endswith(" notes.txt")

def test_long_format_human_readable_sizes(make_entry):
    renderer = ListingRenderer(width_probe=fixed_width(80))
    [_, row] = as_text(renderer.render_long([make_entry("big", size=1536)], human_readable=True))
    assert "    1.5K " in row

def test_long_format_name_width_has_floor(make_entry):
    renderer = ListingRenderer(width_probe=fixed_width(60))
    [_, row] = renderer.render_long([make_entry("n" * 30)])
    # max(20, 60 - 50) == 20
    assert list(row)[-1][1] == "n" * 19 + ELLIPSIS

def test_long_format_name_width_grows_with_terminal(make_entry):
    renderer = ListingRenderer(width_probe=fixed_width(120))
    [_, row] = renderer.render_long([make_entry("n" * 71)])
    assert list(row)[-1][1] == "n" * 69 + ELLIPSIS

def test_long_format_skips_unformattable_entry(make_entry):
    renderer = ListingRenderer(width_probe=fixed_width(80))
    errors = []
    entries = [make_entry("ok"), make_entry("broken", mtime=1e20), make_entry("zz")]

    lines = as_text(renderer.render_long(entries, on_error=errors.append))

    assert len(lines) == 3
    assert lines[1].endswith(" ok") and lines[2].endswith(" zz")
    assert len(errors) == 1 and errors[0].startswith("broken:")

def test_render_dispatches_on_mode(make_entry):
    renderer = ListingRenderer(width_probe=fixed_width(80))
    entries = [make_entry("a")]
    assert as_text(renderer.render(entries, long_format=True))[0] == LONG_HEADER
    assert as_text(renderer.render(entries))[0].split() == ["📄", "a"]

def test_settings_override_defaults(make_entry):
    renderer = ListingRenderer({"columns": 2}, width_probe=fixed_width(80))
    lines = renderer.render_grid([make_entry(f"f{i}") for i in range(3)])
    assert len(lines) == 2
