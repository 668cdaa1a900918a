# tests/test_ui_manager.py
import io

import pytest
from prompt_toolkit.formatted_text import FormattedText, fragment_list_to_text

from rush.shell_engine import ShellContext
from rush.ui_manager import DedupFileHistory, UIManager, display_path

@pytest.fixture
def ui_manager():
    return UIManager({"ui": {"styles": {"error": "bold #ff0000"}}},
                     output_file=io.StringIO(), error_file=io.StringIO())

@pytest.mark.parametrize("cwd, home, expected", [
    ("/home/tester", "/home/tester", "~"),
    ("/home/tester/src/rush", "/home/tester", "~/src/rush"),
    ("/home/testerx", "/home/tester", "/home/testerx"),
    ("/tmp", "/home/tester", "/tmp"),
])
def test_display_path(cwd, home, expected):
    assert display_path(cwd, home) == expected

def test_append_output_writes_plain_text_when_not_a_tty(ui_manager):
    ui_manager.append_output("hello")
    assert ui_manager.output_file.getvalue() == "hello\n"
    assert ui_manager.error_file.getvalue() == ""

def test_append_error_goes_to_error_stream(ui_manager):
    ui_manager.append_error("❌ boom")
    assert ui_manager.error_file.getvalue() == "❌ boom\n"
    assert ui_manager.output_file.getvalue() == ""

def test_print_lines(ui_manager):
    ui_manager.print_lines([
        FormattedText([("", "📁 "), ("class:ls.directory", "src")]),
        FormattedText([("class:ls.header", "Permissions")]),
    ])
    assert ui_manager.output_file.getvalue() == "📁 src\nPermissions\n"

def test_user_styles_override_defaults(ui_manager):
    attrs = ui_manager.style.get_attrs_for_style_str("class:error")
    assert attrs.bold
    assert attrs.color == "ff0000"

def test_build_prompt(ui_manager):
    ctx = ShellContext(cwd="/home/tester/src", home="/home/tester", username="tester")
    ui_manager.hostname = "box"
    assert fragment_list_to_text(ui_manager.build_prompt(ctx)) == "\n~/src\ntester@box > "

def test_dedup_file_history(tmp_path):
    history = DedupFileHistory(str(tmp_path / "history"))
    for line in ["ls", "pwd", "ls", "cd /tmp && ls", "pwd"]:
        history.append_string(line)

    assert list(history.load_history_strings()) == ["cd /tmp && ls", "pwd", "ls"]

def test_dedup_file_history_survives_reload(tmp_path):
    path = str(tmp_path / "history")
    DedupFileHistory(path).append_string("make test")
    reloaded = DedupFileHistory(path)
    reloaded.append_string("make test")
    assert list(reloaded.load_history_strings()) == ["make test"]
