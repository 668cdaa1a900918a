# rush/ui_manager.py
import logging
import os
import socket
import sys
from typing import Iterable, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.history import FileHistory
from prompt_toolkit.shortcuts import print_formatted_text
from prompt_toolkit.styles import Style

logger = logging.getLogger(__name__)

DEFAULT_STYLES = {
    'default': '', 'info': '#61afef',
    'success': '#98c379', 'error': '#e06c75',
    'warning': '#d19a66',
    'prompt.path': 'bold', 'prompt.user': '#abb2bf',
    'prompt.arrow': '#98c379',
    'ls.header': 'bold',
    'ls.directory': 'bold #61afef', 'ls.link': '#56b6c2',
    'ls.executable': '#98c379', 'ls.image': '#e5c07b',
    'ls.archive': '#e06c75', 'ls.file': '',
}


class DedupFileHistory(FileHistory):
    """FileHistory that skips a line already present in the history file."""
    def append_string(self, string: str) -> None:
        if string in self.load_history_strings():
            logger.debug(f"History already contains '{string}'; not appending.")
            return
        super().append_string(string)


def display_path(cwd: str, home: str) -> str:
    """Shows `cwd` relative to `home` as ~/..., or unchanged outside it."""
    if cwd == home:
        return "~"
    if home and cwd.startswith(home.rstrip(os.sep) + os.sep):
        return "~/" + os.path.relpath(cwd, home)
    return cwd


class UIManager:
    """Terminal output and the interactive prompt session.

    All text goes through prompt_toolkit's print_formatted_text with one
    shared style, so command output, errors and listings are colored by
    style class (e.g. 'class:error', 'class:ls.directory').
    """
    def __init__(self, config: dict, output_file=None, error_file=None):
        self.config = config
        ui_styles = config.get('ui', {}).get('styles', {})
        self.style = Style.from_dict({**DEFAULT_STYLES, **ui_styles})
        self.output_file = output_file
        self.error_file = error_file
        self.hostname = socket.gethostname()
        self.session: Optional[PromptSession] = None
        logger.debug("UIManager initialized.")

    def append_output(self, text: str, style_class: str = 'default'):
        logger.info(f"UI_OUTPUT: {text.rstrip()}")
        print_formatted_text(FormattedText([(f'class:{style_class}', text)]),
                             style=self.style, file=self.output_file or sys.stdout)

    def append_error(self, text: str, style_class: str = 'error'):
        logger.info(f"UI_ERROR: {text.rstrip()}")
        print_formatted_text(FormattedText([(f'class:{style_class}', text)]),
                             style=self.style, file=self.error_file or sys.stderr)

    def print_lines(self, lines: Iterable[FormattedText]):
        for line in lines:
            print_formatted_text(line, style=self.style, file=self.output_file or sys.stdout)

    def build_prompt(self, context) -> FormattedText:
        return FormattedText([
            ('', '\n'),
            ('class:prompt.path', display_path(context.cwd, context.home)),
            ('', '\n'),
            ('class:prompt.user', f"{context.username}@{self.hostname}"),
            ('', ' '),
            ('class:prompt.arrow', '>'),
            ('', ' '),
        ])

    def create_session(self, history_file: str, dedupe: bool = True) -> PromptSession:
        history_path = os.path.expanduser(history_file)
        history_cls = DedupFileHistory if dedupe else FileHistory
        self.session = PromptSession(history=history_cls(history_path), style=self.style)
        logger.info(f"Prompt session created with history at {history_path} (dedupe={dedupe})")
        return self.session

    def read_line(self, context) -> str:
        """Reads one line; raises KeyboardInterrupt or EOFError like PromptSession.prompt."""
        return self.session.prompt(self.build_prompt(context))
