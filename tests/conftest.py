# tests/conftest.py
#
# Project-wide fixtures for pytest.

import sys
import os
from unittest.mock import MagicMock

import pytest

# Add the project root to the Python path so `rush` and `main` import without installation.
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from rush.directory_scanner import EntryView, FileKind


@pytest.fixture
def mock_ui_manager():
    """Provides a mock UIManager that records every call."""
    manager = MagicMock()
    manager.append_output = MagicMock()
    manager.append_error = MagicMock()
    manager.print_lines = MagicMock()
    return manager


@pytest.fixture
def make_entry():
    """Builds EntryView snapshots without touching the filesystem."""
    def _make(name, kind=FileKind.FILE, mode=0o100644, size=0, uid=1000, gid=1000, mtime=0.0):
        return EntryView(name=name, kind=kind, mode=mode, uid=uid, gid=gid, size=size, mtime=mtime)
    return _make
