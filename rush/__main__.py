# rush/__main__.py
import sys

from rush.main import run_shell

sys.exit(run_shell())
