# rush/main.py

import datetime
import logging
import os
import sys

from rush import config_handler
from rush.alias_manager import AliasTable
from rush.config_handler import get_config_value
from rush.listing_renderer import ListingRenderer
from rush.shell_engine import ShellContext, ShellEngine
from rush.ui_manager import UIManager

# Shipped defaults live inside the package; user overrides and logs live under ~/.rush
PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_CONFIG_DIR = os.path.join(PACKAGE_DIR, "config")
USER_DIR = os.path.join(os.path.expanduser("~"), ".rush")
LOG_FILE = os.path.join(USER_DIR, "logs", "rush.log")

logger = logging.getLogger(__name__)


def setup_logging(log_file: str = LOG_FILE):
    os.makedirs(os.path.dirname(log_file), exist_ok=True)
    logging.basicConfig(
        level=logging.DEBUG,
        format='%(asctime)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s',
        handlers=[logging.FileHandler(log_file)]
    )


def build_engine(config: dict, ui_manager: UIManager) -> ShellEngine:
    """Loads the rc file and wires the alias table and context into a ShellEngine."""
    rc = config_handler.load_rc_file(get_config_value(config, 'paths.rc_file', '~/.rushrc'))
    aliases = AliasTable(rc.aliases)
    context = ShellContext.from_process().with_exports(rc.exports)
    renderer = ListingRenderer(config.get('ls', {}))
    return ShellEngine(config, ui_manager, aliases, context, renderer=renderer)


def repl(engine: ShellEngine, ui_manager: UIManager, exit_on_interrupt: bool = True):
    """Reads and runs lines until `exit`, end of input, or an interrupt (when configured)."""
    while True:
        try:
            line = ui_manager.read_line(engine.context)
        except KeyboardInterrupt:
            print("^C")
            if exit_on_interrupt:
                logger.info("Interrupted at the prompt; ending session.")
                break
            continue
        except EOFError:
            logger.info("End of input; ending session.")
            break

        line = line.strip()
        if not line:
            continue

        logger.info(f"Input line: '{line}'")
        result = engine.run_line(line)
        if result.exit_requested:
            break


def run_shell():
    """ Main entry point to run the shell. """
    setup_logging()
    logger.info("=" * 80)
    logger.info("  rush Session Started")
    logger.info(f"  Timestamp: {datetime.datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    logger.info("=" * 80)
    try:
        config = config_handler.load_configuration(DEFAULT_CONFIG_DIR, USER_DIR)
        ui_manager = UIManager(config)
        ui_manager.create_session(
            get_config_value(config, 'paths.history_file', '~/.rush_history'),
            dedupe=get_config_value(config, 'behavior.dedupe_history', True),
        )
        engine = build_engine(config, ui_manager)
        repl(engine, ui_manager, exit_on_interrupt=get_config_value(config, 'behavior.exit_on_interrupt', True))
    except FileNotFoundError as e:
        print(f"\nFATAL STARTUP ERROR: {e}", file=sys.stderr)
        print(f"Please ensure '{DEFAULT_CONFIG_DIR}/default_config.json' exists and is valid JSON.", file=sys.stderr)
        logger.critical(f"rush halting due to fatal configuration error: {e}")
        return 1
    finally:
        logger.info("=" * 80)
        logger.info("  rush Session Ended")
        logger.info(f"  Timestamp: {datetime.datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        logger.info("=" * 80)
        logging.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(run_shell())
