# rush/config_handler.py

import os
import sys
import json
import re
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

# --- Module-specific logger ---
logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "default_config.json"
USER_CONFIG_FILENAME = "user_config.json"

_ALIAS_NAME_PATTERN = re.compile(r'^\S+$')
_EXPORT_KEY_PATTERN = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')


@dataclass
class RcConfig:
    """The name->value mappings produced from an rc file."""
    aliases: Dict[str, str] = field(default_factory=dict)
    exports: Dict[str, str] = field(default_factory=dict)


_COMMENT_PATTERN = re.compile(r'//.*?$|/\*.*?\*/', re.DOTALL | re.MULTILINE)


def load_jsonc_file(filepath: str) -> Optional[Dict[str, Any]]:
    """
    Reads a rush settings file, allowing `//` and `/* */` comments.

    Returns the parsed settings, or None when the file is absent or broken.
    A broken file is also reported on stderr so the user can fix it.
    """
    if not os.path.exists(filepath):
        logger.info(f"No settings file at {filepath}")
        return None

    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            raw = f.read()
        return json.loads(_COMMENT_PATTERN.sub('', raw))
    except json.JSONDecodeError as e:
        logger.error(f"Settings file {filepath} is not valid JSON: {e}", exc_info=True)
        print(f"❌ rush: ignoring {filepath}: invalid JSON at line {e.lineno}, column {e.colno}.", file=sys.stderr)
        return None
    except IOError as e:
        logger.error(f"Settings file {filepath} is unreadable: {e}", exc_info=True)
        print(f"❌ rush: cannot read {filepath}: {e.strerror or e}", file=sys.stderr)
        return None


def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """ Helper function to recursively merge dictionaries. """
    merged = base.copy()
    for key, value in override.items():
        if isinstance(value, dict) and key in merged and isinstance(merged[key], dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_configuration(config_dir: str, user_config_dir: Optional[str] = None) -> Dict[str, Any]:
    """
    Loads the mandatory default configuration from `config_dir` and merges
    the optional `user_config.json` from `user_config_dir` (or `config_dir`
    when not given) on top of it.

    Raises:
        FileNotFoundError: If the default configuration is missing or unparsable.
    """
    default_config_path = os.path.join(config_dir, DEFAULT_CONFIG_FILENAME)
    user_config_path = os.path.join(user_config_dir or config_dir, USER_CONFIG_FILENAME)

    base_config = load_jsonc_file(default_config_path)
    if base_config is None:
        error_msg = f"CRITICAL ERROR: Default configuration file not found or failed to parse at '{default_config_path}'. rush cannot start."
        logger.critical(error_msg)
        raise FileNotFoundError(error_msg)
    logger.info(f"Successfully loaded base configuration from {default_config_path}")

    user_settings = load_jsonc_file(user_config_path)
    if user_settings:
        logger.info(f"Loaded and merged user configurations from {user_config_path}")
        return merge_configs(base_config, user_settings)

    logger.info(f"{user_config_path} not found or is invalid. No user configuration overrides applied.")
    return base_config


def get_config_value(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """Safely retrieves a value from a nested dict using a dot-separated path."""
    value = config
    for key in key_path.split('.'):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def parse_rc_lines(lines) -> RcConfig:
    """
    Parses `alias name=value` and `export KEY=value` directives.

    Blank lines and lines starting with '#' are ignored. Anything else that
    does not look like a directive is logged and skipped.
    """
    rc = RcConfig()
    for lineno, raw_line in enumerate(lines, start=1):
        line = raw_line.strip()
        if not line or line.startswith('#'):
            continue

        directive, _, rest = line.partition(' ')
        name, sep, value = rest.strip().partition('=')
        name = name.strip()
        value = _strip_quotes(value.strip())

        if directive == 'alias' and sep and _ALIAS_NAME_PATTERN.match(name):
            rc.aliases[name] = value
        elif directive == 'export' and sep and _EXPORT_KEY_PATTERN.match(name):
            rc.exports[name] = value
        else:
            logger.warning(f"Ignoring malformed rc line {lineno}: '{line}'")
    return rc


def load_rc_file(filepath: str) -> RcConfig:
    """Reads an rc file. A missing file yields empty mappings."""
    expanded_path = os.path.expanduser(filepath)
    if not os.path.exists(expanded_path):
        logger.info(f"No rc file at {expanded_path}; starting without aliases or exports.")
        return RcConfig()

    try:
        with open(expanded_path, 'r', encoding='utf-8') as f:
            rc = parse_rc_lines(f)
    except (IOError, UnicodeDecodeError) as e:
        logger.error(f"Error reading rc file {expanded_path}: {e}", exc_info=True)
        print(f"⚠️ Could not read {expanded_path}: {e}", file=sys.stderr)
        return RcConfig()

    logger.info(f"Loaded {len(rc.aliases)} aliases and {len(rc.exports)} exports from {expanded_path}")
    return rc
