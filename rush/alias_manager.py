# rush/alias_manager.py

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Dict, Iterator, Sequence, Tuple

logger = logging.getLogger(__name__)


class AliasTable(Mapping):
    """
    Read-only mapping of alias name to expansion string (e.g. ll -> ls -l -a).

    Built once at startup and never modified afterwards. Only the first token
    of a segment is ever looked up, and an expansion is applied a single time:
    tokens it produces are not looked up again.
    """
    def __init__(self, aliases: Dict[str, str] = None):
        self._aliases = MappingProxyType(dict(aliases or {}))
        logger.info(f"AliasTable built with {len(self._aliases)} aliases.")

    def __getitem__(self, name: str) -> str:
        return self._aliases[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._aliases)

    def __len__(self) -> int:
        return len(self._aliases)

    def __repr__(self) -> str:
        return f"AliasTable({dict(self._aliases)!r})"

    def resolve(self, tokens: Sequence[str]) -> Tuple[str, ...]:
        """
        Expands the leading token if it is an alias.

        The expansion's own tokens come first, followed by the original
        arguments unchanged.
        """
        first_word = tokens[0]
        if first_word not in self._aliases:
            return tuple(tokens)

        expanded = tuple(self._aliases[first_word].split()) + tuple(tokens[1:])
        logger.debug(f"Alias '{first_word}' expanded: {tuple(tokens)} -> {expanded}")
        return expanded
