# rush/chain_parser.py

import logging
from typing import List, Tuple

logger = logging.getLogger(__name__)

CHAIN_SEPARATOR = "&&"


def split_chain(line: str) -> List[str]:
    """
    Splits an input line into command segments on the chain separator.

    Each piece is trimmed and empty pieces are dropped, so `a && && b &&`
    yields `['a', 'b']`.
    """
    segments = [piece.strip() for piece in line.split(CHAIN_SEPARATOR)]
    return [segment for segment in segments if segment]


def tokenize(segment: str) -> Tuple[str, ...]:
    """Splits a segment on runs of whitespace. No quoting or escaping."""
    return tuple(segment.split())


def parse_line(line: str) -> List[Tuple[str, ...]]:
    """Tokenizes every segment of a line."""
    chain = [tokenize(segment) for segment in split_chain(line)]
    logger.debug(f"Parsed '{line}' into {len(chain)} segment(s): {chain}")
    return chain
