# tests/test_chain_parser.py
import pytest

from rush.chain_parser import parse_line, split_chain, tokenize

split_test_cases = [
    ("ls", ["ls"]),
    ("cd /tmp && ls", ["cd /tmp", "ls"]),
    ("a&&b", ["a", "b"]),
    ("a && && b", ["a", "b"]),
    ("a && b &&", ["a", "b"]),
    ("&& a", ["a"]),
    ("  echo   hi  &&   pwd ", ["echo   hi", "pwd"]),
    # `&` on its own is not a separator
    ("a & b", ["a & b"]),
]

@pytest.mark.parametrize("line, expected", split_test_cases)
def test_split_chain(line, expected):
    assert split_chain(line) == expected

def test_split_chain_only_separators():
    assert split_chain("&& &&") == []

@pytest.mark.parametrize("segment, expected", [
    ("ls -l", ("ls", "-l")),
    ("echo   a\tb", ("echo", "a", "b")),
    ("echo 'a b'", ("echo", "'a", "b'")),
])
def test_tokenize_splits_on_whitespace_runs(segment, expected):
    assert tokenize(segment) == expected

def test_parse_line():
    assert parse_line("cd src && ls -a && make test") == [
        ("cd", "src"),
        ("ls", "-a"),
        ("make", "test"),
    ]
