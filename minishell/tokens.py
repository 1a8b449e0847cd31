"""Splitting one command of a pipeline into typed tokens."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum, auto

SPACES = " \t\n\v\r\f"
_QUOTES = "'\""

_REDIRECTION_OPERATORS = (
    ("<<", "HEREDOC"),
    (">>", "REDIR_APPEND"),
    ("<", "REDIR_IN"),
    (">", "REDIR_OUT"),
)


class TokenType(Enum):
    """Role of a token within a command."""

    EXEC = auto()
    REDIR_IN = auto()
    REDIR_OUT = auto()
    REDIR_APPEND = auto()
    HEREDOC = auto()
    ARG = auto()


@dataclass
class Token:
    """A word of a command together with its role."""

    value: str
    type: TokenType


def _scan_word(command: str, i: int) -> int:
    """Return the index just past the word starting at ``i``."""
    quote = ""
    while i < len(command):
        ch = command[i]
        if not quote and ch in SPACES:
            break
        if ch in _QUOTES and not quote:
            quote = ch
        elif quote and ch == quote:
            quote = ""
        if not quote and ch in "<>":
            break
        i += 1
    return i


def _redirection(command: str, i: int) -> tuple[TokenType, int]:
    for operator, name in _REDIRECTION_OPERATORS:
        if command.startswith(operator, i):
            return TokenType[name], i + len(operator)
    return TokenType.ARG, i


def tokenize(command: str) -> list[Token]:
    """Split a single command into tokens; the first argument becomes EXEC."""
    tokens: list[Token] = []
    i = 0
    length = len(command)
    while True:
        while i < length and command[i] in SPACES:
            i += 1
        if i >= length:
            break
        if command[i] in "<>":
            kind, i = _redirection(command, i)
            while i < length and (command[i] in "<>" or command[i] in SPACES):
                i += 1
        else:
            kind = TokenType.ARG
        start = i
        i = _scan_word(command, i)
        tokens.append(Token(command[start:i], kind))
    for token in tokens:
        if token.type is TokenType.ARG:
            token.type = TokenType.EXEC
            break
    return tokens


def count_tokens(tokens: Iterable[Token], token_type: TokenType) -> int:
    """Count the tokens of the given type."""
    return sum(1 for token in tokens if token.type is token_type)