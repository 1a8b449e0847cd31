"""Turning an input line into a list of commands ready to run."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum, auto

from minishell.environment import Environment
from minishell.expansion import expand_tokens, strip_quotes
from minishell.syntax import validate_input
from minishell.tokens import SPACES, Token, TokenType, tokenize

BUILTIN_NAMES = ("cd", "echo", "env", "exit", "export", "pwd", "unset")


class ExecKind(Enum):
    """Whether a command is run by the shell itself or as a program."""

    BUILTIN = auto()
    BINARY = auto()


@dataclass
class Command:
    """One command of a pipeline with its redirections."""

    kind: ExecKind
    args: list[str] = field(default_factory=list)
    inputs: list[str] = field(default_factory=list)
    outputs: list[str] = field(default_factory=list)
    heredoc_limiters: list[str] = field(default_factory=list)
    append: bool = False
    pipe_in: bool = False
    pipe_out: bool = False


def _command_end(text: str, i: int) -> int:
    length = len(text)
    while i < length:
        ch = text[i]
        if ch in "'\"":
            i += 1
            while i < length and text[i] != ch:
                i += 1
            if i < length:
                i += 1
        elif ch == "|":
            break
        # The character right after a closing quote is stepped over too.
        i = min(i + 1, length)
    return i


def split_commands(text: str) -> list[str]:
    """Split an input line at the pipes that are not inside quotes."""
    if "|" not in text:
        return [text]
    commands: list[str] = []
    i = 0
    length = len(text)
    while i < length:
        while i < length and text[i] in SPACES:
            i += 1
        start = i
        i = _command_end(text, i)
        commands.append(text[start:i])
        if i < length and text[i] == "|":
            i += 1
    return commands


def exec_kind(name: str) -> ExecKind:
    """Tell whether ``name`` is exactly one of the shell's builtins."""
    return ExecKind.BUILTIN if name in BUILTIN_NAMES else ExecKind.BINARY


def append_mode(tokens: Sequence[Token]) -> bool:
    """Tell whether the last output redirection of a command appends."""
    for token in reversed(tokens):
        if token.type is TokenType.REDIR_APPEND:
            return True
        if token.type is TokenType.REDIR_OUT:
            return False
    return False


def _values(tokens: Sequence[Token], *types: TokenType) -> list[str]:
    return [token.value for token in tokens if token.type in types]


def build_command(tokens: Sequence[Token], index: int, count: int) -> Command:
    """Build the command at position ``index`` of a ``count``-long pipeline.

    The kind is decided by the first token of the command.
    """
    if not tokens:
        raise ValueError("empty command")
    return Command(
        kind=exec_kind(tokens[0].value),
        args=_values(tokens, TokenType.EXEC, TokenType.ARG),
        inputs=_values(tokens, TokenType.REDIR_IN),
        outputs=_values(tokens, TokenType.REDIR_OUT, TokenType.REDIR_APPEND),
        heredoc_limiters=_values(tokens, TokenType.HEREDOC),
        append=append_mode(tokens),
        pipe_in=index > 0,
        pipe_out=count > index + 1,
    )


def parse_input(text: str, env: Environment, exit_status: int) -> list[Command]:
    """Validate, split, expand and parse a whole input line.

    Raises ShellSyntaxError or UnclosedQuotesError for invalid input,
    AmbiguousRedirectError for an unquoted multi-word expansion, and
    ValueError when a command of the pipeline is empty.
    """
    validate_input(text)
    pieces = split_commands(text)
    commands: list[Command] = []
    for index, piece in enumerate(pieces):
        tokens = tokenize(piece)
        if not tokens:
            raise ValueError("empty command")
        expand_tokens(tokens, env, exit_status)
        strip_quotes(tokens)
        commands.append(build_command(tokens, index, len(pieces)))
    return commands