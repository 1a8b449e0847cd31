"""Variable expansion and quote removal inside tokens."""

from __future__ import annotations

from collections.abc import Iterable

from minishell.environment import Environment
from minishell.tokens import SPACES, Token

_NAME_STOPS_UNQUOTED = "'<>|"


class AmbiguousRedirectError(ValueError):
    """An unquoted variable expanded to more than one word."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"${name}: ambiguous redirect")


def count_words(text: str | None) -> int:
    """Count the whitespace-separated words of ``text``; None has none."""
    if not text:
        return 0
    count = 0
    for current, following in zip(text, text[1:] + "\0"):
        if current not in SPACES and (following in SPACES or following == "\0"):
            count += 1
    return count


def env_name_length(text: str, in_quotes: bool) -> int:
    """Length of the variable name at the start of ``text``.

    The name ends at whitespace, a double quote or another ``$``; outside
    double quotes it also ends at a single quote or a redirection or pipe
    character.
    """
    length = 0
    for ch in text:
        if ch in SPACES or ch in '"$':
            break
        if not in_quotes and ch in _NAME_STOPS_UNQUOTED:
            break
        length += 1
    return length


def expand_variable(
    text: str,
    index: int,
    env: Environment,
    exit_status: int,
    in_quotes: bool,
) -> tuple[str, int]:
    """Replace the ``$`` reference at ``index`` with its value.

    Returns the new text and the index just past the inserted value.
    ``$?`` becomes the exit status. Raises AmbiguousRedirectError when an
    unquoted variable holds more than one word.
    """
    if text[index + 1:index + 2] == "?":
        value = str(exit_status)
        return text[:index] + value + text[index + 2:], index + len(value)
    length = env_name_length(text[index + 1:], in_quotes)
    name = text[index + 1:index + 1 + length]
    value = env.get(name)
    if count_words(value) > 1 and not in_quotes:
        raise AmbiguousRedirectError(name)
    value = value or ""
    return text[:index] + value + text[index + 1 + length:], index + len(value)


def expand_token(value: str, env: Environment, exit_status: int) -> str:
    """Expand every ``$`` reference of a token outside single quotes."""
    if "$" not in value:
        return value
    i = 0
    in_quotes = False
    while i < len(value):
        ch = value[i]
        if ch == "'":
            closing = value.find("'", i + 1)
            i = len(value) if closing == -1 else closing + 1
            continue
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "$":
            value, i = expand_variable(value, i, env, exit_status, in_quotes)
            if "$" not in value:
                break
            continue
        i += 1
    return value


def expand_tokens(tokens: Iterable[Token], env: Environment, exit_status: int) -> None:
    """Expand variables in the value of every token, in place."""
    for token in tokens:
        token.value = expand_token(token.value, env, exit_status)


def remove_quotes(value: str) -> str:
    """Drop each pair of enclosing quotes, keeping what they hold."""
    parts: list[str] = []
    i = 0
    while i < len(value):
        ch = value[i]
        if ch in "'\"":
            closing = value.find(ch, i + 1)
            if closing == -1:
                parts.append(value[i + 1:])
                break
            parts.append(value[i + 1:closing])
            i = closing + 1
        else:
            parts.append(ch)
            i += 1
    return "".join(parts)


def strip_quotes(tokens: Iterable[Token]) -> None:
    """Remove quotes from the value of every token, in place."""
    for token in tokens:
        token.value = remove_quotes(token.value)