"""Syntax checks run on a whole input line before it is parsed."""

from __future__ import annotations

SPACES = " \t\n\v\r\f"


class ShellSyntaxError(ValueError):
    """An unexpected token was found in the input."""

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"syntax error near unexpected token `{token}'")


class UnclosedQuotesError(ValueError):
    """A quote in the input is never closed."""

    def __init__(self) -> None:
        super().__init__("Error: quotes are not closed!")


def _skip_spaces(text: str) -> str:
    return text.lstrip(SPACES)


def redirection_at(text: str) -> str | None:
    """Name the redirection operator at the start of ``text``.

    An empty text names ``newline``; anything else that is not an
    operator gives None.
    """
    if not text:
        return "newline"
    for operator in (">>", ">", "<<", "<"):
        if text.startswith(operator):
            return operator
    return None


def _check_after_redirection(text: str) -> None:
    rest = _skip_spaces(text)
    if rest.startswith("|"):
        raise ShellSyntaxError("|")
    redirection = redirection_at(rest)
    if redirection is not None:
        raise ShellSyntaxError(redirection)


def _check_after_pipe(text: str) -> None:
    rest = _skip_spaces(text)
    if rest.startswith("|"):
        raise ShellSyntaxError("|")
    if not rest:
        raise ShellSyntaxError("newline")


def check_for_unexpected_token(text: str) -> None:
    """Raise ShellSyntaxError at a misplaced pipe or redirection."""
    if text.startswith("|"):
        raise ShellSyntaxError("|")
    in_single = in_double = False
    i = 0
    while i < len(text):
        while i < len(text) and text[i] in SPACES:
            i += 1
        if i >= len(text):
            break
        ch = text[i]
        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        if not in_single and not in_double:
            if ch == "|":
                _check_after_pipe(text[i + 1:])
            if ch in "<>":
                redirection = redirection_at(text[i:])
                if redirection is not None:
                    _check_after_redirection(text[i + len(redirection):])
        i += 1


def check_for_unclosed_quotes(text: str) -> None:
    """Raise UnclosedQuotesError if a single or double quote is left open."""
    singles = doubles = 0
    for ch in text:
        if ch == "'" and doubles % 2 == 0:
            singles += 1
        elif ch == '"' and singles % 2 == 0:
            doubles += 1
    if singles % 2 or doubles % 2:
        raise UnclosedQuotesError()


def validate_input(text: str) -> str:
    """Check a whole input line and return it without leading whitespace."""
    if not text:
        return text
    stripped = _skip_spaces(text)
    check_for_unexpected_token(stripped)
    check_for_unclosed_quotes(stripped)
    return stripped