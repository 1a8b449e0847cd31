"""The read-parse-execute loop of the shell."""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping

from minishell.builtins import ShellExit, ShellState
from minishell.environment import Environment
from minishell.executor import execute
from minishell.expansion import AmbiguousRedirectError
from minishell.parser import parse_input
from minishell.signals import install_signal_handlers
from minishell.syntax import ShellSyntaxError, UnclosedQuotesError

try:
    import readline as _readline
except ImportError:  # pragma: no cover - platform without readline
    _readline = None  # type: ignore[assignment]

PROMPT = "minishit💩$: "
EXIT_MESSAGE = "exiting -> [minishit💩$]"
_SPACES = " \t\n\v\r\f"

LineReader = Callable[[str], "str | None"]


def has_content(text: str) -> bool:
    """Tell whether ``text`` holds anything besides whitespace."""
    return any(ch not in _SPACES for ch in text)


def init_state(environ: Mapping[str, str] | None = None) -> ShellState:
    """Create the shell state from a process environment."""
    source = os.environ if environ is None else environ
    env = Environment.from_strings(f"{name}={value}" for name, value in source.items())
    return ShellState(env=env)


def handle_line(state: ShellState, line: str) -> int:
    """Parse and run one input line; return the resulting exit status.

    ShellExit raised by the ``exit`` builtin propagates.
    """
    if not has_content(line):
        return state.exit_status
    try:
        commands = parse_input(line, state.env, state.exit_status)
    except ShellSyntaxError as exc:
        state.stderr.write(f"{exc}\n")
        state.exit_status = 2
        return state.exit_status
    except (UnclosedQuotesError, AmbiguousRedirectError) as exc:
        state.stdout.write(f"{exc}\n")
        return state.exit_status
    except ValueError:
        return state.exit_status
    execute(state, commands)
    return state.exit_status


def _interactive_read(prompt: str) -> str | None:
    try:
        line = input(prompt)
    except EOFError:
        return None
    if _readline is not None and has_content(line):
        _readline.add_history(line)
    return line


def run(state: ShellState, read_line: LineReader | None = None) -> int:
    """Read and run lines until end of input or ``exit``; return the status."""
    reader = read_line or _interactive_read
    while True:
        line = reader(PROMPT)
        if line is None:
            state.stdout.write(f"{EXIT_MESSAGE}\n")
            return state.exit_status
        try:
            handle_line(state, line)
        except ShellExit as exc:
            return exc.status


def main(argv: list[str] | None = None) -> int:
    """Start the interactive shell and return its exit status."""
    install_signal_handlers()
    state = init_state()
    return run(state)