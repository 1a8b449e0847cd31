"""Commands that the shell runs itself instead of starting a program."""

from __future__ import annotations

import os
import string
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TextIO

from minishell.environment import Environment

_ATOI_SPACES = " \t\n\v\f\r"
_IDENT_START = string.ascii_letters + "_"
_IDENT_BODY = string.ascii_letters + string.digits + "_"


@dataclass
class ShellState:
    """What the shell keeps between commands."""

    env: Environment = field(default_factory=Environment)
    exit_status: int = 0
    stdout: TextIO = field(default_factory=lambda: sys.stdout)
    stderr: TextIO = field(default_factory=lambda: sys.stderr)


class ShellExit(Exception):
    """Raised by the ``exit`` builtin to end the shell with a status."""

    def __init__(self, status: int) -> None:
        self.status = status % 256
        super().__init__(f"exit {self.status}")


def parse_int(text: str) -> int:
    """Read a leading, optionally signed decimal integer as a 32-bit int.

    Leading whitespace is skipped and reading stops at the first
    character that is not a digit; no digits give 0.
    """
    rest = text.lstrip(_ATOI_SPACES)
    sign = 1
    if rest[:1] in ("-", "+"):
        if rest[0] == "-":
            sign = -1
        rest = rest[1:]
    digits = ""
    for ch in rest:
        if ch not in string.digits:
            break
        digits += ch
    value = sign * int(digits) if digits else 0
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value >= (1 << 31) else value


def validate_identifier(name: str) -> None:
    """Raise ValueError unless ``name`` is a valid variable name."""
    if not name or name[0] not in _IDENT_START:
        raise ValueError(f"not a valid identifier: {name!r}")
    if any(ch not in _IDENT_BODY for ch in name[1:]):
        raise ValueError(f"not a valid identifier: {name!r}")


def validate_exit_argument(arg: str | None) -> None:
    """Raise ValueError, with the shell's message, for a non-numeric argument."""
    if arg is None:
        return
    if not arg or (arg[0] not in string.digits and arg[0] not in "+-"):
        raise ValueError(f"exit: {arg}: numeric argument required")
    if any(ch not in string.digits for ch in arg[1:]):
        raise ValueError(f"exit: {arg} : numeric argument required")


def echo(state: ShellState, args: Sequence[str]) -> int:
    """Print the arguments separated by spaces; ``-n`` drops the newline."""
    if len(args) < 2:
        state.stdout.write("\n")
        return 0
    no_newline = args[1] == "-n"
    words = args[2:] if no_newline else args[1:]
    state.stdout.write(" ".join(words))
    if not no_newline:
        state.stdout.write("\n")
    return 0


def _current_dir() -> str:
    try:
        return os.getcwd()
    except OSError:
        return ""


def _update_pwd(env: Environment, old_pwd: str, new_pwd: str) -> None:
    for name, _ in env:
        if name.startswith("OLDPWD"):
            env.set(name, old_pwd)
        elif name.startswith("PWD"):
            env.set(name, new_pwd)


def cd(state: ShellState, args: Sequence[str]) -> int:
    """Change directory to the argument, or to HOME without one."""
    if len(args) > 2:
        state.stderr.write("cd: too many arguments\n")
        return 1
    old_pwd = _current_dir()
    if len(args) < 2:
        home = state.env.get("HOME")
        try:
            if home is None:
                raise FileNotFoundError("HOME")
            os.chdir(home)
        except OSError:
            state.stderr.write("cd: HOME not set\n")
            return 1
    else:
        try:
            os.chdir(args[1])
        except OSError:
            state.stderr.write(f"cd: {args[1]}: No such file or directory\n")
            return 1
    _update_pwd(state.env, old_pwd, _current_dir())
    return 0


def pwd(state: ShellState, args: Sequence[str]) -> int:
    """Print the current working directory."""
    try:
        cwd = os.getcwd()
    except OSError as exc:
        state.stderr.write(f"pwd: {exc.strerror}\n")
        return 1
    state.stdout.write(f"{cwd}\n")
    return 0


def export(state: ShellState, args: Sequence[str]) -> int:
    """Set a variable from ``NAME=value``, or list all variables."""
    if len(args) < 2:
        for name, value in state.env:
            state.stdout.write(f"declare -x {name}={value}\n")
        return 0
    arg = args[1]
    try:
        validate_identifier(arg.partition("=")[0])
    except ValueError:
        state.stderr.write(f"export: {arg} : not a valid identifier\n")
        return 1
    if "=" not in arg:
        return 0
    state.env.add(arg)
    return 0


def unset(state: ShellState, args: Sequence[str]) -> int:
    """Remove each named variable."""
    for name in args[1:]:
        state.env.remove(name)
    return 0


def env(state: ShellState, args: Sequence[str]) -> int:
    """Print every variable as ``NAME=value``."""
    if len(args) > 1:
        state.stdout.write("env: too many arguments\n")
        return 1
    for name, value in state.env:
        state.stdout.write(f"{name}={value}\n")
    return 0


def exit_builtin(state: ShellState, args: Sequence[str]) -> int:
    """End the shell by raising ShellExit.

    With too many arguments nothing ends and 1 is returned; a
    non-numeric argument ends the shell with status 2.
    """
    state.stdout.write("exit\n")
    if len(args) > 2:
        state.stderr.write("exit: too many arguments\n")
        return 1
    arg = args[1] if len(args) > 1 else None
    try:
        validate_exit_argument(arg)
    except ValueError as exc:
        state.stderr.write(f"{exc}\n")
        raise ShellExit(2) from None
    raise ShellExit(parse_int(arg) if arg is not None else 0)


_BUILTINS: tuple[tuple[str, Callable[[ShellState, Sequence[str]], int]], ...] = (
    ("echo", echo),
    ("cd", cd),
    ("pwd", pwd),
    ("export", export),
    ("unset", unset),
    ("env", env),
    ("exit", exit_builtin),
)


def run_builtin(state: ShellState, args: Sequence[str]) -> int:
    """Run the builtin whose name begins the first argument.

    Returns its status, or 127 when no builtin matches.
    """
    if not args:
        return 0
    for name, builtin in _BUILTINS:
        if args[0].startswith(name):
            return builtin(state, args)
    state.stderr.write(f"command not found: {args[0]}\n")
    return 127