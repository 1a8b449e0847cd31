"""Running parsed commands: redirections, pipelines, heredocs and programs."""

from __future__ import annotations

import copy
import io
import os
import subprocess
import tempfile
from collections.abc import Callable, Iterable, Sequence
from typing import IO, Union

from minishell.builtins import ShellExit, ShellState, run_builtin
from minishell.expansion import AmbiguousRedirectError, expand_variable
from minishell.parser import Command, ExecKind

PARENT_BUILTINS = ("cd", "exit", "export", "unset")

_Result = Union[int, "subprocess.Popen[bytes]"]
LineReader = Callable[[str], Union[str, None]]


class CommandError(Exception):
    """A command could not be started or redirected."""

    def __init__(self, name: str, reason: str, status: int) -> None:
        self.name = name
        self.reason = reason
        self.status = status
        super().__init__(f"{name}: {reason}")


def is_parent_builtin(name: str | None) -> bool:
    """Tell whether a builtin must run in the shell itself to have effect."""
    return name in PARENT_BUILTINS


def find_executable(name: str, path: str | None) -> str | None:
    """Return the first ``dir/name`` on ``path`` that is executable, or None."""
    if path is None:
        return None
    for directory in path.split(":"):
        if not directory:
            continue
        candidate = f"{directory}/{name}"
        if os.access(candidate, os.F_OK | os.X_OK):
            return candidate
    return None


def resolve_program(name: str, path: str | None) -> str:
    """Find the file to run for ``name``.

    A name holding a slash is used as given; otherwise ``path`` is
    searched and the bare name is the fallback. Raises CommandError with
    the shell's message and status when the file cannot be run.
    """
    if "/" in name:
        program = name
    else:
        program = find_executable(name, path) or name
    if not os.access(program, os.F_OK):
        raise CommandError(name, "No such file or directory", 127)
    if os.path.isdir(program):
        raise CommandError(name, "Is a directory", 126)
    if not os.access(program, os.X_OK):
        raise CommandError(name, "Permission denied", 126)
    return program


def open_last_infile(paths: Sequence[str]) -> IO[bytes]:
    """Open every input file in turn and return the last one, open for reading."""
    if not paths:
        raise ValueError("no input files given")
    current: IO[bytes] | None = None
    for path in paths:
        if current is not None:
            current.close()
        try:
            current = open(path, "rb")
        except OSError:
            raise CommandError(path, "No such file or directory", 1) from None
    assert current is not None
    return current


def open_last_outfile(paths: Sequence[str], append: bool) -> IO[bytes]:
    """Create or open every output file in turn and return the last one."""
    if not paths:
        raise ValueError("no output files given")
    flags = os.O_WRONLY | os.O_CREAT | (os.O_APPEND if append else os.O_TRUNC)
    current: IO[bytes] | None = None
    for path in paths:
        if current is not None:
            current.close()
        try:
            fd = os.open(path, flags, 0o644)
        except OSError:
            raise CommandError(path, "cannot open output", 1) from None
        current = os.fdopen(fd, "ab" if append else "wb")
    assert current is not None
    return current


def expand_heredoc_line(line: str, state: ShellState) -> str:
    """Expand every ``$`` reference of a heredoc line; quotes are not special.

    Raises AmbiguousRedirectError when a variable holds more than one word.
    """
    i = 0
    while i < len(line):
        if line[i] == "$":
            line, i = expand_variable(line, i, state.env, state.exit_status, False)
            if "$" not in line:
                break
            continue
        i += 1
    return line


def _read_line(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def read_heredoc(
    limiters: Iterable[str],
    state: ShellState,
    read_line: LineReader | None = None,
) -> str:
    """Collect the body of a heredoc.

    One line is read for each limiter in turn; reading stops at end of
    input or at a line equal to its limiter. Kept lines are expanded and
    end with a newline.
    """
    reader = read_line or _read_line
    lines: list[str] = []
    for limiter in limiters:
        line = reader("> ")
        if line is None or line == limiter:
            break
        lines.append(expand_heredoc_line(line, state) + "\n")
    return "".join(lines)


def _spool(data: bytes) -> IO[bytes]:
    spool = tempfile.TemporaryFile()
    spool.write(data)
    spool.seek(0)
    return spool


def _run_child_builtin(state: ShellState, args: Sequence[str]) -> tuple[int, str]:
    """Run a builtin as a child would: its changes do not reach the shell."""
    out = io.StringIO()
    child = ShellState(
        env=copy.deepcopy(state.env),
        exit_status=state.exit_status,
        stdout=out,
        stderr=state.stderr,
    )
    try:
        cwd: str | None = os.getcwd()
    except OSError:
        cwd = None
    try:
        status = run_builtin(child, args)
    except ShellExit as exc:
        status = exc.status
    finally:
        if cwd is not None:
            os.chdir(cwd)
    return status, out.getvalue()


def _finish_builtin(
    state: ShellState, cmd: Command, stdout_file: IO[bytes] | None
) -> tuple[_Result, IO[bytes] | None]:
    status, output = _run_child_builtin(state, cmd.args)
    if stdout_file is not None:
        stdout_file.write(output.encode())
        return status, None
    if cmd.pipe_out:
        return status, _spool(output.encode())
    state.stdout.write(output)
    return status, None


def _spawn_binary(
    state: ShellState,
    cmd: Command,
    stdin: IO[bytes] | int | None,
    stdout_file: IO[bytes] | None,
) -> tuple[_Result, IO[bytes] | None]:
    if not cmd.args:
        return 0, None
    try:
        program = resolve_program(cmd.args[0], os.environ.get("PATH"))
    except CommandError as exc:
        state.stderr.write(f"{exc}\n")
        return exc.status, None
    if stdout_file is not None:
        stdout: IO[bytes] | int | None = stdout_file
    else:
        stdout = subprocess.PIPE if cmd.pipe_out else None
    try:
        state.stdout.flush()
    except (OSError, ValueError):
        pass
    try:
        proc = subprocess.Popen(
            list(cmd.args),
            executable=os.path.abspath(program),
            stdin=stdin,
            stdout=stdout,
            env=dict(state.env),
        )
    except OSError:
        state.stderr.write(f"{cmd.args[0]}: command not found\n")
        return 127, None
    return proc, proc.stdout if stdout is subprocess.PIPE else None


def _start_stage(
    state: ShellState,
    cmd: Command,
    heredoc: str | None,
    upstream: IO[bytes] | None,
) -> tuple[_Result, IO[bytes] | None]:
    owned_stdin: IO[bytes] | None = None
    stdout_file: IO[bytes] | None = None
    stdin: IO[bytes] | int | None = None
    try:
        try:
            if heredoc is not None:
                owned_stdin = stdin = _spool(heredoc.encode())
            elif cmd.inputs:
                owned_stdin = stdin = open_last_infile(cmd.inputs)
            elif cmd.pipe_in:
                stdin = upstream if upstream is not None else subprocess.DEVNULL
            if cmd.outputs:
                stdout_file = open_last_outfile(cmd.outputs, cmd.append)
        except CommandError as exc:
            state.stderr.write(f"{exc}\n")
            return exc.status, None
        if cmd.kind is ExecKind.BUILTIN:
            return _finish_builtin(state, cmd, stdout_file)
        return _spawn_binary(state, cmd, stdin, stdout_file)
    finally:
        for handle in (owned_stdin, stdout_file, upstream):
            if handle is not None:
                handle.close()


def _collect(results: Iterable[_Result]) -> int:
    status = 0
    for result in results:
        if isinstance(result, int):
            status = result
        else:
            code = result.wait()
            status = code if code >= 0 else 128 - code
    return status


def execute(state: ShellState, commands: Sequence[Command]) -> None:
    """Run a pipeline of commands and record its exit status in ``state``.

    A lone cd, exit, export or unset runs in the shell itself; everything
    else runs as if in a child. ShellExit from a lone ``exit`` propagates.
    """
    commands = list(commands)
    results: list[_Result] = []
    upstream: IO[bytes] | None = None
    try:
        for cmd in commands:
            heredoc: str | None = None
            if cmd.heredoc_limiters:
                try:
                    heredoc = read_heredoc(cmd.heredoc_limiters, state)
                except AmbiguousRedirectError as exc:
                    state.stdout.write(f"{exc}\n")
                    for result in results:
                        if not isinstance(result, int):
                            result.wait()
                    return
            if (
                len(commands) == 1
                and cmd.kind is ExecKind.BUILTIN
                and cmd.args
                and is_parent_builtin(cmd.args[0])
            ):
                state.exit_status = run_builtin(state, cmd.args)
                return
            result, upstream = _start_stage(state, cmd, heredoc, upstream)
            results.append(result)
    finally:
        if upstream is not None:
            upstream.close()
    state.exit_status = _collect(results)