import pytest

from minishell.environment import Environment
from minishell.expansion import AmbiguousRedirectError
from minishell.parser import (
    Command,
    ExecKind,
    append_mode,
    build_command,
    exec_kind,
    parse_input,
    split_commands,
)
from minishell.syntax import ShellSyntaxError, UnclosedQuotesError
from minishell.tokens import tokenize


@pytest.fixture
def env():
    return Environment.from_strings(["HOME=/home/user", "WORDS=a b"])


def test_split_without_pipe_keeps_line():
    assert split_commands("  ls -l") == ["  ls -l"]


def test_split_at_pipe():
    assert split_commands("ls | wc") == ["ls ", "wc"]


def test_split_ignores_quoted_pipe():
    assert split_commands('echo "a|b" | cat') == ['echo "a|b" ', "cat"]


def test_split_pieces_rejoin_to_line():
    line = "a | b | c"
    pieces = split_commands(line)
    assert len(pieces) == 3
    assert "|".join(pieces).replace(" ", "") == line.replace(" ", "")


@pytest.mark.parametrize("name", ["cd", "echo", "env", "exit", "export", "pwd", "unset"])
def test_builtin_names(name):
    assert exec_kind(name) is ExecKind.BUILTIN


@pytest.mark.parametrize("name", ["ls", "echoo", "ech", ""])
def test_binary_names(name):
    assert exec_kind(name) is ExecKind.BINARY


def test_append_mode_uses_last_output():
    assert append_mode(tokenize("cat > a >> b")) is True
    assert append_mode(tokenize("cat >> a > b")) is False
    assert append_mode(tokenize("cat")) is False


def test_build_command_redirections():
    command = build_command(tokenize("cat < in > out"), 0, 1)
    assert command == Command(
        kind=ExecKind.BINARY,
        args=["cat"],
        inputs=["in"],
        outputs=["out"],
    )


def test_build_command_pipe_flags():
    tokens = tokenize("wc -l")
    assert build_command(tokens, 0, 2).pipe_out is True
    assert build_command(tokens, 0, 2).pipe_in is False
    middle = build_command(tokens, 1, 3)
    assert (middle.pipe_in, middle.pipe_out) == (True, True)
    last = build_command(tokens, 2, 3)
    assert (last.pipe_in, last.pipe_out) == (True, False)


def test_build_command_empty_raises():
    with pytest.raises(ValueError):
        build_command([], 0, 1)


def test_kind_comes_from_first_token():
    command = build_command(tokenize("> out echo hi"), 0, 1)
    assert command.kind is ExecKind.BINARY
    assert command.args == ["echo", "hi"]


def test_parse_pipeline(env):
    commands = parse_input("echo $HOME | wc -l", env, 0)
    assert [c.args for c in commands] == [["echo", "/home/user"], ["wc", "-l"]]
    assert commands[0].kind is ExecKind.BUILTIN
    assert commands[1].kind is ExecKind.BINARY
    assert commands[0].pipe_out and commands[1].pipe_in


def test_parse_removes_quotes(env):
    (command,) = parse_input("echo '$HOME' \"$HOME\"", env, 0)
    assert command.args == ["echo", "$HOME", "/home/user"]


def test_parse_heredoc(env):
    (command,) = parse_input("cat << EOF", env, 0)
    assert command.heredoc_limiters == ["EOF"]
    assert command.args == ["cat"]


def test_parse_exit_status(env):
    (command,) = parse_input("echo $?", env, 3)
    assert command.args == ["echo", "3"]


def test_parse_syntax_error(env):
    with pytest.raises(ShellSyntaxError):
        parse_input("| ls", env, 0)


def test_parse_unclosed_quotes(env):
    with pytest.raises(UnclosedQuotesError):
        parse_input("echo 'a", env, 0)


def test_parse_ambiguous(env):
    with pytest.raises(AmbiguousRedirectError):
        parse_input("cat > $WORDS", env, 0)