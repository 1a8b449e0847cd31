import io
import os

import pytest

from minishell.builtins import (
    ShellExit,
    ShellState,
    cd,
    echo,
    env,
    exit_builtin,
    export,
    parse_int,
    pwd,
    run_builtin,
    unset,
    validate_exit_argument,
    validate_identifier,
)
from minishell.environment import Environment


def make_state(*entries):
    return ShellState(
        env=Environment.from_strings(entries),
        stdout=io.StringIO(),
        stderr=io.StringIO(),
    )


def test_echo_without_arguments_prints_newline():
    state = make_state()
    assert echo(state, ["echo"]) == 0
    assert state.stdout.getvalue() == "\n"


def test_echo_joins_arguments():
    state = make_state()
    assert echo(state, ["echo", "hello", "world"]) == 0
    assert state.stdout.getvalue() == "hello world\n"


def test_echo_dash_n_drops_newline():
    state = make_state()
    echo(state, ["echo", "-n", "hello", "world"])
    assert state.stdout.getvalue() == "hello world"


def test_echo_only_exact_dash_n_is_an_option():
    state = make_state()
    echo(state, ["echo", "-nn", "x"])
    assert state.stdout.getvalue() == "-nn x\n"


def test_echo_dash_n_alone_prints_nothing():
    state = make_state()
    echo(state, ["echo", "-n"])
    assert state.stdout.getvalue() == ""


def test_cd_changes_directory_and_updates_pwd(tmp_path, monkeypatch):
    start = tmp_path / "start"
    target = tmp_path / "target"
    start.mkdir()
    target.mkdir()
    monkeypatch.chdir(start)
    before = os.getcwd()
    state = make_state("PWD=old", "OLDPWD=older")
    assert cd(state, ["cd", str(target)]) == 0
    assert os.path.samefile(os.getcwd(), target)
    assert state.env.get("PWD") == os.getcwd()
    assert state.env.get("OLDPWD") == before


def test_cd_without_argument_goes_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.chdir(tmp_path)
    state = make_state(f"HOME={home}")
    assert cd(state, ["cd"]) == 0
    assert os.path.samefile(os.getcwd(), home)


def test_cd_without_home_fails(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    state = make_state()
    assert cd(state, ["cd"]) == 1
    assert state.stderr.getvalue() == "cd: HOME not set\n"
    assert os.path.samefile(os.getcwd(), tmp_path)


def test_cd_missing_directory_fails(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    missing = str(tmp_path / "nope")
    state = make_state("PWD=kept")
    assert cd(state, ["cd", missing]) == 1
    assert state.stderr.getvalue() == f"cd: {missing}: No such file or directory\n"
    assert state.env.get("PWD") == "kept"


def test_cd_too_many_arguments(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    state = make_state()
    assert cd(state, ["cd", "a", "b"]) == 1
    assert state.stderr.getvalue() == "cd: too many arguments\n"


def test_pwd_prints_current_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    state = make_state()
    assert pwd(state, ["pwd"]) == 0
    assert state.stdout.getvalue() == os.getcwd() + "\n"


def test_export_without_arguments_lists_all():
    state = make_state("A=1", "B=two")
    assert export(state, ["export"]) == 0
    assert state.stdout.getvalue() == "declare -x A=1\ndeclare -x B=two\n"


def test_export_adds_variable():
    state = make_state("A=1")
    assert export(state, ["export", "NEW_VAR=some value"]) == 0
    assert state.env.get("NEW_VAR") == "some value"
    assert state.env.to_strings() == ["A=1", "NEW_VAR=some value"]


def test_export_updates_existing_variable():
    state = make_state("A=1")
    export(state, ["export", "A=changed"])
    assert state.env.to_strings() == ["A=changed"]


def test_export_without_equals_changes_nothing():
    state = make_state("A=1")
    assert export(state, ["export", "B"]) == 0
    assert state.env.to_strings() == ["A=1"]


@pytest.mark.parametrize("arg", ["1abc=x", "=x", "a-b=x"])
def test_export_rejects_invalid_identifier(arg):
    state = make_state("A=1")
    assert export(state, ["export", arg]) == 1
    assert state.stderr.getvalue() == f"export: {arg} : not a valid identifier\n"
    assert state.env.to_strings() == ["A=1"]


@pytest.mark.parametrize("name", ["", "1a", "a-b", "a b"])
def test_validate_identifier_rejects(name):
    with pytest.raises(ValueError):
        validate_identifier(name)


def test_validate_identifier_accepts_underscore_and_digits():
    assert validate_identifier("_a1") is None


def test_unset_removes_variables():
    state = make_state("A=1", "B=2", "C=3")
    assert unset(state, ["unset", "A", "C"]) == 0
    assert state.env.to_strings() == ["B=2"]


def test_unset_without_arguments_keeps_everything():
    state = make_state("A=1")
    assert unset(state, ["unset"]) == 0
    assert len(state.env) == 1


def test_env_prints_variables():
    state = make_state("A=1", "B=two")
    assert env(state, ["env"]) == 0
    assert state.stdout.getvalue() == "A=1\nB=two\n"


def test_env_rejects_arguments():
    state = make_state("A=1")
    assert env(state, ["env", "x"]) == 1
    assert state.stdout.getvalue() == "env: too many arguments\n"


def test_exit_without_argument_exits_zero():
    state = make_state()
    with pytest.raises(ShellExit) as info:
        exit_builtin(state, ["exit"])
    assert info.value.status == 0
    assert state.stdout.getvalue() == "exit\n"


def test_exit_with_number():
    state = make_state()
    with pytest.raises(ShellExit) as info:
        exit_builtin(state, ["exit", "42"])
    assert info.value.status == 42


def test_exit_negative_wraps_to_byte():
    with pytest.raises(ShellExit) as info:
        exit_builtin(make_state(), ["exit", "-1"])
    assert info.value.status == 255


def test_exit_non_numeric_exits_two():
    state = make_state()
    with pytest.raises(ShellExit) as info:
        exit_builtin(state, ["exit", "abc"])
    assert info.value.status == 2
    assert state.stderr.getvalue() == "exit: abc: numeric argument required\n"


def test_exit_too_many_arguments_does_not_exit():
    state = make_state()
    assert exit_builtin(state, ["exit", "1", "2"]) == 1
    assert state.stdout.getvalue() == "exit\n"
    assert state.stderr.getvalue() == "exit: too many arguments\n"


def test_validate_exit_argument_messages():
    with pytest.raises(ValueError, match="exit: 12a : numeric argument required"):
        validate_exit_argument("12a")
    with pytest.raises(ValueError, match="exit: x1: numeric argument required"):
        validate_exit_argument("x1")
    assert validate_exit_argument("+7") is None
    assert validate_exit_argument(None) is None


@pytest.mark.parametrize(
    "text, expected",
    [("  -13", -13), ("+7x", 7), ("abc", 0), ("", 0), ("2147483647", 2147483647)],
)
def test_parse_int(text, expected):
    assert parse_int(text) == expected


def test_run_builtin_unknown_command():
    state = make_state()
    assert run_builtin(state, ["frobnicate"]) == 127
    assert state.stderr.getvalue() == "command not found: frobnicate\n"


def test_run_builtin_empty_args():
    assert run_builtin(make_state(), []) == 0


def test_run_builtin_dispatches_by_prefix():
    state = make_state()
    assert run_builtin(state, ["echoX", "hi"]) == 0
    assert state.stdout.getvalue() == "hi\n"


def test_run_builtin_runs_env():
    state = make_state("A=1")
    assert run_builtin(state, ["env"]) == 0
    assert state.stdout.getvalue() == "A=1\n"