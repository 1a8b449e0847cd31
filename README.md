# minishell

A small interactive shell for POSIX systems. It reads a line, checks its
syntax, splits it into a pipeline at unquoted `|`, expands variables, removes
quotes, and runs each command. A command is run either as a builtin or as an
external program.

## Installing

```
pip install .
```

## Running

```
minishell
```

The shell shows the prompt `minishit💩$: ` and reads one line at a time.
Lines that hold something other than whitespace are added to the readline
history.

- Ctrl-D at the prompt ends the shell. It prints `exiting -> [minishit💩$]`
  and exits with the status of the last pipeline.
- Ctrl-C prints a newline and redraws the prompt.
- Ctrl-\ is ignored.
- The terminal does not echo control characters such as `^C`.

## What it understands

- Pipelines: `ls -l | grep py | wc -l`.
- Input redirection `< file`. Output redirection `> file` (truncate) and
  `>> file` (append). When a command has several input files, each one is
  opened in turn and the last one is used. When it has several output files,
  every one is created and the last one is used. The last output operator
  decides whether the output is appended.
- Here-documents: `cat << END`. The shell reads one line for each `<<` of the
  command. Reading stops early at end of input or at a line equal to its
  limiter. `$` references in those lines are expanded, and quotes in them are
  not special. A here-document takes the place of any input file and of the
  pipe.
- Single and double quotes. Nothing is expanded inside single quotes. Quotes
  are removed after expansion.
- Variables: `$NAME`, and `$?` for the exit status of the last pipeline. A
  name matches the first variable whose name starts with it, so `$PA` expands
  to `PATH`'s value. An unknown variable expands to nothing. An unquoted
  variable whose value holds more than one word is rejected with
  `$NAME: ambiguous redirect`.

Invalid lines are rejected before anything runs:

- A line with an unclosed quote prints `Error: quotes are not closed!`.
- A pipe or redirection in the wrong place prints
  `syntax error near unexpected token ...`. Examples are a leading `|`, a `|`
  or redirection with nothing after it, and `> >`. A syntax error sets the
  exit status to 2.

## Builtins

| Command  | Effect |
|----------|--------|
| `echo`   | prints its arguments separated by spaces; a first argument of exactly `-n` drops the trailing newline |
| `cd`     | changes to the given directory, or to `$HOME` with no argument, and updates `PWD` and `OLDPWD`; more than one argument is an error |
| `pwd`    | prints the current directory |
| `export` | with `NAME=value` sets a variable; with no argument lists every variable as `declare -x NAME=value`; only the first argument is used, and an invalid name is an error |
| `unset`  | removes each named variable |
| `env`    | lists every variable as `NAME=value`; any argument is an error |
| `exit`   | leaves the shell with the given status (modulo 256), or 0; a non-numeric argument exits with 2; more than one argument prints an error and does not exit |

`cd`, `exit`, `export` and `unset` run in the shell itself when they are the
only command on the line, so their effects persist. Any builtin in a
pipeline runs on a copy of the shell's variables and directory. Its changes
are lost when it finishes, and its output goes to the next command or to its
redirection.

## External programs

A name containing `/` is run as given. Any other name is looked up in the
directories of the `PATH` that the shell was started with. A program gets
the shell's current variables as its environment.

## Exit statuses

- A command that cannot be found exits with 127.
- A command that is a directory or is not executable exits with 126.
- A redirection file that cannot be opened gives 1.
- A command killed by a signal reports 128 plus the signal number.
- The status of a pipeline is that of its last command.

## Using it from Python

`minishell.shell.init_state()` builds a `ShellState` from a mapping of
variables, or from the process environment when none is given.
`handle_line(state, line)` runs one line and returns its status.
`run(state, read_line)` loops over lines. It takes a function that is called
with the prompt and returns a line, or `None` at end of input. The parts are
also usable on their own: `minishell.parser.parse_input` turns a line into
`Command` objects, and `minishell.executor.execute` runs them.

## What it does not do

There is no wildcard (`*`) expansion, no `;`, `&&` or `||`, no backslash
escapes, no subshells and no job control.

## Running the tests

```
pip install .[test]
pytest
```