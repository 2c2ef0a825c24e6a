# assertcmd

Run command-line programs in tests and assert on their exit code, stdout and
stderr.

`assertcmd` runs a program, captures its exit code and both output streams,
and lets you check them with readable failure messages. A failed check reports
the command, the stdin it was given, the exit code and both streams. Long
output is shortened: from 80 lines on, only the first 20 and last 40 lines are
shown; from 8192 bytes on, only the first and last 2048 bytes.

## Running a command

```python
from assertcmd.cmd import Command

Command.from_argv(["echo", "hello"]).assert_().success().stdout("hello\n")
```

`Command(program)` or `Command.from_argv([program, *args])` creates a command.
Builder methods return the command, so calls can be chained:

- `arg` / `args` add arguments
- `env` / `envs` / `env_remove` / `env_clear` control the environment
- `current_dir` sets the working directory
- `write_stdin` feeds a `str` (encoded as UTF-8) or bytes to stdin;
  `pipe_stdin` feeds the content of a file
- `timeout` takes seconds or a `datetime.timedelta`; a program still running
  after it is killed

`get_program`, `get_args`, `get_envs` and `get_current_dir` report what was
configured. `get_envs` lists explicit settings sorted by name, with `None` for
removed variables.

Running the command:

- `output()` returns an `assertcmd.output.Output` with `code`, `stdout` and
  `stderr`; `code` is `None` when the program was ended by a signal (as after
  a timeout). It raises `OSError` if the program cannot be started.
- `ok()` returns the output on success and raises `OutputError` otherwise.
- `unwrap()` returns the output on success and raises `AssertionError` with a
  full report otherwise.
- `unwrap_err()` returns the `OutputError` and raises `AssertionError` if the
  program succeeded.
- `assert_()` returns an `Assert` to check the result.

```python
from assertcmd.cmd import Command

(
    Command.from_argv(["my-tool"])
    .arg("-A")
    .env("stdout", "hello")
    .env("exit", "42")
    .write_stdin("42")
    .assert_()
    .failure()
    .code(42)
    .stdout("hello\n")
)
```

## Assertions

`Assert` (in `assertcmd.assertion`) has `success`, `failure`, `interrupted`,
`code`, `stdout`, `stderr` and `get_output`. Each returns the same `Assert`
and raises `AssertionError` with a full report when the check fails.

`code` takes an exit code, an iterable of allowed codes, or a predicate:

```python
from assertcmd import predicates

assertion.code(42)
assertion.code([2, 42])
assertion.code(predicates.eq(42))
```

`stdout` and `stderr` take `bytes`, a list of byte values, a `str`, or a
predicate. A `str` is compared with the output decoded as UTF-8 and a
mismatch is shown as a diff. Text predicates (`predicates.diff`, or `eq` of a
string) are applied to the decoded output; other predicates see the raw bytes.

```python
assertion.stdout(b"hello\n")
assertion.stdout("hello\n")
assertion.stdout(predicates.diff("hello\n"))
assertion.stdout(predicates.function(lambda data: b"hello" in data, "contains_hello"))
```

Every check has a `try_` variant (`try_success`, `try_code`, `try_stdout`, ...)
that raises `AssertError` instead. The error carries `reason` (an
`AssertReason`) and `assertion`, the `Assert` that failed, so further checks
can be made on the same output.

`append_context(name, value)` adds a named value to failure reports:

```python
assertion.append_context("main", "no args").success()
```

Output captured some other way can be checked too:
`assertcmd.assertion.assert_output` accepts an `Output` or a
`subprocess.CompletedProcess`, and `assertcmd.output` has `ok`, `unwrap` and
`unwrap_err` functions for an `Output`.

## Predicates

`assertcmd.predicates` provides `eq`, `in_iter`, `diff`, `from_utf8` and
`function`. Each predicate has `eval(item)` and `find_case(expected, item)`;
the returned `Case` renders its explanation with `tree()`.

## Colour

Failure reports are plain text. Set `ASSERTCMD_COLOR` to `1`, `true`, `yes`,
`on` or `always` to colour the keys and values.

## Finding built binaries

`assertcmd.cargo` looks up binaries of a Cargo build. `cargo_bin(name)` uses
the `CARGO_BIN_EXE_<name>` variable if set, otherwise the directory of the
running Python interpreter (its parent, if that directory is named `deps`).
`Command.cargo_bin(name)` builds a command for that binary, run through the
runner in `CARGO_TARGET_<TRIPLET>_RUNNER` when set, where the triplet comes
from `current_target()`. A missing binary raises `CargoError`.

The package does not build anything itself; the binaries must already exist.

## The fixture program

The package ships a small program for testing test helpers. It prints the
`stdout` and `stderr` environment variables, each followed by a newline, to
the matching streams, sleeps for `sleep` seconds if set, and exits with the
code in `exit` (an invalid `exit` value is reported on stderr with code 1):

```
stdout=hello exit=3 assertcmd-fixture
```

It can also be run as `python -m assertcmd.bin_fixture`.