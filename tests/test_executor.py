import os
import sys

import pytest

from minishell.executor import execute
from minishell.parser import Command, Pipe
from minishell.state import ShellState

PY = sys.executable
UPPER = "import sys; sys.stdout.write(sys.stdin.read().upper())"


def _out_fd(path):
    return os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o644)


@pytest.fixture
def state():
    return ShellState.from_environ()


def test_builtin_changes_shell_state(state):
    execute(Command(["export", "A=1"]), state)
    assert state.env["A"] == "1"
    assert state.last_status == 0


def test_builtin_honours_output_redirection(tmp_path, state):
    target = tmp_path / "out.txt"
    with Command(["echo", "hi"], out_fd=_out_fd(target)) as node:
        execute(node, state)
    assert target.read_text() == "hi\n"


def test_builtin_writes_to_stdout(state, capsys):
    execute(Command(["echo", "hello", "world"]), state)
    assert capsys.readouterr().out == "hello world\n"


def test_exit_builtin_stops_shell(state):
    execute(Command(["exit", "9"]), state)
    assert state.running is False
    assert state.last_status == 9


def test_external_exit_status(state):
    execute(Command([PY, "-c", "import sys; sys.exit(3)"]), state)
    assert state.last_status == 3


def test_external_output_redirection(tmp_path, state):
    target = tmp_path / "out.txt"
    with Command([PY, "-c", "print('abc')"], out_fd=_out_fd(target)) as node:
        execute(node, state)
    assert target.read_text() == "abc\n"
    assert state.last_status == 0


def test_external_input_redirection(tmp_path, state):
    source = tmp_path / "in.txt"
    source.write_text("data\n")
    target = tmp_path / "out.txt"
    node = Command(
        [PY, "-c", UPPER],
        in_fd=os.open(source, os.O_RDONLY),
        out_fd=_out_fd(target),
    )
    with node:
        execute(node, state)
    assert target.read_text() == "DATA\n"


def test_external_sees_shell_environment(tmp_path, state):
    state.env["FOO"] = "bar"
    target = tmp_path / "out.txt"
    node = Command(
        [PY, "-c", "import os; print(os.environ['FOO'])"], out_fd=_out_fd(target)
    )
    with node:
        execute(node, state)
    assert target.read_text() == "bar\n"


def test_two_stage_pipeline(tmp_path, state):
    target = tmp_path / "out.txt"
    node = Pipe(
        Command([PY, "-c", "print('abc')"]),
        Command([PY, "-c", UPPER], out_fd=_out_fd(target)),
    )
    with node:
        execute(node, state)
    assert target.read_text() == "ABC\n"


def test_three_stage_pipeline(tmp_path, state):
    target = tmp_path / "out.txt"
    node = Pipe(
        Pipe(
            Command(["echo", "x"]),
            Command([PY, "-c", UPPER]),
        ),
        Command([PY, "-c", "import sys; sys.stdout.write(sys.stdin.read() * 2)"],
                out_fd=_out_fd(target)),
    )
    with node:
        execute(node, state)
    assert target.read_text() == "X\nX\n"


def test_builtin_feeds_pipeline(tmp_path, state):
    target = tmp_path / "out.txt"
    node = Pipe(
        Command(["echo", "hello"]),
        Command([PY, "-c", UPPER], out_fd=_out_fd(target)),
    )
    with node:
        execute(node, state)
    assert target.read_text() == "HELLO\n"


def test_builtin_in_pipeline_does_not_touch_state(state):
    node = Pipe(Command(["export", "ZZ_PIPE=1"]), Command([PY, "-c", "pass"]))
    execute(node, state)
    assert "ZZ_PIPE" not in state.env
    assert state.running is True


def test_cd_in_pipeline_keeps_directory(tmp_path, state, monkeypatch):
    monkeypatch.chdir(tmp_path)
    before = os.getcwd()
    node = Pipe(Command(["cd", "/"]), Command([PY, "-c", "pass"]))
    execute(node, state)
    assert state.last_status == 0
    assert os.getcwd() == before


def test_pipeline_status_is_last_command(state):
    execute(Pipe(Command([PY, "-c", "pass"]), Command([PY, "-c", "exit(5)"])), state)
    assert state.last_status == 5
    execute(Pipe(Command([PY, "-c", "exit(5)"]), Command([PY, "-c", "pass"])), state)
    assert state.last_status == 0


def test_missing_command_gives_127(tmp_path, monkeypatch, capfd):
    monkeypatch.chdir(tmp_path)
    state = ShellState(env={"PATH": str(tmp_path)})
    execute(Command(["no-such-command-here"]), state)
    assert state.last_status == 127
    assert "execve" in capfd.readouterr().err


def test_empty_command_keeps_status():
    state = ShellState(last_status=6)
    execute(Command([]), state)
    assert state.last_status == 6