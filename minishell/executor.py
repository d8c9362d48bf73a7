"""Run a parsed command tree: builtins in-process, programs as children."""

from __future__ import annotations

import dataclasses
import io
import os
import subprocess
import sys
import threading
from collections.abc import Callable, Iterator, Sequence

from minishell.builtins import is_builtin, run_builtin, search_path
from minishell.parser import STDIN_FD, STDOUT_FD, Command, Node, Pipe
from minishell.state import ShellState

_Waiter = Callable[[], int]


def _commands(node: Node) -> Iterator[Command]:
    if isinstance(node, Pipe):
        yield from _commands(node.left)
        yield from _commands(node.right)
    else:
        yield node


def _run_builtin_here(command: Command, state: ShellState) -> int:
    if command.out_fd == STDOUT_FD:
        return run_builtin(command.argv, state, sys.stdout)
    with open(command.out_fd, "w", closefd=False) as out:
        return run_builtin(command.argv, state, out)


def _launch_builtin(argv: Sequence[str], stdout: int | None, state: ShellState) -> _Waiter:
    """Run a builtin on a copy of the state and feed its output from a thread."""
    buffer = io.StringIO()
    sub_state = dataclasses.replace(state, env=dict(state.env))
    cwd = os.getcwd()
    try:
        status = run_builtin(argv, sub_state, buffer)
    finally:
        os.chdir(cwd)
    fd = os.dup(STDOUT_FD if stdout is None else stdout)
    data = memoryview(buffer.getvalue().encode())

    def write() -> None:
        view = data
        try:
            while view:
                view = view[os.write(fd, view):]
        except BrokenPipeError:
            pass
        finally:
            os.close(fd)

    writer = threading.Thread(target=write, daemon=True)
    writer.start()

    def wait() -> int:
        writer.join()
        return status

    return wait


def _exit_status(returncode: int) -> int:
    # A child killed by a signal leaves the signal number as its status.
    return -returncode if returncode < 0 else returncode


def _launch_external(
    argv: Sequence[str], stdin: int | None, stdout: int | None, state: ShellState
) -> _Waiter:
    path = search_path(argv[0], state.env)
    if "/" not in path:
        path = os.path.join(os.curdir, path)
    try:
        process = subprocess.Popen(
            list(argv), executable=path, stdin=stdin, stdout=stdout, env=state.env
        )
    except OSError as exc:
        print(f"execve: {exc.strerror}", file=sys.stderr)
        return lambda: 127
    return lambda: _exit_status(process.wait())


def _launch(
    argv: Sequence[str], stdin: int | None, stdout: int | None, state: ShellState
) -> _Waiter:
    if not argv:
        return lambda: 0
    if is_builtin(argv[0]):
        return _launch_builtin(argv, stdout, state)
    return _launch_external(argv, stdin, stdout, state)


def _run_pipeline(commands: list[Command], state: ShellState) -> int:
    sys.stdout.flush()
    sys.stderr.flush()
    waiters: list[_Waiter] = []
    prev_read: int | None = None
    last = len(commands) - 1
    for index, command in enumerate(commands):
        next_read, pipe_write = os.pipe() if index < last else (None, None)
        try:
            stdin = command.in_fd if command.in_fd != STDIN_FD else prev_read
            stdout = command.out_fd if command.out_fd != STDOUT_FD else pipe_write
            waiters.append(_launch(command.argv, stdin, stdout, state))
        except BaseException:
            if next_read is not None:
                os.close(next_read)
            raise
        finally:
            for fd in (prev_read, pipe_write):
                if fd is not None:
                    os.close(fd)
        prev_read = next_read
    statuses = [wait() for wait in waiters]
    return statuses[-1]


def execute(node: Node, state: ShellState) -> None:
    """Run ``node`` and record its exit status in ``state.last_status``.

    A lone builtin runs in the shell itself and may change its state;
    inside a pipeline it works on a copy.
    """
    commands = list(_commands(node))
    if len(commands) == 1:
        command = commands[0]
        if not command.argv:
            return
        if is_builtin(command.argv[0]):
            state.last_status = _run_builtin_here(command, state)
            return
    state.last_status = _run_pipeline(commands, state)