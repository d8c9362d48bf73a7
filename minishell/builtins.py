"""Commands the shell runs itself instead of starting a program."""

from __future__ import annotations

import os
import re
import sys
from collections.abc import Callable, Mapping, Sequence
from typing import TextIO

from minishell.state import ShellState

_ATOI_RE = re.compile(r"[\t\n\v\f\r ]*([+-]?[0-9]*)")


def _atoi(text: str) -> int:
    """Read a leading integer the way ``atoi`` does; anything else gives 0."""
    digits = _ATOI_RE.match(text).group(1)
    try:
        return int(digits)
    except ValueError:
        return 0


def echo(argv: Sequence[str], out: TextIO) -> int:
    """Print the arguments separated by spaces; ``-n`` drops the newline."""
    args = list(argv[1:])
    newline = True
    if args and args[0] == "-n":
        newline = False
        args = args[1:]
    out.write(" ".join(args))
    if newline:
        out.write("\n")
    return 0


def cd(argv: Sequence[str], state: ShellState) -> int:
    """Change the working directory to the argument, or to ``$HOME``."""
    path = argv[1] if len(argv) > 1 else state.env.get("HOME")
    if path is None:
        print("cd: HOME not set", file=sys.stderr)
        return 1
    try:
        os.chdir(path)
    except OSError as exc:
        print(f"cd: {path}: {exc.strerror}", file=sys.stderr)
        return 1
    return 0


def pwd(out: TextIO) -> int:
    """Print the current working directory."""
    try:
        cwd = os.getcwd()
    except OSError as exc:
        print(f"pwd: {exc.strerror}", file=sys.stderr)
        return 1
    out.write(cwd + "\n")
    return 0


def env(state: ShellState, out: TextIO) -> int:
    """Print every environment entry as ``NAME=value``."""
    for line in state.env_lines():
        out.write(line + "\n")
    return 0


def export(argv: Sequence[str], state: ShellState, out: TextIO) -> int:
    """Set ``NAME=value`` pairs; with no arguments, print the environment."""
    if len(argv) < 2:
        return env(state, out)
    for arg in argv[1:]:
        name, sep, value = arg.partition("=")
        if not sep:
            print(f"export: `{arg}': not a valid identifier", file=sys.stderr)
            continue
        state.env[name] = value
    return 0


def unset(argv: Sequence[str], state: ShellState) -> int:
    """Remove the named variables from the environment."""
    for name in argv[1:]:
        if not name or "=" in name:
            print(f"unset: {name}: invalid argument", file=sys.stderr)
            continue
        state.env.pop(name, None)
    return 0


def exit_shell(argv: Sequence[str], state: ShellState, out: TextIO) -> int:
    """Stop the shell, returning the given status or the last one."""
    status = _atoi(argv[1]) if len(argv) > 1 else state.last_status
    out.write("exit\n")
    state.running = False
    return status


_Builtin = Callable[[Sequence[str], ShellState, TextIO], int]

_BUILTINS: dict[str, _Builtin] = {
    "echo": lambda argv, state, out: echo(argv, out),
    "cd": lambda argv, state, out: cd(argv, state),
    "pwd": lambda argv, state, out: pwd(out),
    "env": lambda argv, state, out: env(state, out),
    "export": export,
    "unset": lambda argv, state, out: unset(argv, state),
    "exit": exit_shell,
}


def is_builtin(name: str) -> bool:
    """Tell whether ``name`` is a command the shell runs itself."""
    return name in _BUILTINS


def run_builtin(argv: Sequence[str], state: ShellState, out: TextIO) -> int:
    """Run the builtin named by ``argv[0]``; unknown names give status 1."""
    if not argv or argv[0] not in _BUILTINS:
        return 1
    return _BUILTINS[argv[0]](argv, state, out)


def search_path(cmd: str, env: Mapping[str, str]) -> str:
    """Find ``cmd`` in the ``PATH`` of ``env``; fall back to ``cmd`` itself."""
    if "/" in cmd:
        return cmd
    path = env.get("PATH")
    if path is None:
        return cmd
    for directory in filter(None, path.split(":")):
        full = f"{directory}/{cmd}"
        if os.access(full, os.X_OK):
            return full
    return cmd