"""Interactive read-eval loop of the shell."""

from __future__ import annotations

import os
import signal
import sys
from collections.abc import Sequence

try:
    import readline  # noqa: F401  (line editing and history for input())
except ImportError:  # pragma: no cover - platform without readline
    readline = None

from minishell.executor import execute
from minishell.lexer import lex
from minishell.parser import parse
from minishell.state import ShellError, ShellState

PROMPT = "minishell$ "


def _on_interrupt(signum, frame) -> None:
    os.write(sys.stdout.fileno(), ("\n" + PROMPT).encode())


def install_signal_handlers() -> None:
    """Redraw the prompt on Ctrl-C and ignore Ctrl-\\."""
    signal.signal(signal.SIGINT, _on_interrupt)
    if hasattr(signal, "SIGQUIT"):
        signal.signal(signal.SIGQUIT, signal.SIG_IGN)


def run_line(line: str, state: ShellState) -> int:
    """Lex, parse and run one command line; return the resulting status.

    Raises ShellError on a syntax error or an unopenable redirection.
    """
    tokens = lex(line, state)
    with parse(tokens) as node:
        execute(node, state)
    return state.last_status


def main(argv: Sequence[str] | None = None) -> int:
    """Read and run lines until end of input or ``exit``; return the status."""
    state = ShellState.from_environ()
    install_signal_handlers()
    while state.running:
        try:
            line = input(PROMPT)
        except EOFError:
            break
        try:
            run_line(line, state)
        except ShellError as exc:
            print(f"minishell: {exc}", file=sys.stderr)
            return exc.exit_status
    return state.last_status


if __name__ == "__main__":
    sys.exit(main())