"""Build a command tree from tokens, opening redirection targets."""

from __future__ import annotations

import os
from collections import deque
from dataclasses import dataclass, field
from typing import Union

from minishell.lexer import Token, TokenType
from minishell.state import ShellError

STDIN_FD = 0
STDOUT_FD = 1


class ParseError(ShellError):
    """The token stream is not a valid command line."""


_OPEN_FLAGS = {
    TokenType.REDIR_IN: os.O_RDONLY,
    TokenType.REDIR_OUT: os.O_CREAT | os.O_WRONLY | os.O_TRUNC,
    TokenType.APPEND: os.O_CREAT | os.O_WRONLY | os.O_APPEND,
}


class _Closing:
    def close(self) -> None:  # pragma: no cover - overridden
        raise NotImplementedError

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


@dataclass
class Command(_Closing):
    """A simple command with its argument vector and standard streams."""

    argv: list[str] = field(default_factory=list)
    in_fd: int = STDIN_FD
    out_fd: int = STDOUT_FD

    def close(self) -> None:
        """Close any redirection files and restore the standard streams."""
        if self.in_fd != STDIN_FD:
            os.close(self.in_fd)
            self.in_fd = STDIN_FD
        if self.out_fd != STDOUT_FD:
            os.close(self.out_fd)
            self.out_fd = STDOUT_FD

    def _redirect(self, op: TokenType, target: str) -> None:
        try:
            fd = os.open(target, _OPEN_FLAGS[op], 0o644)
        except OSError as exc:
            raise ShellError(f"open: {target}: {exc.strerror}") from exc
        if op is TokenType.REDIR_IN:
            if self.in_fd != STDIN_FD:
                os.close(self.in_fd)
            self.in_fd = fd
        else:
            if self.out_fd != STDOUT_FD:
                os.close(self.out_fd)
            self.out_fd = fd


@dataclass
class Pipe(_Closing):
    """Two nodes connected by a pipe: ``left | right``."""

    left: Node
    right: Node

    def close(self) -> None:
        """Close the redirection files of both sides."""
        self.left.close()
        self.right.close()


Node = Union[Command, Pipe]


def _parse_command(queue: deque[Token]) -> Command:
    argv = []
    while queue and queue[0].type is TokenType.WORD:
        argv.append(queue.popleft().value)
    command = Command(argv)
    try:
        while queue and queue[0].type in _OPEN_FLAGS:
            op = queue.popleft().type
            if not queue or queue[0].type is not TokenType.WORD:
                raise ParseError(f"syntax error: missing file after '{op.value}'")
            command._redirect(op, queue.popleft().value)
    except Exception:
        command.close()
        raise
    return command


def parse(tokens: list[Token]) -> Node:
    """Parse a pipeline of commands; pipes associate to the left.

    Tokens left over after a command's redirections and before the next
    pipe are ignored.
    """
    queue = deque(tokens)
    node: Node = _parse_command(queue)
    try:
        while queue:
            if queue.popleft().type is TokenType.PIPE:
                node = Pipe(node, _parse_command(queue))
    except Exception:
        node.close()
        raise
    return node