"""Shell state shared by the lexer, parser and executor."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field


class ShellError(Exception):
    """A fatal shell error; the shell reports it and stops with ``exit_status``."""

    exit_status = 1


@dataclass
class ShellState:
    """Environment, last exit status and run flag of one shell session."""

    env: dict[str, str] = field(default_factory=dict)
    last_status: int = 0
    running: bool = True

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> ShellState:
        """Create a fresh state holding a private copy of ``environ``.

        With no mapping given, the process environment is copied.
        """
        source = os.environ if environ is None else environ
        return cls(env=dict(source))

    def env_lines(self) -> list[str]:
        """Return the environment as ``NAME=value`` strings, in insertion order."""
        return [f"{name}={value}" for name, value in self.env.items()]