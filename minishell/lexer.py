"""Tokenizer and variable expansion for command lines."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from minishell.state import ShellState


class TokenType(Enum):
    WORD = "word"
    PIPE = "|"
    REDIR_IN = "<"
    REDIR_OUT = ">"
    APPEND = ">>"


@dataclass(frozen=True)
class Token:
    type: TokenType
    value: str


_SPACE = r"\t\n\v\f\r "
_WORD_CHAR = rf"[^{_SPACE}|<>\"']"

_TOKEN_RE = re.compile(
    rf"(?P<space>[{_SPACE}]+)"
    r"|(?P<append>>>)"
    r"|(?P<out>>)"
    r"|(?P<in><)"
    r"|(?P<pipe>\|)"
    rf"|(?P<word>(?:\"[^\"]*\"?|'[^']*'?|{_WORD_CHAR})+)"
)

_OPERATORS = {
    "append": TokenType.APPEND,
    "out": TokenType.REDIR_OUT,
    "in": TokenType.REDIR_IN,
    "pipe": TokenType.PIPE,
}

# A "$" only starts a reference when followed by one of these characters;
# the name itself is the run of letters, digits and underscores after it.
_VARIABLE_RE = re.compile(r"\$(?=[A-Za-z0-9_?$])([A-Za-z0-9_]*)")


def expand(word: str, state: ShellState) -> str:
    """Replace ``$NAME`` references in ``word`` with values from the environment.

    Unknown or empty names expand to the empty string; quotes are left intact.
    """
    return _VARIABLE_RE.sub(lambda m: state.env.get(m.group(1), "") if m.group(1) else "", word)


def lex(line: str, state: ShellState) -> list[Token]:
    """Split ``line`` into tokens, expanding variables inside words."""
    tokens: list[Token] = []
    for match in _TOKEN_RE.finditer(line):
        kind = match.lastgroup
        if kind == "space":
            continue
        if kind == "word":
            tokens.append(Token(TokenType.WORD, expand(match.group(), state)))
        else:
            tokens.append(Token(_OPERATORS[kind], match.group()))
    return tokens