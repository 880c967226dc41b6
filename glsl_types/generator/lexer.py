"""
Tokenizer for GLSL source text.

The lexer is total: characters it does not recognize are emitted as UNKNOWN
tokens so the parser can skip over regions it does not care about.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum, auto

from glsl_types.generator.types import BUILTIN_TYPES


class TokenKind(Enum):
    """Kinds of tokens produced by the lexer."""

    IDENTIFIER = auto()
    KEYWORD = auto()
    QUALIFIER = auto()
    TYPE_NAME = auto()
    PUNCTUATION = auto()
    NUMBER = auto()
    STRING = auto()
    DIRECTIVE = auto()
    UNKNOWN = auto()


@dataclass(frozen=True)
class Token:
    """A single lexical token with its 1-based source position."""

    kind: TokenKind
    text: str
    line: int
    column: int


# Storage qualifiers
QUALIFIERS = frozenset(
    {"uniform", "in", "out", "inout", "attribute", "varying", "const", "buffer", "shared"}
)

# Qualifiers that may precede or follow a storage qualifier without changing it
AUXILIARY_QUALIFIERS = frozenset(
    {
        "layout",
        "highp",
        "mediump",
        "lowp",
        "flat",
        "smooth",
        "noperspective",
        "centroid",
        "sample",
        "patch",
        "invariant",
        "precise",
        "readonly",
        "writeonly",
        "coherent",
        "volatile",
        "restrict",
    }
)

KEYWORDS = AUXILIARY_QUALIFIERS | frozenset(
    {
        "struct",
        "precision",
        "void",
        "true",
        "false",
        "if",
        "else",
        "for",
        "while",
        "do",
        "switch",
        "case",
        "default",
        "break",
        "continue",
        "return",
        "discard",
        "subroutine",
    }
)

_TOKEN_SPEC = [
    ("NEWLINE", r"\r\n|\r|\n"),
    ("SPACE", r"[ \t\f\v]+"),
    ("LINE_COMMENT", r"//[^\r\n]*"),
    ("BLOCK_COMMENT", r"/\*[\s\S]*?(?:\*/|\Z)"),
    ("STRING", r'"[^"\r\n]*"?'),
    (
        "NUMBER",
        r"0[xX][0-9a-fA-F]+[uU]?"
        r"|(?:\d+\.\d*|\.\d+)(?:[eE][+-]?\d+)?(?:lf|LF|[fF])?"
        r"|\d+[eE][+-]?\d+(?:lf|LF|[fF])?"
        r"|\d+(?:lf|LF|[fFuU])?",
    ),
    ("WORD", r"[A-Za-z_][A-Za-z0-9_]*"),
    (
        "PUNCTUATION",
        r"<<=|>>=|\+\+|--|<<|>>|<=|>=|==|!=|&&|\|\||\^\^|[-+*/%&|^]="
        r"|[{}\[\]();,.=+\-*/%<>!~&|^?:]",
    ),
    ("OTHER", r"."),
]

_TOKEN_RE = re.compile("|".join(f"(?P<{name}>{pattern})" for name, pattern in _TOKEN_SPEC))

# A directive runs to the end of the line, including backslash continuations
_DIRECTIVE_RE = re.compile(r"#(?:[^\r\n\\]|\\(?:\r\n|\r|\n)?)*")


def _classify_word(word: str) -> TokenKind:
    if word in QUALIFIERS:
        return TokenKind.QUALIFIER
    if word in KEYWORDS:
        return TokenKind.KEYWORD
    if word in BUILTIN_TYPES:
        return TokenKind.TYPE_NAME
    return TokenKind.IDENTIFIER


def tokenize(source: str) -> Iterator[Token]:
    """Convert GLSL source text into a lazy stream of tokens.

    Comments and whitespace are skipped. Each call starts a new independent
    pass over the source.

    Args:
        source: GLSL source text

    Yields:
        Tokens in source order
    """
    pos = 0
    line = 1
    line_start = 0
    at_line_start = True
    length = len(source)

    while pos < length:
        column = pos - line_start + 1

        if at_line_start and source[pos] == "#":
            found = _DIRECTIVE_RE.match(source, pos)
            assert found is not None
            text = found.group()
            yield Token(TokenKind.DIRECTIVE, text, line, column)
            newlines = text.count("\n")
            if newlines:
                line += newlines
                line_start = pos + text.rfind("\n") + 1
            pos = found.end()
            continue

        found = _TOKEN_RE.match(source, pos)
        assert found is not None
        kind = found.lastgroup
        text = found.group()
        pos = found.end()

        if kind == "NEWLINE":
            line += 1
            line_start = pos
            at_line_start = True
            continue
        if kind == "SPACE":
            continue
        if kind in ("LINE_COMMENT", "BLOCK_COMMENT"):
            newlines = text.count("\n")
            if newlines:
                line += newlines
                line_start = found.start() + text.rfind("\n") + 1
                at_line_start = False
            continue

        at_line_start = False
        match kind:
            case "WORD":
                yield Token(_classify_word(text), text, line, column)
            case "NUMBER":
                yield Token(TokenKind.NUMBER, text, line, column)
            case "STRING":
                yield Token(TokenKind.STRING, text, line, column)
            case "PUNCTUATION":
                yield Token(TokenKind.PUNCTUATION, text, line, column)
            case _:
                yield Token(TokenKind.UNKNOWN, text, line, column)
