"""Tokenization for assertion statements.

Subjects and right-hand sides are ordinary Python expressions, so the
statement is split with Python's own tokenizer: string literals containing
parentheses, nested calls and comprehensions come out as single, correctly
bounded tokens. Reserved words are recognized by token class and text only.
"""

from __future__ import annotations

import io
import tokenize
from dataclasses import dataclass

from pledge.errors import ParseError

KEYWORDS = frozenset(
    {
        "to",
        "not",
        "equal",
        "be",
        "Ok",
        "Err",
        "Some",
        "None",
        "empty",
        "succeed",
        "panic",
        "true",
        "false",
    }
)

_SKIPPED = frozenset(
    {
        tokenize.NEWLINE,
        tokenize.NL,
        tokenize.INDENT,
        tokenize.DEDENT,
        tokenize.COMMENT,
        tokenize.ENDMARKER,
        tokenize.ENCODING,
    }
)


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    pos: int
    end: int


def _line_offsets(source: str) -> list[int]:
    offsets = [0]
    # tokenize rows break on "\n" only, unlike str.splitlines
    for line in io.StringIO(source).readlines():
        offsets.append(offsets[-1] + len(line))
    return offsets


def _offset(offsets: list[int], row: int, col: int) -> int:
    if row - 1 >= len(offsets):
        return offsets[-1]
    return offsets[row - 1] + col


def _classify(tok: tokenize.TokenInfo) -> str:
    if tok.type == tokenize.NAME and tok.string in KEYWORDS:
        return "KEYWORD"
    if tok.type == tokenize.OP and tok.string == "(":
        return "LPAREN"
    if tok.type == tokenize.OP and tok.string == ")":
        return "RPAREN"
    return tokenize.tok_name[tok.type]


def tokenize_statement(source: str) -> list[Token]:
    """Split *source* into tokens terminated by a single ``EOF`` token.

    Raises:
        ParseError: the text cannot be tokenized (unterminated string,
            unbalanced brackets, stray characters).
    """
    offsets = _line_offsets(source)
    tokens: list[Token] = []
    try:
        for tok in tokenize.generate_tokens(io.StringIO(source).readline):
            if tok.type in _SKIPPED:
                continue
            start = _offset(offsets, *tok.start)
            end = _offset(offsets, *tok.end)
            tokens.append(Token(_classify(tok), tok.string, start, end))
    except tokenize.TokenError as exc:
        message = exc.args[0]
        position = exc.args[1] if len(exc.args) > 1 else (len(offsets) - 1, 0)
        pos = min(_offset(offsets, *position), len(source))
        raise ParseError(f"Cannot tokenize statement: {message}", pos, pos) from None
    except SyntaxError as exc:
        pos = min(_offset(offsets, exc.lineno or 1, max((exc.offset or 1) - 1, 0)), len(source))
        raise ParseError(f"Cannot tokenize statement: {exc.msg}", pos, pos) from None

    tokens.append(Token("EOF", "", len(source), len(source)))
    return tokens
