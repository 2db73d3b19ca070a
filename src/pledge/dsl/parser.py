"""Parser for assertion statements.

Grammar::

    expr      := [unwrap_kw] "(" subject ")" "to" ["not"] predicate
    unwrap_kw := "Ok" | "Some" | "Err"
    predicate := "equal" rhs | "be" identity | "succeed" | "panic"
    identity  := "Ok" | "Err" | "Some" | "None" | "true" | "false" | "empty"

Single pass, one token of lookahead, no backtracking. The subject ends at
the parenthesis matching the opening one; ``rhs`` is everything after
``equal``. Both are compiled as Python expressions before anything runs.
"""

from __future__ import annotations

import ast as pyast
from dataclasses import dataclass

from pledge.assertions.predicates import (
    Behavioral,
    BooleanIs,
    Emptiness,
    Equality,
    OptionalIs,
    OutcomeIs,
    Predicate,
)
from pledge.dsl.ast import AssertionExpression, Operand, UnwrapMode
from pledge.dsl.lexer import Token, tokenize_statement
from pledge.errors import ParseError

_UNWRAP_KEYWORDS = {
    "Ok": UnwrapMode.EXTRACT_OK,
    "Some": UnwrapMode.EXTRACT_OK,
    "Err": UnwrapMode.EXTRACT_ERR,
}
_PREDICATE_KEYWORDS = ("equal", "be", "succeed", "panic")
_IDENTITY_KEYWORDS = ("Ok", "Err", "Some", "None", "true", "false", "empty")


def _quoted(words: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(f"'{word}'" for word in words)


def _is_reference(node: pyast.expr) -> bool:
    if isinstance(node, (pyast.Name, pyast.Lambda, pyast.Constant)):
        return True
    if isinstance(node, pyast.Attribute):
        return _is_reference(node.value)
    return False


@dataclass
class _Parser:
    source: str
    tokens: list[Token]
    index: int = 0

    def parse_statement(self) -> AssertionExpression:
        unwrap_keyword = None
        unwrap_mode = UnwrapMode.NONE
        tok = self._peek()
        if tok.kind == "KEYWORD" and tok.text in _UNWRAP_KEYWORDS:
            unwrap_keyword = self._advance().text
            unwrap_mode = _UNWRAP_KEYWORDS[unwrap_keyword]
        elif tok.kind != "LPAREN":
            self._error(
                tok,
                message="Expected an assertion statement",
                expected=_quoted(("(", *_UNWRAP_KEYWORDS)),
            )

        subject = self._parse_subject()
        self._expect_keyword("to")
        negate = self._match_keyword("not")
        predicate = self._parse_predicate(negate)
        self._expect_end()

        return AssertionExpression(
            subject=subject,
            predicate=predicate,
            negate=negate,
            unwrap_mode=unwrap_mode,
            unwrap_keyword=unwrap_keyword,
            source=self.source,
        )

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        tok = self.tokens[self.index]
        self.index += 1
        return tok

    def _error(
        self,
        tok: Token | None = None,
        *,
        message: str | None = None,
        expected: tuple[str, ...] = (),
    ) -> None:
        token = tok if tok is not None else self._peek()
        detail = message if message is not None else "Unexpected token"
        found = "end of input" if token.kind == "EOF" else repr(token.text)
        raise ParseError(
            detail, token.pos, token.end, expected=tuple(dict.fromkeys(expected)), found=found
        )

    def _is_keyword(self, tok: Token, word: str) -> bool:
        return tok.kind == "KEYWORD" and tok.text == word

    def _expect_keyword(self, word: str) -> Token:
        tok = self._peek()
        if not self._is_keyword(tok, word):
            self._error(tok, expected=_quoted((word,)))
        return self._advance()

    def _match_keyword(self, word: str) -> bool:
        if self._is_keyword(self._peek(), word):
            self._advance()
            return True
        return False

    def _expect_end(self) -> None:
        tok = self._peek()
        if tok.kind != "EOF":
            self._error(tok, message="Unexpected text after predicate", expected=("end of input",))

    def _parse_subject(self) -> Operand:
        tok = self._peek()
        if tok.kind != "LPAREN":
            self._error(tok, message="Subject must be parenthesized", expected=_quoted(("(",)))
        opening = self._advance()
        depth = 1
        while True:
            tok = self._peek()
            if tok.kind == "EOF":
                self._error(tok, message="Unclosed subject", expected=_quoted((")",)))
            self._advance()
            if tok.kind == "LPAREN":
                depth += 1
            elif tok.kind == "RPAREN":
                depth -= 1
                if depth == 0:
                    return self._operand(opening.end, tok.pos, role="subject")

    def _parse_predicate(self, negate: bool) -> Predicate:
        tok = self._peek()
        if tok.kind == "KEYWORD" and tok.text in _PREDICATE_KEYWORDS:
            self._advance()
            if tok.text == "equal":
                return Equality(rhs=self._parse_rhs())
            if tok.text == "be":
                return self._parse_identity()
            return Behavioral(variant=tok.text)

        expected = _PREDICATE_KEYWORDS if negate else ("not", *_PREDICATE_KEYWORDS)
        self._error(tok, message="Expected a predicate", expected=_quoted(expected))

    def _parse_identity(self) -> Predicate:
        tok = self._peek()
        if tok.kind != "KEYWORD" or tok.text not in _IDENTITY_KEYWORDS:
            self._error(tok, message="Expected an identity", expected=_quoted(_IDENTITY_KEYWORDS))
        self._advance()
        if tok.text in ("Ok", "Err"):
            return OutcomeIs(variant=tok.text)
        if tok.text in ("Some", "None"):
            return OptionalIs(variant=tok.text)
        if tok.text == "empty":
            return Emptiness()
        return BooleanIs(value=tok.text == "true")

    def _parse_rhs(self) -> Operand:
        tok = self._peek()
        if tok.kind == "EOF":
            self._error(tok, message="Missing expected value", expected=("<expression>",))
        end = self.tokens[-1]
        self.index = len(self.tokens) - 1
        return self._operand(tok.pos, end.pos, role="expected value")

    def _operand(self, start: int, end: int, *, role: str) -> Operand:
        raw = self.source[start:end]
        text = raw.strip()
        if not text:
            raise ParseError(
                f"Empty {role}", start, end, expected=("<expression>",), found=repr(raw)
            )
        lead = len(raw) - len(raw.lstrip())
        try:
            # the closing paren sits on its own line so a trailing comment cannot swallow it
            tree = compile(f"({text}\n)", f"<{role}>", "eval", pyast.PyCF_ONLY_AST)
            code = compile(tree, f"<{role}>", "eval")
        except SyntaxError as exc:
            raise ParseError(
                f"Invalid {role}: {exc.msg}", start + lead, start + lead + len(text), found=repr(text)
            ) from None
        return Operand(
            source=text,
            start=start + lead,
            end=start + lead + len(text),
            code=code,
            reference=_is_reference(tree.body),
        )


def parse(source: str) -> AssertionExpression:
    """Parse one assertion statement.

    Raises:
        ParseError: the text does not match the grammar. Raised before
            any part of the statement is evaluated.
    """
    parser = _Parser(source=source, tokens=tokenize_statement(source))
    return parser.parse_statement()
