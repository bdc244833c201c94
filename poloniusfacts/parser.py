"""Parser for the textual fact-program format."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Optional, TypeVar

from .ir import (
    Block,
    BorrowRegionAt,
    DefineVariable,
    Effect,
    Input,
    Invalidates,
    Kill,
    KnownSubset,
    OriginLiveOnEntry,
    Outlives,
    Statement,
    Use,
    UseVariable,
)

T = TypeVar("T")


class ParseError(ValueError):
    """Raised when a program cannot be parsed."""


_LEXEME_PATTERN = (
    r"(?P<ws>\s+)"
    r"|(?P<comment>//[^\n]*)"
    r"|(?P<origin>'\w+)"
    r"|(?P<name>\w+)"
    r"|(?P<punct>[{}(),:;/])"
)
_LEXEME = re.compile(_LEXEME_PATTERN)


@dataclass(frozen=True)
class _Token:
    kind: str
    text: str
    line: int
    column: int


def _tokenize(text: str) -> Iterator[_Token]:
    pos = 0
    line = 1
    line_start = 0
    while pos < len(text):
        match = _LEXEME.match(text, pos)
        column = pos - line_start + 1
        if match is None:
            raise ParseError(
                f"parse error: unexpected character {text[pos]!r} "
                f"at line {line}, column {column}"
            )
        kind = match.lastgroup
        value = match.group()
        if kind not in ("ws", "comment"):
            yield _Token(kind, value, line, column)
        newlines = value.count("\n")
        if newlines:
            line += newlines
            line_start = pos + value.rindex("\n") + 1
        pos = match.end()


class _Parser:
    def __init__(self, text: str) -> None:
        self._tokens = list(_tokenize(text))
        self._pos = 0

    def _peek(self) -> Optional[_Token]:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _at(self, *texts: str) -> bool:
        current = self._peek()
        return current is not None and current.kind != "origin" and current.text in texts

    def _error(self, expected: str) -> ParseError:
        current = self._peek()
        if current is None:
            return ParseError(f"parse error: unexpected end of input, expected {expected}")
        return ParseError(
            f"parse error: unexpected {current.text!r} at line {current.line}, "
            f"column {current.column}, expected {expected}"
        )

    def _advance(self) -> _Token:
        current = self._tokens[self._pos]
        self._pos += 1
        return current

    def _expect(self, text: str) -> None:
        if not self._at(text):
            raise self._error(repr(text))
        self._advance()

    def _take(self, *kinds: str) -> str:
        current = self._peek()
        if current is None or current.kind not in kinds:
            raise self._error(" or ".join(kinds))
        return self._advance().text

    def _origin(self) -> str:
        return self._take("origin")

    def _name(self) -> str:
        return self._take("name")

    def _loan(self) -> str:
        return self._take("name", "origin")

    def _comma_list(self, item: Callable[[], T], *closers: str) -> list[T]:
        items: list[T] = []
        while not self._at(*closers):
            items.append(item())
            if self._at(","):
                self._advance()
            else:
                break
        return items

    def _braced(self, item: Callable[[], T]) -> list[T]:
        self._expect("{")
        items = self._comma_list(item, "}")
        self._expect("}")
        return items

    def _optional_section(self, keyword: str, item: Callable[[], T]) -> Optional[list[T]]:
        if not self._at(keyword):
            return None
        self._advance()
        return self._braced(item)

    def _known_subset(self) -> KnownSubset:
        a = self._origin()
        self._expect(":")
        return KnownSubset(a=a, b=self._origin())

    def _var_origin(self) -> tuple[str, str]:
        self._expect("(")
        variable = self._name()
        self._expect(",")
        origin = self._origin()
        self._expect(")")
        return (variable, origin)

    def _effect(self) -> Effect:
        keyword = self._peek()
        if keyword is None or keyword.kind != "name":
            raise self._error("an effect")
        word = keyword.text
        if word not in _EFFECT_KEYWORDS:
            raise self._error("an effect")
        self._advance()
        self._expect("(")
        effect: Effect
        if word == "use":
            effect = Use(tuple(self._comma_list(self._origin, ")")))
        elif word == "outlives":
            a = self._origin()
            self._expect(":")
            effect = Outlives(a=a, b=self._origin())
        elif word == "borrow_region_at":
            origin = self._origin()
            self._expect(",")
            effect = BorrowRegionAt(origin=origin, loan=self._loan())
        elif word == "invalidates":
            effect = Invalidates(loan=self._loan())
        elif word == "kill":
            effect = Kill(loan=self._loan())
        elif word == "origin_live_on_entry":
            effect = OriginLiveOnEntry(origin=self._origin())
        elif word == "var_defined_at":
            effect = DefineVariable(variable=self._name())
        else:
            effect = UseVariable(variable=self._name())
        self._expect(")")
        return effect

    def _statement(self) -> Statement:
        first = self._comma_list(self._effect, "/", ";")
        if self._at("/"):
            self._advance()
            mid = self._comma_list(self._effect, ";")
            self._expect(";")
            return Statement(effects_start=first, effects=mid)
        self._expect(";")
        return Statement.from_effects(first)

    def _block(self) -> Block:
        self._expect("block")
        name = self._name()
        self._expect("{")
        statements = []
        while not self._at("}", "goto"):
            statements.append(self._statement())
        goto: list[str] = []
        if self._at("goto"):
            self._advance()
            goto = self._comma_list(self._name, ";")
            self._expect(";")
        self._expect("}")
        return Block(name=name, statements=statements, goto=goto)

    def parse(self) -> Input:
        self._expect("placeholders")
        placeholders = self._braced(self._origin)
        known_subsets = self._optional_section("known_subsets", self._known_subset)
        uses = self._optional_section("use_of_var_derefs_origin", self._var_origin)
        drops = self._optional_section("drop_of_var_derefs_origin", self._var_origin)
        blocks = []
        while self._peek() is not None:
            blocks.append(self._block())
        return Input.build(placeholders, known_subsets, uses, drops, blocks)


_EFFECT_KEYWORDS = frozenset(
    {
        "use",
        "outlives",
        "borrow_region_at",
        "invalidates",
        "kill",
        "origin_live_on_entry",
        "var_defined_at",
        "var_used_at",
    }
)


def parse_input(text: str) -> Input:
    """Parse a fact program; raise ParseError if it is malformed."""
    return _Parser(text).parse()