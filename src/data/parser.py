"""
Reader and writer for the S-expression knowledge format.

    ; comment
    (InheritanceLink (ConceptNode "cat") (ConceptNode "mammal")) <0.95, 40>
    (Inheritance mammal animal) <[0.9, 1.0], 0.9, 20>
    (Implication (Evaluation hungry $x) (Evaluation eats $x))

Link arguments may be full node expressions, quoted strings or bare
symbols (ConceptNodes); ``$name`` is a VariableNode. A truth value may
follow any top-level expression.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

from atomspace.atoms import Atom, AtomType, Link, Node, concept, variable
from truth.values import (
    IndefiniteTruthValue, SimpleTruthValue, TruthValue, DEFAULT_CREDIBILITY, DEFAULT_LOOKAHEAD
)

Entry = Tuple[Atom, Optional[TruthValue]]

NUMBER = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"
SIMPLE_TV = re.compile(rf"^\s*({NUMBER})\s*,\s*({NUMBER})\s*$")
INDEFINITE_TV = re.compile(
    rf"^\s*\[\s*({NUMBER})\s*,\s*({NUMBER})\s*\]\s*(?:,\s*({NUMBER})\s*(?:,\s*({NUMBER})\s*)?)?$"
)

TOKEN_PATTERNS = [
    ("COMMENT", r";[^\n]*"),
    ("NEWLINE", r"\n"),
    ("SPACE", r"[ \t\r]+"),
    ("LPAREN", r"\("),
    ("RPAREN", r"\)"),
    ("STRING", r'"(?:[^"\\\n]|\\.)*"'),
    ("TV", r"<[^<>\n]*>"),
    ("SYMBOL", r"[^\s()\"<>;]+"),
]
TOKEN_RE = re.compile("|".join(f"(?P<{name}>{pattern})" for name, pattern in TOKEN_PATTERNS))


class ParseError(ValueError):
    """Malformed knowledge text, with the position of the problem."""

    def __init__(self, message: str, line: int, column: int):
        super().__init__(f"line {line}, column {column}: {message}")
        self.message = message
        self.line = line
        self.column = column


@dataclass
class Token:
    kind: str
    value: str
    line: int
    column: int


def tokenize(text: str) -> List[Token]:
    """Split text into tokens, dropping whitespace and comments."""
    tokens = []
    line, line_start, pos = 1, 0, 0
    while pos < len(text):
        match = TOKEN_RE.match(text, pos)
        if match is None:
            raise ParseError(f"Unexpected character {text[pos]!r}", line, pos - line_start + 1)
        kind = match.lastgroup
        if kind == "NEWLINE":
            line += 1
            line_start = match.end()
        elif kind not in ("SPACE", "COMMENT"):
            tokens.append(Token(kind, match.group(), line, match.start() - line_start + 1))
        pos = match.end()
    return tokens


class Parser:
    """Recursive-descent parser over a token list."""

    def __init__(self, text: str):
        self.tokens = tokenize(text)
        self.pos = 0
        self._end = self._end_position(text)

    @staticmethod
    def _end_position(text: str) -> Tuple[int, int]:
        lines = text.split("\n")
        return len(lines), len(lines[-1]) + 1

    def peek(self) -> Optional[Token]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def next(self) -> Token:
        token = self.peek()
        if token is None:
            raise ParseError("Unexpected end of input", *self._end)
        self.pos += 1
        return token

    def expect(self, kind: str) -> Token:
        token = self.next()
        if token.kind != kind:
            raise ParseError(f"Expected {kind}, got {token.value!r}", token.line, token.column)
        return token

    def parse_entries(self) -> List[Entry]:
        entries = []
        while self.peek() is not None:
            token = self.peek()
            if token.kind != "LPAREN":
                raise ParseError(f"Expected '(' at top level, got {token.value!r}",
                                 token.line, token.column)
            atom = self.parse_expression()
            tv = None
            if self.peek() is not None and self.peek().kind == "TV":
                tv = self.parse_truth_value(self.next())
            entries.append((atom, tv))
        return entries

    def parse_expression(self) -> Atom:
        open_paren = self.expect("LPAREN")
        head = self.next()
        if head.kind != "SYMBOL":
            raise ParseError(f"Expected an atom type, got {head.value!r}", head.line, head.column)
        try:
            atom_type = AtomType.parse(head.value)
        except ValueError as e:
            raise ParseError(str(e), head.line, head.column) from None

        if atom_type.is_node:
            name_token = self.next()
            if name_token.kind not in ("STRING", "SYMBOL"):
                raise ParseError(f"Expected a node name, got {name_token.value!r}",
                                 name_token.line, name_token.column)
            self.expect("RPAREN")
            name = self._unquote(name_token)
            try:
                if atom_type == AtomType.VARIABLE:
                    return variable(name)
                return Node(atom_type, name)
            except ValueError as e:
                raise ParseError(str(e), name_token.line, name_token.column) from None

        outgoing = []
        while self.peek() is not None and self.peek().kind != "RPAREN":
            outgoing.append(self.parse_argument())
        self.expect("RPAREN")
        try:
            return Link(atom_type, tuple(outgoing))
        except ValueError as e:
            raise ParseError(str(e), open_paren.line, open_paren.column) from None

    def parse_argument(self) -> Atom:
        token = self.peek()
        if token.kind == "LPAREN":
            return self.parse_expression()
        self.next()
        if token.kind == "STRING":
            return concept(self._unquote(token))
        if token.kind == "SYMBOL":
            if token.value.startswith("$"):
                if len(token.value) == 1:
                    raise ParseError("Variable needs a name", token.line, token.column)
                return variable(token.value)
            return concept(token.value)
        raise ParseError(f"Unexpected {token.value!r}", token.line, token.column)

    def parse_truth_value(self, token: Token) -> TruthValue:
        body = token.value[1:-1]
        try:
            match = INDEFINITE_TV.match(body)
            if match:
                lower, upper, credibility, lookahead = match.groups()
                return IndefiniteTruthValue(
                    float(lower), float(upper),
                    float(credibility) if credibility is not None else DEFAULT_CREDIBILITY,
                    float(lookahead) if lookahead is not None else DEFAULT_LOOKAHEAD,
                )
            match = SIMPLE_TV.match(body)
            if match:
                return SimpleTruthValue(float(match.group(1)), float(match.group(2)))
        except ValueError as e:
            raise ParseError(str(e), token.line, token.column) from None
        raise ParseError(f"Malformed truth value {token.value!r}", token.line, token.column)

    @staticmethod
    def _unquote(token: Token) -> str:
        if token.kind == "STRING":
            return re.sub(r"\\(.)", r"\1", token.value[1:-1])
        return token.value


def parse(text: str) -> List[Entry]:
    """Parse knowledge text into (atom, truth value or None) entries."""
    return Parser(text).parse_entries()


def parse_atom(text: str) -> Atom:
    """Parse a single expression without a truth value."""
    entries = parse(text)
    if len(entries) != 1 or entries[0][1] is not None:
        raise ParseError("Expected exactly one expression", 1, 1)
    return entries[0][0]


def parse_file(path: Union[str, Path]) -> List[Entry]:
    with open(path, "r", encoding="utf-8") as f:
        return parse(f.read())


def _number(value: float) -> str:
    # Shortest text that reads back to the same float
    text = repr(float(value))
    return text[:-2] if text.endswith(".0") else text


def format_truth_value(tv: TruthValue) -> str:
    if tv.is_indefinite:
        return (f"<[{_number(tv.lower)}, {_number(tv.upper)}], "
                f"{_number(tv.credibility)}, {_number(tv.lookahead)}>")
    return f"<{_number(tv.strength)}, {_number(tv.count)}>"


def format_atom(atom: Atom, tv: Optional[TruthValue] = None) -> str:
    """Render an atom, and its truth value if given, in the S-expression format."""
    text = atom.to_sexpr()
    if tv is not None:
        text += " " + format_truth_value(tv)
    return text
