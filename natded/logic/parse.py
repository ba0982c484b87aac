from __future__ import annotations
import re
from typing import List, NamedTuple, Optional

from .ast import Atom, And, Or, Impl, ForAll, Exists, TrueProp, FalseProp, Prop, Uninstantiated, neg
from ..errors import PropParseError

# Grammar (lowest binding first):
#   prop        = { or "->" } ( or | quantor )            right associative
#   or          = and { "||" ( and | quantor ) }          left associative
#   and         = not { "&&" ( not | quantor ) }          left associative
#   not         = { "~" } atom                             ~A is A -> ⊥
#   atom        = ⊤ | ⊥ | ident [ "(" ident { "," ident } [","] ")" ] | "(" prop ")"
#   quantor     = ( "∀" | "∃" ) ident ":" ident "." prop

_TOKEN_RE = re.compile(r"""
    (?P<WS>\s+)
  | (?P<FORALL>∀|\\forall\b)
  | (?P<EXISTS>∃|\\exists\b)
  | (?P<TRUE>⊤|\\top\b)
  | (?P<FALSE>⊥|\\bottom\b|\\bot\b)
  | (?P<IMPL>->|→|⊃)
  | (?P<AND>&&|&|\^|∧)
  | (?P<OR>\|\||\||∨)
  | (?P<NOT>~|!|¬)
  | (?P<LROUND>\()
  | (?P<RROUND>\))
  | (?P<DOT>\.)
  | (?P<COMMA>,)
  | (?P<COLON>:)
  | (?P<IDENT>[A-Za-z_][A-Za-z0-9_']*)
""", re.VERBOSE)

_TRUE_WORDS = {"true", "True"}
_FALSE_WORDS = {"false", "False"}


class Token(NamedTuple):
    kind: str
    text: str
    pos: int


def tokenize(text: str) -> List[Token]:
    tokens: List[Token] = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if not m:
            raise PropParseError(f"Unexpected character {text[pos]!r} at position {pos}.", pos)
        kind = m.lastgroup
        val = m.group()
        if kind == "IDENT":
            if val in _TRUE_WORDS:
                kind = "TRUE"
            elif val in _FALSE_WORDS:
                kind = "FALSE"
        if kind != "WS":
            tokens.append(Token(kind, val, pos))
        pos = m.end()
    return tokens


class _Parser:
    def __init__(self, text: str):
        self.text = text
        self.tokens = tokenize(text)
        self.i = 0

    def peek(self) -> Optional[Token]:
        return self.tokens[self.i] if self.i < len(self.tokens) else None

    def accept(self, kind: str) -> Optional[Token]:
        tok = self.peek()
        if tok and tok.kind == kind:
            self.i += 1
            return tok
        return None

    def expect(self, kind: str, what: str) -> Token:
        tok = self.accept(kind)
        if tok is None:
            self.fail(f"Expected {what}")
        return tok

    def fail(self, msg: str):
        tok = self.peek()
        if tok is None:
            raise PropParseError(f"{msg} but reached end of input.", len(self.text))
        raise PropParseError(f"{msg} but found {tok.text!r} at position {tok.pos}.", tok.pos)

    def at_quantor(self) -> bool:
        tok = self.peek()
        return bool(tok and tok.kind in ("FORALL", "EXISTS"))

    def parse(self) -> Prop:
        if not self.tokens:
            raise PropParseError("Empty proposition.", 0)
        prop = self.parse_impl()
        if self.peek() is not None:
            self.fail("Expected end of input")
        return prop

    def parse_impl(self) -> Prop:
        if self.at_quantor():
            return self.parse_quantor()
        left = self.parse_or()
        if self.accept("IMPL"):
            return Impl(left, self.parse_impl())
        return left

    def parse_or(self) -> Prop:
        left = self.parse_and()
        while self.accept("OR"):
            right = self.parse_quantor() if self.at_quantor() else self.parse_and()
            left = Or(left, right)
        return left

    def parse_and(self) -> Prop:
        left = self.parse_not()
        while self.accept("AND"):
            right = self.parse_quantor() if self.at_quantor() else self.parse_not()
            left = And(left, right)
        return left

    def parse_not(self) -> Prop:
        depth = 0
        while self.accept("NOT"):
            depth += 1
        prop = self.parse_atom()
        for _ in range(depth):
            prop = neg(prop)
        return prop

    def parse_atom(self) -> Prop:
        if self.accept("TRUE"):
            return TrueProp()
        if self.accept("FALSE"):
            return FalseProp()
        if self.accept("LROUND"):
            inner = self.parse_impl()
            self.expect("RROUND", "')'")
            return inner
        name = self.accept("IDENT")
        if name is None:
            self.fail("Expected a proposition")
        params = []
        if self.accept("LROUND"):
            params.append(Uninstantiated(self.expect("IDENT", "a parameter name").text))
            while self.accept("COMMA"):
                tok = self.accept("IDENT")
                if tok is None:
                    break  # trailing comma
                params.append(Uninstantiated(tok.text))
            self.expect("RROUND", "')'")
        return Atom(name.text, tuple(params))

    def parse_quantor(self) -> Prop:
        head = self.peek()
        self.i += 1
        ident = self.expect("IDENT", "a bound variable name").text
        self.expect("COLON", "':'")
        type_ident = self.expect("IDENT", "a type name").text
        self.expect("DOT", "'.'")
        body = self.parse_impl()
        if head.kind == "FORALL":
            return ForAll(ident, type_ident, body)
        return Exists(ident, type_ident, body)


def parse_prop(text: str) -> Prop:
    """Parse a proposition, raising PropParseError on malformed input."""
    return _Parser(text or "").parse()
