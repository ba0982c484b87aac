from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class Identifier:
    name: str
    unique_id: int


@dataclass(frozen=True)
class Uninstantiated:
    """A parameter that is still a plain name (free or bound by a quantifier)."""
    name: str


@dataclass(frozen=True)
class Instantiated:
    """A parameter bound to a concrete value identifier."""
    ident: Identifier

    @property
    def name(self) -> str:
        return self.ident.name


Parameter = Union[Uninstantiated, Instantiated]


@dataclass(frozen=True)
class Atom:
    name: str
    params: Tuple[Parameter, ...] = ()


@dataclass(frozen=True)
class TrueProp:
    pass


@dataclass(frozen=True)
class FalseProp:
    pass


@dataclass(frozen=True)
class And:
    left: "Prop"
    right: "Prop"


@dataclass(frozen=True)
class Or:
    left: "Prop"
    right: "Prop"


@dataclass(frozen=True)
class Impl:
    left: "Prop"
    right: "Prop"


@dataclass(frozen=True)
class ForAll:
    object_ident: str
    object_type_ident: str
    body: "Prop"


@dataclass(frozen=True)
class Exists:
    object_ident: str
    object_type_ident: str
    body: "Prop"


Prop = Union[Atom, TrueProp, FalseProp, And, Or, Impl, ForAll, Exists]
Binary = (And, Or, Impl)
Quantified = (ForAll, Exists)


def quantifier(kind: str, object_ident: str, object_type_ident: str, body: Prop) -> Prop:
    if kind == "ForAll":
        return ForAll(object_ident, object_type_ident, body)
    if kind == "Exists":
        return Exists(object_ident, object_type_ident, body)
    raise ValueError(f"Unknown quantifier kind: {kind}")


def neg(prop: Prop) -> Prop:
    return Impl(prop, FalseProp())
