from __future__ import annotations
from dataclasses import replace
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

from .ast import (
    Atom, TrueProp, FalseProp, Prop, Parameter,
    Identifier, Uninstantiated, Instantiated, Binary, Quantified, quantifier,
)
from .parse import parse_prop
from .printer import print_prop


class LogicEngine(Protocol):
    """Operations the editing core needs from a logic backend."""

    def parse_prop(self, text: str) -> Prop: ...

    def print_prop(self, prop: Prop) -> str: ...

    def get_free_parameters(self, prop: Prop) -> List[Parameter]: ...

    def instantiate_free_parameter(self, prop: Prop, object_ident: str, ident: Identifier) -> Prop: ...

    def instantiate_free_parameter_by_index(self, prop: Prop, index: int, ident: Identifier) -> Prop: ...

    def bind_identifier(self, prop: Prop, kind: str, ident: Identifier, indices: Optional[Sequence[int]],
                        bind_name: str, type_name: str) -> Prop: ...

    def alpha_eq(self, left: Prop, right: Prop) -> bool: ...


# ---------------- free parameters ----------------

def get_free_parameters(prop: Prop) -> List[Parameter]:
    """Parameters not bound by an enclosing quantifier, left to right."""
    out: List[Parameter] = []

    def walk(p: Prop, bound: Tuple[str, ...]):
        if isinstance(p, Atom):
            out.extend(x for x in p.params if x.name not in bound)
        elif isinstance(p, Binary):
            walk(p.left, bound)
            walk(p.right, bound)
        elif isinstance(p, Quantified):
            walk(p.body, bound + (p.object_ident,))

    walk(prop, ())
    return out


# ---------------- substitution ----------------

def instantiate_free_parameter(prop: Prop, object_ident: str, ident: Identifier) -> Prop:
    """Replace every free, uninstantiated occurrence of `object_ident` by `ident`."""
    if isinstance(prop, Atom):
        params = tuple(
            Instantiated(ident) if isinstance(x, Uninstantiated) and x.name == object_ident else x
            for x in prop.params
        )
        return Atom(prop.name, params)
    if isinstance(prop, Binary):
        return type(prop)(
            instantiate_free_parameter(prop.left, object_ident, ident),
            instantiate_free_parameter(prop.right, object_ident, ident),
        )
    if isinstance(prop, Quantified):
        if prop.object_ident == object_ident:
            return prop
        return replace(prop, body=instantiate_free_parameter(prop.body, object_ident, ident))
    return prop


def instantiate_free_parameter_by_index(prop: Prop, index: int, ident: Identifier) -> Prop:
    """Instantiate the `index`-th free parameter (same order as get_free_parameters)."""
    counter = [0]

    def walk(p: Prop, bound: Tuple[str, ...]) -> Prop:
        if isinstance(p, Atom):
            params = []
            for x in p.params:
                if x.name not in bound:
                    if counter[0] == index:
                        x = Instantiated(ident)
                    counter[0] += 1
                params.append(x)
            return Atom(p.name, tuple(params))
        if isinstance(p, Binary):
            return type(p)(walk(p.left, bound), walk(p.right, bound))
        if isinstance(p, Quantified):
            return replace(p, body=walk(p.body, bound + (p.object_ident,)))
        return p

    if index < 0:
        raise ValueError("Parameter index must not be negative.")
    result = walk(prop, ())
    if counter[0] <= index:
        raise ValueError("Proposition has not enough parameters.")
    return result


def bind_identifier(prop: Prop, kind: str, ident: Identifier, indices: Optional[Iterable[int]],
                    bind_name: str, type_name: str) -> Prop:
    """Wrap `prop` in a quantifier of `kind`, turning chosen occurrences of `ident` into `bind_name`.

    Occurrences are counted left to right over instantiated parameters equal to
    `ident`; `indices=None` binds all of them.
    """
    wanted = None if indices is None else set(indices)
    if wanted is not None:
        total = occurrences_of(prop, ident)
        if any(not 0 <= i < total for i in wanted):
            raise ValueError(f"Occurrence index out of range, {ident.name} occurs {total} time(s).")
    counter = [0]

    def walk(p: Prop) -> Prop:
        if isinstance(p, Atom):
            params = []
            for x in p.params:
                if isinstance(x, Instantiated) and x.ident == ident:
                    if wanted is None or counter[0] in wanted:
                        x = Uninstantiated(bind_name)
                    counter[0] += 1
                params.append(x)
            return Atom(p.name, tuple(params))
        if isinstance(p, Binary):
            return type(p)(walk(p.left), walk(p.right))
        if isinstance(p, Quantified):
            return replace(p, body=walk(p.body))
        return p

    return quantifier(kind, bind_name, type_name, walk(prop))


def occurrences_of(prop: Prop, ident: Identifier) -> int:
    """Number of instantiated parameters equal to `ident` (the index space of bind_identifier)."""
    n = 0

    def walk(p: Prop):
        nonlocal n
        if isinstance(p, Atom):
            n += sum(1 for x in p.params if isinstance(x, Instantiated) and x.ident == ident)
        elif isinstance(p, Binary):
            walk(p.left)
            walk(p.right)
        elif isinstance(p, Quantified):
            walk(p.body)

    walk(prop)
    return n


def instantiated_identifiers(prop: Prop) -> List[Identifier]:
    """Distinct identifiers occurring as instantiated parameters, in first-occurrence order."""
    seen: List[Identifier] = []
    for x in get_free_parameters(prop):
        if isinstance(x, Instantiated) and x.ident not in seen:
            seen.append(x.ident)
    return seen


# ---------------- alpha equivalence ----------------

def alpha_eq(left: Prop, right: Prop) -> bool:
    """Structural equality up to renaming of quantifier binders."""

    def eq(a: Prop, b: Prop, env: Tuple[Tuple[str, str], ...]) -> bool:
        if isinstance(a, (TrueProp, FalseProp)) or isinstance(b, (TrueProp, FalseProp)):
            return type(a) is type(b)
        if isinstance(a, Binary):
            return type(a) is type(b) and eq(a.left, b.left, env) and eq(a.right, b.right, env)
        if isinstance(a, Quantified):
            if type(a) is not type(b) or a.object_type_ident != b.object_type_ident:
                return False
            return eq(a.body, b.body, env + ((a.object_ident, b.object_ident),))
        if isinstance(a, Atom) and isinstance(b, Atom):
            if a.name != b.name or len(a.params) != len(b.params):
                return False
            for x, y in zip(a.params, b.params):
                if isinstance(x, Uninstantiated) and isinstance(y, Uninstantiated):
                    pair = next((p for p in reversed(env) if p[0] == x.name or p[1] == y.name), None)
                    if pair is None:
                        # both free
                        if x.name != y.name:
                            return False
                    elif pair != (x.name, y.name):
                        return False
                elif x != y:
                    return False
            return True
        return False

    return eq(left, right, ())


class ReferenceLogicEngine:
    """In-process LogicEngine over natded.logic.ast."""

    def parse_prop(self, text: str) -> Prop:
        return parse_prop(text)

    def print_prop(self, prop: Prop) -> str:
        return print_prop(prop)

    def get_free_parameters(self, prop: Prop) -> List[Parameter]:
        return get_free_parameters(prop)

    def instantiate_free_parameter(self, prop: Prop, object_ident: str, ident: Identifier) -> Prop:
        return instantiate_free_parameter(prop, object_ident, ident)

    def instantiate_free_parameter_by_index(self, prop: Prop, index: int, ident: Identifier) -> Prop:
        return instantiate_free_parameter_by_index(prop, index, ident)

    def bind_identifier(self, prop: Prop, kind: str, ident: Identifier, indices: Optional[Sequence[int]],
                        bind_name: str, type_name: str) -> Prop:
        return bind_identifier(prop, kind, ident, indices, bind_name, type_name)

    def alpha_eq(self, left: Prop, right: Prop) -> bool:
        return alpha_eq(left, right)
