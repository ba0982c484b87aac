from __future__ import annotations

from .ast import Atom, And, Or, Impl, ForAll, Exists, TrueProp, FalseProp, Prop, Parameter, Identifier, Instantiated

_CONNECTIVES = {And: "∧", Or: "∨", Impl: "⊃"}
_PRECEDENCE = {And: 4, Or: 3, Impl: 2, ForAll: 1, Exists: 1}
_LEFT_ASSOC = (And, Or)
_RIGHT_ASSOC = (Impl,)


def _precedence(prop: Prop) -> int:
    return _PRECEDENCE.get(type(prop), 999)


def print_parameter(param: Parameter) -> str:
    if isinstance(param, Instantiated):
        return param.ident.name
    return param.name


def print_type_judgement(ident: Identifier, type_name: str) -> str:
    return f"{ident.name} : {type_name}"


def print_prop(prop: Prop) -> str:
    """Canonical display form, with the minimum number of parentheses."""
    if isinstance(prop, Atom):
        if not prop.params:
            return prop.name
        return f"{prop.name}({', '.join(print_parameter(p) for p in prop.params)})"
    if isinstance(prop, TrueProp):
        return "⊤"
    if isinstance(prop, FalseProp):
        return "⊥"
    if isinstance(prop, ForAll):
        return f"∀{prop.object_ident}:{prop.object_type_ident}. {print_prop(prop.body)}"
    if isinstance(prop, Exists):
        return f"∃{prop.object_ident}:{prop.object_type_ident}. {print_prop(prop.body)}"

    own = _precedence(prop)
    lp, rp = _precedence(prop.left), _precedence(prop.right)
    wrap_left = own > lp or (own == lp and isinstance(prop, _RIGHT_ASSOC))
    wrap_right = own > rp or (own == rp and isinstance(prop, _LEFT_ASSOC))
    left = f"({print_prop(prop.left)})" if wrap_left else print_prop(prop.left)
    right = f"({print_prop(prop.right)})" if wrap_right else print_prop(prop.right)
    return f"{left} {_CONNECTIVES[type(prop)]} {right}"
