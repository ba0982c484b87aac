from __future__ import annotations
from typing import Dict, List, Optional, Tuple

from ..core.tree import Conclusion, ProofTreeNode, ProofTreeRule, PropIsTrue, iter_nodes, open_goals, to_kernel_tree
from ..logic.printer import print_prop, print_type_judgement
from ..rules import NATURAL_DEDUCTION_RULES

_LATEX_LABELS = {r.id: r.handler.latex for r in NATURAL_DEDUCTION_RULES}
_LATEX_LABELS.update({"Sorry": "sorry", "AlphaEquivalent": r"\alpha\text{-Eq}"})

_LATEX_SYMBOLS = {
    "∧": r"\land ", "∨": r"\lor ", "⊃": r"\supset ", "⊤": r"\top ", "⊥": r"\bot ",
    "∀": r"\forall ", "∃": r"\exists ",
}

_INFERENCES = {0: "UnaryInfC", 1: "UnaryInfC", 2: "BinaryInfC", 3: "TrinaryInfC", 4: "QuaternaryInfC", 5: "QuinaryInfC"}


def rule_label(rule: ProofTreeRule) -> str:
    """LaTeX label of a rule, with the names of introduced hypotheses as superscript."""
    names = [i.name for i in rule.idents]
    if rule.kind == "Ident":
        return names[0] if names else ""
    label = _LATEX_LABELS.get(rule.kind, rule.kind)
    if rule.kind in ("ImplIntro", "ForAllIntro"):
        return f"{label}^{names[0]}"
    if rule.kind in ("OrElim", "ExistsElim"):
        return label + "^{" + ", ".join(names) + "}"
    return label


def rule_text(rule: Optional[ProofTreeRule]) -> str:
    if rule is None:
        return "?"
    if rule.idents:
        return f"{rule.kind}[{', '.join(i.name for i in rule.idents)}]"
    return rule.kind


def conclusion_text(conclusion: Conclusion, engine=None) -> str:
    if isinstance(conclusion, PropIsTrue):
        return engine.print_prop(conclusion.prop) if engine is not None else print_prop(conclusion.prop)
    return print_type_judgement(conclusion.ident, conclusion.type_name)


def assumption_text(assumption, engine=None) -> str:
    if assumption.is_datatype:
        return f"{assumption.ident.name} : {assumption.datatype}"
    prop = engine.print_prop(assumption.prop) if engine is not None else print_prop(assumption.prop)
    return f"{assumption.ident.name} : {prop}"


def latex_prop(text: str) -> str:
    return "".join(_LATEX_SYMBOLS.get(ch, ch) for ch in text)


# ---------------- short ids ----------------

def short_ids(session) -> Tuple[List[str], Dict[str, List[str]]]:
    """Context ids in display order and, per context, node ids in pre-order.
    `show` numbers both from 1."""
    ctx_ids = [c.id for c in session.contexts]
    nodes = {c.id: [n.id for n in iter_nodes(c.proof_tree)] for c in session.contexts}
    return ctx_ids, nodes


# ---------------- plain text ----------------

def tree_lines(root: ProofTreeNode, engine=None, numbering: Optional[Dict[str, int]] = None,
               selected: Optional[str] = None) -> List[str]:
    lines: List[str] = []

    def walk(node: ProofTreeNode, depth: int):
        num = f"{numbering[node.id]:>2}. " if numbering else ""
        mark = "*" if node.id == selected else " "
        lines.append(f"{mark}{'  ' * depth}{num}{conclusion_text(node.conclusion, engine)}    [{rule_text(node.rule)}]")
        for p in node.premises:
            walk(p, depth + 1)

    walk(root, 0)
    return lines


def to_text(session) -> str:
    engine = session.engine
    ctx_ids, nodes = short_ids(session)
    lines: List[str] = []
    goal = engine.print_prop(session.goal) if session.goal is not None else "-"
    status = "complete" if session.is_complete() else f"{len(open_goals(session.primary_context.proof_tree))} open goal(s)"
    lines.append(f"Goal: {goal}  ({status})")
    for i, ctx in enumerate(session.contexts, 1):
        primary = " (main)" if ctx.id == session.primary_context_id else ""
        lines.append(f"#{i}{primary} at ({ctx.x:g}, {ctx.y:g})")
        numbering = {nid: k for k, nid in enumerate(nodes[ctx.id], 1)}
        lines.extend(tree_lines(ctx.proof_tree, engine, numbering, ctx.selected_node_id))
    entries = session.assumptions.all()
    if entries:
        lines.append("Assumptions:")
        for i, a in enumerate(entries):
            owner = ctx_ids.index(a.owning_reasoning_ctx_id) + 1 if a.owning_reasoning_ctx_id in ctx_ids else "?"
            lines.append(f"  [{i}] {assumption_text(a.assumption, engine)}    (#{owner})")
    if session.pending is not None:
        lines.append(prompt_text(session.pending.prompt, engine))
    return "\n".join(lines)


def prompt_text(prompt, engine=None) -> str:
    lines = [f"? {prompt.title}"]
    if prompt.kind == "prop" and prompt.placeholder:
        lines.append(f"  e.g. {prompt.placeholder}   (answer TEXT)")
    elif prompt.kind == "assumption":
        for i, a in enumerate(prompt.options):
            lines.append(f"  [{i}] {assumption_text(a.assumption, engine)}")
        lines.append("  (pick N)")
    elif prompt.kind == "identifier":
        for name, idents in prompt.options.items():
            opts = ", ".join(f"[{i}] {x.name}#{x.unique_id}" for i, x in enumerate(idents))
            lines.append(f"  {name}: {opts}")
        lines.append("  (pick N ... one per name)")
    elif prompt.kind == "binding":
        printed = engine.print_prop(prompt.prop) if engine is not None else print_prop(prompt.prop)
        lines.append(f"  in: {printed}")
        if prompt.identifier is not None:
            lines.append(f"  binding: {prompt.identifier.name}")
        for i, x in enumerate(prompt.candidates):
            lines.append(f"  [{i}] {x.name}#{x.unique_id}")
        lines.append("  (bind [IDENT_INDEX] I,J   or   bind - I,J)")
    return "\n".join(lines)


# ---------------- LaTeX / Markdown ----------------

def to_bussproofs(root: ProofTreeNode, engine=None) -> str:
    """bussproofs source of a proof tree; unjustified leaves become bare axioms."""
    lines: List[str] = [r"\begin{prooftree}"]

    def walk(node: ProofTreeNode):
        concl = latex_prop(conclusion_text(node.conclusion, engine))
        if node.rule is None:
            lines.append(f"    \\AxiomC{{${concl}$}}")
            return
        for p in node.premises:
            walk(p)
        if not node.premises:
            lines.append(r"    \AxiomC{}")
        lines.append(f"    \\RightLabel{{${rule_label(node.rule)}$}}")
        lines.append(f"    \\{_INFERENCES.get(len(node.premises), 'UnaryInfC')}{{${concl}$}}")

    walk(root)
    lines.append(r"\end{prooftree}")
    return "\n".join(lines)


def to_markdown(session) -> str:
    engine = session.engine
    lines: List[str] = ["# Proof Report\n"]
    goal = engine.print_prop(session.goal) if session.goal is not None else "-"
    lines.append(f"**Goal:** `{goal}`")
    if session.is_complete():
        lines.append("**Status:** ✓ complete\n")
    else:
        n = len(open_goals(session.primary_context.proof_tree))
        lines.append(f"**Status:** {n} open goal(s)\n")

    lines.append("## Reasoning contexts\n")
    for i, ctx in enumerate(session.contexts, 1):
        tag = " (main)" if ctx.id == session.primary_context_id else ""
        lines.append(f"### #{i}{tag}\n")
        lines.append("```")
        lines.extend(tree_lines(ctx.proof_tree, engine))
        lines.append("```\n")

    entries = session.assumptions.all()
    lines.append("## Assumptions\n")
    if entries:
        for a in entries:
            lines.append(f"- `{assumption_text(a.assumption, engine)}`")
    else:
        lines.append("*none*")
    lines.append("")

    lines.append("## LaTeX\n")
    lines.append("```latex")
    lines.append(to_bussproofs(to_kernel_tree(session.primary_context.proof_tree), engine))
    lines.append("```")
    return "\n".join(lines) + "\n"
