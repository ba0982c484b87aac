from __future__ import annotations

from ..core.context import context_from_tree
from ..core.tree import ProofTreeNode, PropIsTrue, leaf_from_prop, new_node_id
from ..errors import SelectionError, ShapeError
from ..logic.ast import And
from .base import ProofRuleHandler, RewritePlan, RuleParams, conclusion_prop, require_prop


class AndIntroRuleHandler(ProofRuleHandler):
    rule_id = "AndIntro"
    latex = r"\land I"

    def check_upwards(self, nodes):
        super().check_upwards(nodes)
        require_prop(nodes[0], And, "Conclusion is not a conjunction.")

    def check_downwards(self, nodes):
        super().check_downwards(nodes)
        if len(nodes) != 2:
            raise SelectionError("Need exactly two nodes to combine them to a conjunction.")
        if any(not isinstance(n.node.conclusion, PropIsTrue) for n in nodes):
            raise ShapeError("Cannot combine datatype to conjunction.")

    def handle_upwards(self, params: RuleParams) -> RewritePlan:
        sel = params.selected[0]
        prop = conclusion_prop(sel)
        return RewritePlan(proof_tree_changes=[
            self.refine(sel, [leaf_from_prop(prop.left), leaf_from_prop(prop.right)]),
        ])

    def handle_downwards(self, params: RuleParams) -> RewritePlan:
        fst, snd = params.selected
        root = ProofTreeNode(
            new_node_id(), [fst.node, snd.node], self.rule(),
            PropIsTrue(And(conclusion_prop(fst), conclusion_prop(snd))),
        )
        return RewritePlan(
            removed_context_ids=[fst.reasoning_context_id, snd.reasoning_context_id],
            new_contexts=[context_from_tree(root)],
        )


class _AndElimRuleHandler(ProofRuleHandler):
    """Shared shape of both conjunction eliminations; `side` picks the kept conjunct."""
    side = "left"

    def check_upwards(self, nodes):
        super().check_upwards(nodes)
        conclusion_prop(nodes[0])

    def check_downwards(self, nodes):
        super().check_downwards(nodes)
        if len(nodes) != 1:
            raise SelectionError("Cannot apply this rule on multiple nodes.")
        require_prop(nodes[0], And, "Conclusion is not a conjunction.")

    def handle_upwards(self, params: RuleParams):
        sel = params.selected[0]
        prop = conclusion_prop(sel)
        other_side = "second" if self.side == "left" else "first"
        other = yield from self.prompt_prop(params, f"Enter {other_side} component of conjunction.",
                                            "B" if self.side == "left" else "A")
        if other is None:
            return None
        conjunction = And(prop, other) if self.side == "left" else And(other, prop)
        return RewritePlan(proof_tree_changes=[self.refine(sel, [leaf_from_prop(conjunction)])])

    def handle_downwards(self, params: RuleParams) -> RewritePlan:
        sel = params.selected[0]
        prop = conclusion_prop(sel)
        kept = prop.left if self.side == "left" else prop.right
        return RewritePlan(proof_tree_changes=[self.extend_below(sel, kept)])


class AndElimFstRuleHandler(_AndElimRuleHandler):
    rule_id = "AndElimFst"
    latex = r"\land E_1"
    side = "left"


class AndElimSndRuleHandler(_AndElimRuleHandler):
    rule_id = "AndElimSnd"
    latex = r"\land E_2"
    side = "right"
