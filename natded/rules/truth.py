from __future__ import annotations

from ..core.tree import leaf_from_prop
from ..errors import SelectionError
from ..logic.ast import FalseProp, TrueProp
from .base import ProofRuleHandler, RewritePlan, RuleParams, conclusion_prop, require_prop


class TrueIntroRuleHandler(ProofRuleHandler):
    rule_id = "TrueIntro"
    latex = r"\top I"

    def check_upwards(self, nodes):
        super().check_upwards(nodes)
        require_prop(nodes[0], TrueProp, "Conclusion is not truth.")

    def check_downwards(self, nodes):
        raise SelectionError("Cannot reason downwards with this rule.")

    def handle_upwards(self, params: RuleParams) -> RewritePlan:
        return RewritePlan(proof_tree_changes=[self.refine(params.selected[0], [])])


class FalsumElimRuleHandler(ProofRuleHandler):
    rule_id = "FalsumElim"
    latex = r"\bot E"

    def check_upwards(self, nodes):
        super().check_upwards(nodes)
        conclusion_prop(nodes[0])

    def check_downwards(self, nodes):
        super().check_downwards(nodes)
        if len(nodes) != 1:
            raise SelectionError("Cannot apply this rule on multiple nodes.")
        require_prop(nodes[0], FalseProp, "Conclusion is not ⊥.")

    def handle_upwards(self, params: RuleParams) -> RewritePlan:
        return RewritePlan(proof_tree_changes=[
            self.refine(params.selected[0], [leaf_from_prop(FalseProp())]),
        ])

    def handle_downwards(self, params: RuleParams):
        sel = params.selected[0]
        new_conclusion = yield from self.prompt_prop(params, "Enter new conclusion.", "A")
        if new_conclusion is None:
            return None
        return RewritePlan(proof_tree_changes=[self.extend_below(sel, new_conclusion)])
