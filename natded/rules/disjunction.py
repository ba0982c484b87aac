from __future__ import annotations

from ..core.assumptions import Assumption
from ..core.tree import leaf_from_prop, new_node_id
from ..errors import InputError, SelectionError
from ..logic.ast import Or
from .base import ProofRuleHandler, RewritePlan, RuleParams, conclusion_prop, require_prop


class _OrIntroRuleHandler(ProofRuleHandler):
    side = "left"

    def check_upwards(self, nodes):
        super().check_upwards(nodes)
        require_prop(nodes[0], Or, "Conclusion is not a disjunction.")

    def check_downwards(self, nodes):
        super().check_downwards(nodes)
        if len(nodes) != 1:
            raise SelectionError("Cannot apply this rule on multiple nodes.")
        conclusion_prop(nodes[0])

    def handle_upwards(self, params: RuleParams) -> RewritePlan:
        sel = params.selected[0]
        prop = conclusion_prop(sel)
        kept = prop.left if self.side == "left" else prop.right
        return RewritePlan(proof_tree_changes=[self.refine(sel, [leaf_from_prop(kept)])])

    def handle_downwards(self, params: RuleParams):
        sel = params.selected[0]
        prop = conclusion_prop(sel)
        other_side = "second" if self.side == "left" else "first"
        other = yield from self.prompt_prop(params, f"Enter {other_side} component of disjunction.",
                                            "B" if self.side == "left" else "A")
        if other is None:
            return None
        disjunction = Or(prop, other) if self.side == "left" else Or(other, prop)
        return RewritePlan(proof_tree_changes=[self.extend_below(sel, disjunction)])


class OrIntroFstRuleHandler(_OrIntroRuleHandler):
    rule_id = "OrIntroFst"
    latex = r"\lor I_1"
    side = "left"


class OrIntroSndRuleHandler(_OrIntroRuleHandler):
    rule_id = "OrIntroSnd"
    latex = r"\lor I_2"
    side = "right"


class OrElimRuleHandler(ProofRuleHandler):
    """Case analysis; each case hypothesis is scoped to the eliminating node."""
    rule_id = "OrElim"
    latex = r"\lor E"

    def check_upwards(self, nodes):
        super().check_upwards(nodes)
        conclusion_prop(nodes[0])

    def check_downwards(self, nodes):
        super().check_downwards(nodes)
        if len(nodes) != 1:
            raise SelectionError("Cannot apply this rule on multiple nodes.")
        require_prop(nodes[0], Or, "Conclusion is not a disjunction.")

    def _case_assumptions(self, params: RuleParams, sel, disjunction: Or, owner_id: str):
        fst, snd = params.fresh_identifier(), params.fresh_identifier()
        assumptions = self.owned_by(sel, owner_id,
                                    Assumption.prop_is_true(fst, disjunction.left),
                                    Assumption.prop_is_true(snd, disjunction.right))
        return (fst, snd), assumptions

    def handle_upwards(self, params: RuleParams):
        sel = params.selected[0]
        goal = conclusion_prop(sel)
        disjunction = yield from self.prompt_prop(params, "Enter the disjunction you want to eliminate from.", "A ∨ B")
        if disjunction is None:
            return None
        if not isinstance(disjunction, Or):
            raise InputError("Your input is not a disjunction.")
        idents, assumptions = self._case_assumptions(params, sel, disjunction, sel.node.id)
        premises = [leaf_from_prop(disjunction), leaf_from_prop(goal), leaf_from_prop(goal)]
        return RewritePlan(
            proof_tree_changes=[self.refine(sel, premises, *idents)],
            additional_assumptions=assumptions,
        )

    def handle_downwards(self, params: RuleParams):
        sel = params.selected[0]
        disjunction = conclusion_prop(sel)
        new_conclusion = yield from self.prompt_prop(params, "Enter new conclusion.", "C")
        if new_conclusion is None:
            return None
        node_id = new_node_id()
        idents, assumptions = self._case_assumptions(params, sel, disjunction, node_id)
        change = self.extend_below(sel, new_conclusion,
                                   [leaf_from_prop(new_conclusion), leaf_from_prop(new_conclusion)],
                                   node_id=node_id, idents=idents)
        return RewritePlan(proof_tree_changes=[change], additional_assumptions=assumptions)
