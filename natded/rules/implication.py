from __future__ import annotations

from ..core.assumptions import Assumption
from ..core.context import context_from_tree
from ..core.tree import ProofTreeNode, PropIsTrue, leaf_from_prop, new_node_id
from ..errors import CompatibilityError, SelectionError, ShapeError
from ..logic.ast import Impl
from .base import ProofRuleHandler, RewritePlan, RuleParams, conclusion_prop, require_prop


class ImplIntroRuleHandler(ProofRuleHandler):
    rule_id = "ImplIntro"
    latex = r"{\supset}I"

    def check_upwards(self, nodes):
        super().check_upwards(nodes)
        require_prop(nodes[0], Impl, "Conclusion is not an implication.")

    def check_downwards(self, nodes):
        raise SelectionError("Cannot reason downwards with this rule.")

    def handle_upwards(self, params: RuleParams) -> RewritePlan:
        sel = params.selected[0]
        prop = conclusion_prop(sel)
        ident = params.fresh_identifier()
        return RewritePlan(
            proof_tree_changes=[self.refine(sel, [leaf_from_prop(prop.right)], ident)],
            additional_assumptions=self.owned_by(sel, sel.node.id, Assumption.prop_is_true(ident, prop.left)),
        )


class ImplElimRuleHandler(ProofRuleHandler):
    """Modus ponens. Downwards it either opens the antecedent as a new goal
    below a single implication, or combines an implication with a proof of its
    antecedent.
    """
    rule_id = "ImplElim"
    latex = r"\supset E"

    def check_upwards(self, nodes):
        super().check_upwards(nodes)
        conclusion_prop(nodes[0])

    def check_downwards(self, nodes):
        super().check_downwards(nodes)
        if len(nodes) == 1:
            require_prop(nodes[0], Impl, "Conclusion is not an implication.")
            return
        if len(nodes) != 2:
            raise SelectionError("Select an implication and, optionally, a proof of its antecedent.")
        props = [conclusion_prop(n, "Cannot apply modus ponens to a type judgement.") for n in nodes]
        if not any(isinstance(p, Impl) for p in props):
            raise ShapeError("One of the premises has to be an implication.")

    def handle_upwards(self, params: RuleParams):
        sel = params.selected[0]
        prop = conclusion_prop(sel)
        antecedent = yield from self.prompt_prop(params, "Enter antecedent of implication.", "A")
        if antecedent is None:
            return None
        return RewritePlan(proof_tree_changes=[
            self.refine(sel, [leaf_from_prop(Impl(antecedent, prop)), leaf_from_prop(antecedent)]),
        ])

    def handle_downwards(self, params: RuleParams) -> RewritePlan:
        if len(params.selected) == 1:
            sel = params.selected[0]
            prop = conclusion_prop(sel)
            return RewritePlan(proof_tree_changes=[
                self.extend_below(sel, prop.right, [leaf_from_prop(prop.left)]),
            ])

        fst, snd = params.selected
        fst_prop, snd_prop = conclusion_prop(fst), conclusion_prop(snd)
        if isinstance(fst_prop, Impl) and fst_prop.left == snd_prop:
            impl, antecedent = fst, snd
        elif isinstance(snd_prop, Impl) and snd_prop.left == fst_prop:
            impl, antecedent = snd, fst
        else:
            impl, antecedent = (fst, snd) if isinstance(fst_prop, Impl) else (snd, fst)
            engine = params.engine
            raise CompatibilityError(
                f"Antecedent {engine.print_prop(conclusion_prop(impl).left)} does not match "
                f"{engine.print_prop(conclusion_prop(antecedent))}.")

        root = ProofTreeNode(new_node_id(), [impl.node, antecedent.node], self.rule(),
                             PropIsTrue(conclusion_prop(impl).right))
        return RewritePlan(
            removed_context_ids=[fst.reasoning_context_id, snd.reasoning_context_id],
            new_contexts=[context_from_tree(root)],
        )
