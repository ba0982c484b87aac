from __future__ import annotations

from ..core.assumptions import Assumption
from ..core.context import context_from_tree
from ..core.ids import BINDER_ALPHABET, IdentifierGenerator
from ..core.tree import (
    ProofTreeNode, PropIsTrue, TypeJudgement, leaf_from_prop, leaf_from_type_judgement, new_node_id,
)
from ..errors import CompatibilityError, InputError, SelectionError, ShapeError
from ..logic.ast import Exists, ForAll, Identifier, Prop
from ..logic.engine import LogicEngine, instantiated_identifiers, occurrences_of
from .base import (
    BindingPrompt, ProofRuleHandler, RewritePlan, RuleParams, conclusion_prop, is_type_judgement, require_prop,
)


def binder_name(engine: LogicEngine, prop: Prop) -> str:
    """First name from the binder alphabet that is not a free parameter of `prop`."""
    taken = {p.name for p in engine.get_free_parameters(prop)}
    gen = IdentifierGenerator(BINDER_ALPHABET)
    name = gen()
    while name in taken:
        name = gen()
    return name


def split_judgements(nodes, message: str):
    """Return (proposition node, type judgement node) of a two-node selection."""
    if len(nodes) != 2:
        raise SelectionError(message)
    fst, snd = nodes
    if is_type_judgement(fst) == is_type_judgement(snd):
        if is_type_judgement(fst):
            raise ShapeError("Cannot combine two type judgements.")
        raise ShapeError("One of the premises has to be a type judgement.")
    return (snd, fst) if is_type_judgement(fst) else (fst, snd)


def check_occurrences(prop: Prop, ident: Identifier, indices):
    """Reject a binding that picks no occurrence of `ident` or names one that does not exist."""
    total = occurrences_of(prop, ident)
    if total == 0:
        raise InputError(f"{ident.name} does not occur in the proposition.")
    if indices is not None:
        for i in indices:
            if not 0 <= i < total:
                raise InputError(f"{ident.name} occurs {total} time(s), there is no occurrence {i}.")


class ForAllIntroRuleHandler(ProofRuleHandler):
    rule_id = "ForAllIntro"
    latex = r"\forall I"

    def check_upwards(self, nodes):
        super().check_upwards(nodes)
        require_prop(nodes[0], ForAll, "Conclusion is not universally quantified.")

    def check_downwards(self, nodes):
        raise SelectionError("Cannot reason downwards with this rule.")

    def handle_upwards(self, params: RuleParams) -> RewritePlan:
        sel = params.selected[0]
        prop = conclusion_prop(sel)
        ident = params.fresh_identifier()
        body = params.engine.instantiate_free_parameter(prop.body, prop.object_ident, ident)
        return RewritePlan(
            proof_tree_changes=[self.refine(sel, [leaf_from_prop(body)], ident)],
            additional_assumptions=self.owned_by(sel, sel.node.id,
                                                 Assumption.of_datatype(ident, prop.object_type_ident)),
        )


class ForAllElimRuleHandler(ProofRuleHandler):
    """Upwards: generalise chosen occurrences of a value into a universal premise."""
    rule_id = "ForAllElim"
    latex = r"\forall E"

    def check_upwards(self, nodes):
        super().check_upwards(nodes)
        conclusion_prop(nodes[0])

    def check_downwards(self, nodes):
        super().check_downwards(nodes)
        prop_node, _ = split_judgements(nodes, "Can apply this rule only when both premises are given.")
        require_prop(prop_node, ForAll, "One of the premises has to be a universal quantification.")

    def handle_upwards(self, params: RuleParams):
        sel = params.selected[0]
        prop = conclusion_prop(sel)
        engine = params.engine
        candidates = instantiated_identifiers(prop)

        answer = yield BindingPrompt("Click on the parameters you want to bind.", prop, None, candidates)
        if answer is None:
            return None
        ident = answer.identifier
        if ident is None:
            ident = yield from self.prompt_assumption_ident(
                params, "Select the assumption you apply the universal quantification on.")
            if ident is None:
                return None

        type_name = self.assumption_type(params, ident)
        check_occurrences(prop, ident, answer.indices)
        bound = engine.bind_identifier(prop, "ForAll", ident, answer.indices, binder_name(engine, prop), type_name)
        return RewritePlan(proof_tree_changes=[
            self.refine(sel, [leaf_from_prop(bound), leaf_from_type_judgement(ident, type_name)]),
        ])

    def handle_downwards(self, params: RuleParams) -> RewritePlan:
        prop_node, type_node = split_judgements(params.selected, "Need exactly two premises.")
        prop = conclusion_prop(prop_node)
        judgement: TypeJudgement = type_node.node.conclusion
        if judgement.type_name != prop.object_type_ident:
            raise CompatibilityError(
                f"{judgement.ident.name} has type {judgement.type_name}, expected {prop.object_type_ident}.")
        body = params.engine.instantiate_free_parameter(prop.body, prop.object_ident, judgement.ident)
        root = ProofTreeNode(new_node_id(), [prop_node.node, type_node.node], self.rule(), PropIsTrue(body))
        return RewritePlan(
            removed_context_ids=[n.reasoning_context_id for n in params.selected],
            new_contexts=[context_from_tree(root)],
        )


class ExistsIntroRuleHandler(ProofRuleHandler):
    rule_id = "ExistsIntro"
    latex = r"\exists I"

    def check_upwards(self, nodes):
        super().check_upwards(nodes)
        require_prop(nodes[0], Exists, "Conclusion is not an existential quantification.")

    def check_downwards(self, nodes):
        super().check_downwards(nodes)
        split_judgements(nodes, "Need exactly two nodes to form an existential proposition.")

    def handle_upwards(self, params: RuleParams):
        sel = params.selected[0]
        prop = conclusion_prop(sel)
        ident = yield from self.prompt_assumption_ident(
            params, "Select the witness of the existential quantification.")
        if ident is None:
            return None
        witness_type = self.assumption_type(params, ident)
        if witness_type != prop.object_type_ident:
            raise CompatibilityError(f"{ident.name} has type {witness_type}, expected {prop.object_type_ident}.")
        body = params.engine.instantiate_free_parameter(prop.body, prop.object_ident, ident)
        return RewritePlan(proof_tree_changes=[
            self.refine(sel, [leaf_from_type_judgement(ident, prop.object_type_ident), leaf_from_prop(body)]),
        ])

    def handle_downwards(self, params: RuleParams):
        prop_node, type_node = split_judgements(params.selected, "Need exactly two premises.")
        prop = conclusion_prop(prop_node)
        judgement: TypeJudgement = type_node.node.conclusion

        answer = yield BindingPrompt("Click on the parameters you want to bind.", prop, judgement.ident,
                                     [judgement.ident])
        if answer is None:
            return None
        engine = params.engine
        check_occurrences(prop, judgement.ident, answer.indices)
        bound = engine.bind_identifier(prop, "Exists", judgement.ident, answer.indices,
                                       binder_name(engine, prop), judgement.type_name)
        root = ProofTreeNode(new_node_id(), [type_node.node, prop_node.node], self.rule(), PropIsTrue(bound))
        return RewritePlan(
            removed_context_ids=[n.reasoning_context_id for n in params.selected],
            new_contexts=[context_from_tree(root)],
        )


class ExistsElimRuleHandler(ProofRuleHandler):
    rule_id = "ExistsElim"
    latex = r"\exists E"

    def check_upwards(self, nodes):
        super().check_upwards(nodes)
        conclusion_prop(nodes[0])

    def check_downwards(self, nodes):
        super().check_downwards(nodes)
        if len(nodes) != 1:
            raise SelectionError("Cannot apply this rule on multiple nodes.")
        require_prop(nodes[0], Exists, "Conclusion is not an existential quantification.")

    def _witness_assumptions(self, params: RuleParams, sel, exists: Exists, owner_id: str):
        obj, hyp = params.fresh_identifier(), params.fresh_identifier()
        body = params.engine.instantiate_free_parameter(exists.body, exists.object_ident, obj)
        assumptions = self.owned_by(sel, owner_id,
                                    Assumption.of_datatype(obj, exists.object_type_ident),
                                    Assumption.prop_is_true(hyp, body))
        return (obj, hyp), assumptions

    def handle_upwards(self, params: RuleParams):
        sel = params.selected[0]
        goal = conclusion_prop(sel)
        exists = yield from self.prompt_prop(
            params, "Enter existential quantification you want to eliminate.", "∃x:t. A(x)")
        if exists is None:
            return None
        if not isinstance(exists, Exists):
            raise InputError("You did not enter an existential quantification.")
        idents, assumptions = self._witness_assumptions(params, sel, exists, sel.node.id)
        return RewritePlan(
            proof_tree_changes=[self.refine(sel, [leaf_from_prop(exists), leaf_from_prop(goal)], *idents)],
            additional_assumptions=assumptions,
        )

    def handle_downwards(self, params: RuleParams):
        sel = params.selected[0]
        exists = conclusion_prop(sel)
        new_conclusion = yield from self.prompt_prop(params, "Enter new conclusion.", "C")
        if new_conclusion is None:
            return None
        node_id = new_node_id()
        idents, assumptions = self._witness_assumptions(params, sel, exists, node_id)
        change = self.extend_below(sel, new_conclusion, [leaf_from_prop(new_conclusion)],
                                   node_id=node_id, idents=idents)
        return RewritePlan(proof_tree_changes=[change], additional_assumptions=assumptions)
