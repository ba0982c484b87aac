from __future__ import annotations
from dataclasses import dataclass
from typing import List

from ..errors import InputError
from .base import (
    DIRECTIONS, DOWNWARDS, UPWARDS, AssumptionPrompt, BindingAnswer, BindingPrompt, IdentifierPrompt,
    ProofRuleHandler, ProofTreeChange, Prompt, PropPrompt, RewritePlan, RuleParams, SelectedProofTreeNode,
    normalize_direction,
)
from .conjunction import AndElimFstRuleHandler, AndElimSndRuleHandler, AndIntroRuleHandler
from .disjunction import OrElimRuleHandler, OrIntroFstRuleHandler, OrIntroSndRuleHandler
from .implication import ImplElimRuleHandler, ImplIntroRuleHandler
from .quantifiers import (
    ExistsElimRuleHandler, ExistsIntroRuleHandler, ForAllElimRuleHandler, ForAllIntroRuleHandler,
)
from .truth import FalsumElimRuleHandler, TrueIntroRuleHandler


@dataclass(frozen=True)
class NaturalDeductionRule:
    id: str
    name: str
    handler: ProofRuleHandler


NATURAL_DEDUCTION_RULES: List[NaturalDeductionRule] = [
    NaturalDeductionRule("TrueIntro", "Truth Introduction", TrueIntroRuleHandler()),
    NaturalDeductionRule("FalsumElim", "Falsum Elimination", FalsumElimRuleHandler()),
    NaturalDeductionRule("AndIntro", "And Introduction", AndIntroRuleHandler()),
    NaturalDeductionRule("AndElimFst", "And Elimination (first)", AndElimFstRuleHandler()),
    NaturalDeductionRule("AndElimSnd", "And Elimination (second)", AndElimSndRuleHandler()),
    NaturalDeductionRule("ImplIntro", "Implication Introduction", ImplIntroRuleHandler()),
    NaturalDeductionRule("ImplElim", "Implication Elimination", ImplElimRuleHandler()),
    NaturalDeductionRule("OrIntroFst", "Or Introduction (first)", OrIntroFstRuleHandler()),
    NaturalDeductionRule("OrIntroSnd", "Or Introduction (second)", OrIntroSndRuleHandler()),
    NaturalDeductionRule("OrElim", "Or Elimination", OrElimRuleHandler()),
    NaturalDeductionRule("ForAllIntro", "Universal Introduction", ForAllIntroRuleHandler()),
    NaturalDeductionRule("ForAllElim", "Universal Elimination", ForAllElimRuleHandler()),
    NaturalDeductionRule("ExistsIntro", "Existential Introduction", ExistsIntroRuleHandler()),
    NaturalDeductionRule("ExistsElim", "Existential Elimination", ExistsElimRuleHandler()),
]

_BY_ID = {r.id: r for r in NATURAL_DEDUCTION_RULES}


def get_proof_rule(rule_id: str) -> NaturalDeductionRule:
    rule = _BY_ID.get(rule_id)
    if rule is None:
        raise InputError(f"Unknown rule {rule_id}")
    return rule


__all__ = [
    "NATURAL_DEDUCTION_RULES", "NaturalDeductionRule", "get_proof_rule",
    "ProofRuleHandler", "RuleParams", "RewritePlan", "ProofTreeChange", "SelectedProofTreeNode",
    "Prompt", "PropPrompt", "IdentifierPrompt", "AssumptionPrompt", "BindingPrompt", "BindingAnswer",
    "UPWARDS", "DOWNWARDS", "DIRECTIONS", "normalize_direction",
]
