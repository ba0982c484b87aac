from __future__ import annotations
import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generator, List, Optional, Sequence

from ..core.assumptions import AssumptionContext
from ..core.context import ReasoningContext
from ..core.tree import ProofTreeNode, ProofTreeRule, PropIsTrue, TypeJudgement, new_node_id
from ..errors import InputError, SelectionError, ShapeError
from ..logic.ast import Identifier, Prop, Uninstantiated
from ..logic.engine import LogicEngine

UPWARDS = "Upwards"
DOWNWARDS = "Downwards"
DIRECTIONS = (UPWARDS, DOWNWARDS)

_DIRECTION_ALIASES = {"up": UPWARDS, "upwards": UPWARDS, "down": DOWNWARDS, "downwards": DOWNWARDS}


def normalize_direction(direction: str) -> str:
    d = _DIRECTION_ALIASES.get((direction or "").strip().lower())
    if d is None:
        raise InputError(f"Unknown direction: {direction}")
    return d


@dataclass(frozen=True)
class SelectedProofTreeNode:
    reasoning_context_id: str
    node: ProofTreeNode  # shallow copy of the selected node
    is_root: bool
    is_leaf: bool


@dataclass
class RuleParams:
    selected: List[SelectedProofTreeNode]
    assumptions: List[AssumptionContext]
    generate_identifier: Callable[[], str]
    generate_unique_number: Callable[[], int]
    engine: LogicEngine

    def fresh_identifier(self) -> Identifier:
        return Identifier(self.generate_identifier(), self.generate_unique_number())


@dataclass
class ProofTreeChange:
    reasoning_context_id: str
    node_id: str
    new_tree: ProofTreeNode


@dataclass
class RewritePlan:
    proof_tree_changes: List[ProofTreeChange] = field(default_factory=list)
    removed_context_ids: List[str] = field(default_factory=list)
    new_contexts: List[ReasoningContext] = field(default_factory=list)
    additional_assumptions: List[AssumptionContext] = field(default_factory=list)


# ---------------- prompts ----------------

@dataclass
class Prompt:
    title: str
    kind = "prompt"

    def coerce(self, answer: Any) -> Any:
        return answer


@dataclass
class PropPrompt(Prompt):
    """Free text parsed by the logic engine."""
    placeholder: str = ""
    kind = "prop"

    def coerce(self, answer: Any) -> Any:
        if answer is None:
            return None
        if not isinstance(answer, str):
            raise InputError("Expected a proposition.")
        return answer


@dataclass
class IdentifierPrompt(Prompt):
    """Several value hypotheses share a name; pick one identifier per name."""
    prop: Prop = None
    options: Dict[str, List[Identifier]] = field(default_factory=dict)
    kind = "identifier"

    def coerce(self, answer: Any) -> Any:
        if answer is None:
            return None
        if isinstance(answer, (list, tuple)):
            if len(answer) != len(self.options):
                raise InputError(f"Expected {len(self.options)} choice(s).")
            answer = dict(zip(self.options, answer))
        if not isinstance(answer, dict):
            raise InputError("Expected one identifier per name.")
        chosen: Dict[str, Identifier] = {}
        for name, opts in self.options.items():
            if name not in answer:
                raise InputError(f"No identifier chosen for {name}.")
            chosen[name] = _pick(opts, answer[name])
        return chosen


@dataclass
class AssumptionPrompt(Prompt):
    """Choose a value-typed hypothesis, e.g. the witness of a quantifier rule."""
    options: List[AssumptionContext] = field(default_factory=list)
    kind = "assumption"

    def coerce(self, answer: Any) -> Any:
        if answer is None:
            return None
        return _pick([a.assumption.ident for a in self.options], answer)


@dataclass
class BindingAnswer:
    identifier: Optional[Identifier] = None
    indices: Optional[List[int]] = None


@dataclass
class BindingPrompt(Prompt):
    """Choose which occurrences of an identifier get bound by a new quantifier.

    With `identifier` unset the answer may name one of `candidates`, or leave it
    empty to have the witness asked for separately.
    """
    prop: Prop = None
    identifier: Optional[Identifier] = None
    candidates: List[Identifier] = field(default_factory=list)
    kind = "binding"

    def coerce(self, answer: Any) -> Any:
        if answer is None or isinstance(answer, BindingAnswer):
            return answer
        if not isinstance(answer, dict):
            raise InputError("Expected a binding choice.")
        ident = self.identifier
        if answer.get("identifier") is not None:
            ident = _pick(self.candidates, answer["identifier"])
        indices = answer.get("indices")
        if indices is not None:
            try:
                indices = [int(i) for i in indices]
            except (TypeError, ValueError):
                raise InputError("Parameter indices must be integers.")
        return BindingAnswer(ident, indices)


def _pick(options: Sequence[Identifier], answer: Any) -> Identifier:
    if isinstance(answer, Identifier):
        if answer not in options:
            raise InputError(f"Not a valid choice: {answer.name}")
        return answer
    try:
        idx = int(answer)
    except (TypeError, ValueError):
        raise InputError(f"Not a valid choice: {answer}")
    if not 0 <= idx < len(options):
        raise InputError(f"Choice out of range: {idx}")
    return options[idx]


RuleGenerator = Generator[Prompt, Any, Optional[RewritePlan]]


def _immediate(value):
    return value
    yield  # pragma: no cover


# ---------------- handler base ----------------

class ProofRuleHandler:
    """One natural-deduction rule: applicability checks plus the rewrite in each direction.

    handle_upwards/handle_downwards may be generators: they yield a Prompt,
    receive the user's answer through send(), and return a RewritePlan, or None
    when the user cancelled.
    """
    rule_id = ""
    latex = ""

    # --- applicability ---

    def check_upwards(self, nodes: List[SelectedProofTreeNode]):
        if len(nodes) != 1:
            raise SelectionError("Cannot apply this rule on multiple nodes.")
        if not nodes[0].is_leaf:
            raise SelectionError("Upward reasoning needs an open goal.")

    def check_downwards(self, nodes: List[SelectedProofTreeNode]):
        if not nodes:
            raise SelectionError("Select a proof tree node first.")
        if not all(n.is_root for n in nodes):
            raise SelectionError("Downward reasoning needs the roots of proof trees.")

    def can_reason_upwards(self, nodes: List[SelectedProofTreeNode]) -> bool:
        return _passes(self.check_upwards, nodes)

    def can_reason_downwards(self, nodes: List[SelectedProofTreeNode]) -> bool:
        return _passes(self.check_downwards, nodes)

    # --- dispatch ---

    def handle(self, params: RuleParams, direction: str) -> RuleGenerator:
        if direction == UPWARDS:
            self.check_upwards(params.selected)
            out = self.handle_upwards(params)
        else:
            self.check_downwards(params.selected)
            out = self.handle_downwards(params)
        return out if inspect.isgenerator(out) else _immediate(out)

    def handle_upwards(self, params: RuleParams):
        raise SelectionError(f"{self.rule_id} cannot be applied upwards.")

    def handle_downwards(self, params: RuleParams):
        raise SelectionError(f"{self.rule_id} cannot be applied downwards.")

    # --- helpers for subclasses ---

    def rule(self, *idents: Identifier) -> ProofTreeRule:
        return ProofTreeRule(self.rule_id, tuple(idents))

    def refine(self, sel: SelectedProofTreeNode, premises: List[ProofTreeNode], *idents: Identifier) -> ProofTreeChange:
        """Justify the selected goal in place: same id and conclusion, new rule and premises."""
        node = sel.node
        return ProofTreeChange(sel.reasoning_context_id, node.id,
                               ProofTreeNode(node.id, premises, self.rule(*idents), node.conclusion))

    def extend_below(self, sel: SelectedProofTreeNode, conclusion: Prop, extra: Sequence[ProofTreeNode] = (),
                     node_id: Optional[str] = None, idents: Sequence[Identifier] = ()) -> ProofTreeChange:
        """Replace a root by a new root concluding `conclusion` with the old root as first premise."""
        new_root = ProofTreeNode(node_id or new_node_id(), [sel.node, *extra], self.rule(*idents), PropIsTrue(conclusion))
        return ProofTreeChange(sel.reasoning_context_id, sel.node.id, new_root)

    def owned_by(self, sel: SelectedProofTreeNode, node_id: str, *assumptions) -> List[AssumptionContext]:
        return [AssumptionContext(a, sel.reasoning_context_id, node_id) for a in assumptions]

    def prompt_prop(self, params: RuleParams, title: str, placeholder: str = ""):
        """Ask for a proposition and resolve its free names against value hypotheses."""
        text = yield PropPrompt(title, placeholder)
        if not text:
            return None
        engine = params.engine
        prop = engine.parse_prop(text)

        names: List[str] = []
        for p in engine.get_free_parameters(prop):
            if isinstance(p, Uninstantiated) and p.name not in names:
                names.append(p.name)

        ambiguous: Dict[str, List[Identifier]] = {}
        for name in names:
            same_name = [a for a in params.assumptions if a.assumption.ident.name == name]
            if not same_name:
                raise InputError(f"Unknown identifier: {name}")
            values = [a.assumption.ident for a in same_name if a.assumption.is_datatype]
            if not values:
                raise InputError(f"Not a value: {name}")
            if len(values) > 1:
                ambiguous[name] = values
                continue
            prop = engine.instantiate_free_parameter(prop, name, values[0])

        if not ambiguous:
            return prop

        chosen = yield IdentifierPrompt("Please further specify which identifier you mean.", prop, ambiguous)
        if chosen is None:
            return None
        for name, ident in chosen.items():
            prop = engine.instantiate_free_parameter(prop, name, ident)
        return prop

    def prompt_assumption_ident(self, params: RuleParams, title: str):
        options = [a for a in params.assumptions if a.assumption.is_datatype]
        if not options:
            raise InputError("There are no witnesses you can select.")
        ident = yield AssumptionPrompt(title, options)
        return ident

    def assumption_type(self, params: RuleParams, ident: Identifier) -> str:
        for a in params.assumptions:
            if a.assumption.ident == ident and a.assumption.is_datatype:
                return a.assumption.datatype
        raise InputError(f"Not a value: {ident.name}")


def _passes(check, nodes) -> bool:
    try:
        check(nodes)
    except (SelectionError, ShapeError):
        return False
    return True


def conclusion_prop(sel: SelectedProofTreeNode, message: str = "Cannot apply rule on this node.") -> Prop:
    c = sel.node.conclusion
    if not isinstance(c, PropIsTrue):
        raise ShapeError(message)
    return c.prop


def require_prop(sel: SelectedProofTreeNode, cls, message: str) -> Prop:
    prop = conclusion_prop(sel, message)
    if not isinstance(prop, cls):
        raise ShapeError(message)
    return prop


def is_type_judgement(sel: SelectedProofTreeNode) -> bool:
    return isinstance(sel.node.conclusion, TypeJudgement)
