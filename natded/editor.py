from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

from . import __version__
from .config import Settings
from .core.assumptions import Assumption, AssumptionContext, AssumptionStore
from .core.context import ReasoningContext, context_from_conclusion, context_from_prop, new_context_id
from .core.ids import IdentifierGenerator, NumberGenerator
from .core.model import RuleAvailability, SessionSnapshot, assumption_to_model, context_to_model, prompt_to_model
from .core.tree import (
    ProofTreeNode, ProofTreeRule, PropIsTrue, copy_node, find_node, new_node_id, node_ids,
    open_goals, replace_node,
)
from .dnd.collision import DropCandidate, Rect, resolve_drop_target
from .errors import CompatibilityError, InputError, InternalInconsistencyError, SelectionError, StalePromptError
from .logic.ast import Prop
from .logic.engine import LogicEngine, ReferenceLogicEngine
from .rules import (
    DOWNWARDS, NATURAL_DEDUCTION_RULES, Prompt, RewritePlan, RuleParams, SelectedProofTreeNode,
    get_proof_rule, normalize_direction,
)

logger = logging.getLogger(__name__)

# Rules whose identifiers name hypotheses they introduced (as opposed to Ident, which uses one).
BINDER_RULES = ("ImplIntro", "ForAllIntro", "OrElim", "ExistsElim")

MOVED, TRASHED, MERGED, RESTORED = "moved", "trashed", "merged", "restored"


@dataclass
class PendingRule:
    """A rule suspended on a prompt. Valid only while the session revision is unchanged."""
    rule_id: str
    direction: str
    prompt: Prompt
    revision: int
    generator: Any = field(repr=False, default=None)


@dataclass
class RuleOutcome:
    plan: Optional[RewritePlan] = None
    pending: Optional[PendingRule] = None
    cancelled: bool = False

    @property
    def committed(self) -> bool:
        return self.plan is not None


class ProofSession:
    """Reasoning context manager: owns the contexts, hypotheses and fresh-name generators
    of one editing session and applies rule rewrites and drag-and-drop outcomes to them.
    """

    def __init__(self, prop: Union[str, Prop, None] = None, *, engine: Optional[LogicEngine] = None,
                 settings: Optional[Settings] = None, initial_assumptions: Sequence[Assumption] = ()):
        self.engine: LogicEngine = engine or ReferenceLogicEngine()
        self.settings = settings or Settings.from_env()
        self.contexts: List[ReasoningContext] = []
        self.primary_context_id: Optional[str] = None
        self.assumptions = AssumptionStore()
        self.goal: Optional[Prop] = None
        self.revision = 0
        self.pending: Optional[PendingRule] = None
        self._identifiers = IdentifierGenerator(self.settings.ident_alphabet)
        self._numbers = NumberGenerator()
        self._selection_order: List[str] = []
        if prop is not None:
            self.reset(prop, initial_assumptions)

    # ---------------- lifecycle ----------------

    def reset(self, prop: Union[str, Prop], initial_assumptions: Sequence[Assumption] = ()):
        if isinstance(prop, str):
            prop = self.engine.parse_prop(prop)
        main = context_from_prop(prop)
        self._discard_pending()
        self.goal = prop
        self.contexts = [main]
        self.primary_context_id = main.id
        self.assumptions.clear()
        self._identifiers.reset()
        self._numbers.reset()
        self._selection_order = []
        if initial_assumptions:
            self.add_assumptions(initial_assumptions)
        self._bump("reset to %s", self.engine.print_prop(prop))

    def generate_identifier(self) -> str:
        used = self.assumptions.used_names()
        name = self._identifiers()
        while name in used:
            name = self._identifiers()
        return name

    def generate_unique_number(self) -> int:
        return self._numbers()

    def add_assumptions(self, assumptions: Iterable[Assumption], ctx_id: Optional[str] = None,
                        node_id: Optional[str] = None):
        """Register hypotheses, by default scoped to the root of the primary context."""
        ctx = self.get_context(ctx_id or self.primary_context_id)
        owner = node_id or ctx.proof_tree.id
        self.assumptions.add(AssumptionContext(a, ctx.id, owner) for a in assumptions)

    # ---------------- lookup ----------------

    def find_context(self, ctx_id: str) -> Optional[ReasoningContext]:
        for ctx in self.contexts:
            if ctx.id == ctx_id:
                return ctx
        return None

    def get_context(self, ctx_id: str) -> ReasoningContext:
        ctx = self.find_context(ctx_id)
        if ctx is None:
            raise InternalInconsistencyError(f"Unknown reasoning context {ctx_id}")
        return ctx

    def get_node(self, ctx_id: str, node_id: str) -> ProofTreeNode:
        node = find_node(self.get_context(ctx_id).proof_tree, node_id)
        if node is None:
            raise InternalInconsistencyError(f"Unknown node. context id: {ctx_id}, node id: {node_id}")
        return node

    @property
    def primary_context(self) -> ReasoningContext:
        return self.get_context(self.primary_context_id)

    def is_complete(self) -> bool:
        return self.primary_context_id is not None and not open_goals(self.primary_context.proof_tree)

    # ---------------- selection ----------------

    def select_node(self, ctx_id: str, node_id: str, additive: bool = False):
        ctx = self.get_context(ctx_id)
        self.get_node(ctx_id, node_id)
        if not additive:
            for other in self.contexts:
                other.selected_node_id = None
            self._selection_order = []
        ctx.selected_node_id = node_id
        if ctx_id in self._selection_order:
            self._selection_order.remove(ctx_id)
        self._selection_order.append(ctx_id)

    def clear_selection(self):
        for ctx in self.contexts:
            ctx.selected_node_id = None
        self._selection_order = []

    def escape(self):
        self.clear_selection()
        for ctx in self.contexts:
            ctx.is_dragging = False

    def selected_nodes(self) -> List[SelectedProofTreeNode]:
        """Selected nodes in selection order, each handed out as a shallow copy."""
        order = [c for c in self._selection_order if self.find_context(c) is not None]
        order += [c.id for c in self.contexts if c.selected_node_id and c.id not in order]
        out = []
        for ctx_id in order:
            ctx = self.get_context(ctx_id)
            if ctx.selected_node_id is None:
                continue
            node = self.get_node(ctx.id, ctx.selected_node_id)
            out.append(SelectedProofTreeNode(ctx.id, copy_node(node), ctx.proof_tree.id == node.id, node.rule is None))
        return out

    def applicable_rules(self) -> List[RuleAvailability]:
        selected = self.selected_nodes()
        touches_primary = any(s.reasoning_context_id == self.primary_context_id for s in selected)
        return [
            RuleAvailability(
                id=r.id, name=r.name,
                upwards=bool(selected) and r.handler.can_reason_upwards(selected),
                downwards=bool(selected) and not touches_primary and r.handler.can_reason_downwards(selected),
            )
            for r in NATURAL_DEDUCTION_RULES
        ]

    # ---------------- rule application ----------------

    def begin_rule(self, rule_id: str, direction: str) -> RuleOutcome:
        if self.pending is not None:
            raise SelectionError("Answer or cancel the open prompt first.")
        direction = normalize_direction(direction)
        rule = get_proof_rule(rule_id)
        selected = self.selected_nodes()
        if not selected:
            raise SelectionError("Select a proof tree node first.")
        if direction == DOWNWARDS and any(s.reasoning_context_id == self.primary_context_id for s in selected):
            raise SelectionError("Cannot destruct conclusion as that's what you want to show")

        params = RuleParams(selected, self.assumptions.all(), self.generate_identifier,
                            self.generate_unique_number, self.engine)
        gen = rule.handler.handle(params, direction)
        self.clear_selection()
        logger.debug("begin %s %s on %d node(s)", rule_id, direction, len(selected))
        return self._advance(rule_id, direction, gen, None, first=True)

    def resume_rule(self, pending: PendingRule, answer: Any) -> RuleOutcome:
        if pending is not self.pending or pending.revision != self.revision:
            if pending is self.pending:
                self._discard_pending()
            raise StalePromptError("The proof changed while the prompt was open.")
        answer = pending.prompt.coerce(answer)
        if answer is None:
            return self.cancel_rule(pending)
        return self._advance(pending.rule_id, pending.direction, pending.generator, answer)

    def cancel_rule(self, pending: Optional[PendingRule] = None) -> RuleOutcome:
        if pending is None or pending is self.pending:
            self._discard_pending()
            logger.debug("rule cancelled")
        return RuleOutcome(cancelled=True)

    def _discard_pending(self):
        if self.pending is not None and self.pending.generator is not None:
            self.pending.generator.close()
        self.pending = None

    def _advance(self, rule_id: str, direction: str, gen, answer, first: bool = False) -> RuleOutcome:
        try:
            prompt = next(gen) if first else gen.send(answer)
        except StopIteration as stop:
            self.pending = None
            plan = stop.value
            if plan is None:
                logger.debug("%s %s returned no plan", rule_id, direction)
                return RuleOutcome(cancelled=True)
            self.commit(plan)
            return RuleOutcome(plan=plan)
        except Exception:
            self.pending = None
            raise
        self.pending = PendingRule(rule_id, direction, prompt, self.revision, gen)
        logger.debug("%s %s waits on %s prompt: %s", rule_id, direction, prompt.kind, prompt.title)
        return RuleOutcome(pending=self.pending)

    def commit(self, plan: RewritePlan):
        """Apply a rewrite plan atomically: every reference is checked before anything changes."""
        # 1) validate
        removed = set(plan.removed_context_ids)
        for change in plan.proof_tree_changes:
            self.get_node(change.reasoning_context_id, change.node_id)
            if change.reasoning_context_id in removed:
                raise InternalInconsistencyError(f"Change targets removed context {change.reasoning_context_id}")
        for ctx_id in removed:
            self.get_context(ctx_id)
        new_ids = {c.id for c in plan.new_contexts}
        if len(new_ids) != len(plan.new_contexts) or any(self.find_context(i) for i in new_ids):
            raise InternalInconsistencyError("New reasoning context ids must be fresh")
        live = ({c.id for c in self.contexts} - removed) | new_ids
        for a in plan.additional_assumptions:
            if a.owning_reasoning_ctx_id not in live:
                raise InternalInconsistencyError(f"Assumption owned by unknown context {a.owning_reasoning_ctx_id}")

        # 2) rewrite trees in place
        for change in plan.proof_tree_changes:
            replace_node(self.get_context(change.reasoning_context_id).proof_tree, change.node_id, change.new_tree)

        # 3) hypotheses of consumed contexts follow their nodes into the new contexts
        for ctx_id in removed:
            for new_ctx in plan.new_contexts:
                self.assumptions.reassign(ctx_id, new_ctx.id, set(node_ids(new_ctx.proof_tree)))
            self.assumptions.remove_by_context(ctx_id)
        self.contexts = [c for c in self.contexts if c.id not in removed] + list(plan.new_contexts)
        if self.primary_context_id in removed and len(plan.new_contexts) == 1:
            self.primary_context_id = plan.new_contexts[0].id

        # 4) new hypotheses
        self.assumptions.add(plan.additional_assumptions)
        self._bump("commit: %d change(s), %d removed, %d new context(s), %d assumption(s)",
                   len(plan.proof_tree_changes), len(removed), len(plan.new_contexts),
                   len(plan.additional_assumptions))

    # ---------------- drag and drop ----------------

    def start_drag(self, ctx_id: str):
        self.get_context(ctx_id).is_dragging = True

    def cancel_drag(self, ctx_id: str):
        self.get_context(ctx_id).is_dragging = False

    def drop(self, ctx_id: str, dragged: Rect, candidates: Sequence[DropCandidate],
             delta: Tuple[float, float] = (0, 0)) -> str:
        # the dragged tree cannot receive itself
        candidates = [c for c in candidates if c.context_id != ctx_id]
        target = resolve_drop_target(dragged.moved(*delta), candidates)
        logger.debug("drop of %s resolved to %s", ctx_id, target.id if target else None)
        return self.end_drag(ctx_id, target, delta)

    def end_drag(self, ctx_id: str, target: Optional[DropCandidate], delta: Tuple[float, float] = (0, 0)) -> str:
        """Finish a drag on a resolved target. Returns moved, trashed, merged or restored."""
        ctx = self.get_context(ctx_id)
        if target is None:
            ctx.is_dragging = False
            return RESTORED

        if target.is_canvas:
            ctx.x += delta[0]
            ctx.y += delta[1]
            ctx.is_dragging = False
            return MOVED

        if target.is_trash:
            if ctx_id == self.primary_context_id:
                ctx.is_dragging = False
                raise SelectionError("You cannot delete your main proof tree.")
            self.contexts = [c for c in self.contexts if c.id != ctx_id]
            self._selection_order = [c for c in self._selection_order if c != ctx_id]
            dropped = self.assumptions.remove_by_context(ctx_id)
            self._bump("trashed context %s with %d assumption(s)", ctx_id, len(dropped))
            return TRASHED

        if target.context_id is None or target.node_id is None or target.context_id == ctx_id:
            ctx.is_dragging = False
            return RESTORED
        return self._merge(ctx, target)

    def _merge(self, dragged: ReasoningContext, target: DropCandidate) -> str:
        host = self.get_context(target.context_id)
        leaf = self.get_node(host.id, target.node_id)
        if leaf.rule is not None or dragged.id == self.primary_context_id:
            logger.debug("drop on %s/%s ignored", host.id, leaf.id)
            dragged.is_dragging = False
            return RESTORED

        replacement = dragged.proof_tree
        if dragged.proof_tree.conclusion != leaf.conclusion:
            if not (self.settings.alpha_merge and self._alpha_equivalent(dragged.proof_tree.conclusion, leaf.conclusion)):
                logger.warning("rejected merge of %s into %s/%s", dragged.id, host.id, leaf.id)
                dragged.is_dragging = False
                raise CompatibilityError("Proof trees not compatible.")
            replacement = ProofTreeNode(new_node_id(), [copy_node(dragged.proof_tree)],
                                        ProofTreeRule("AlphaEquivalent"), leaf.conclusion)

        replace_node(host.proof_tree, leaf.id, replacement)
        merged = ReasoningContext(new_context_id(), host.proof_tree, None, False, host.x, host.y)
        self.assumptions.reassign(dragged.id, merged.id)
        self.assumptions.reassign(host.id, merged.id)
        self.contexts = [merged if c.id == host.id else c for c in self.contexts if c.id != dragged.id]
        self._selection_order = [c for c in self._selection_order if c not in (dragged.id, host.id)]
        if self.primary_context_id == host.id:
            self.primary_context_id = merged.id
        self._bump("merged %s into %s as %s", dragged.id, host.id, merged.id)
        return MERGED

    def _alpha_equivalent(self, a, b) -> bool:
        if isinstance(a, PropIsTrue) and isinstance(b, PropIsTrue):
            return self.engine.alpha_eq(a.prop, b.prop)
        return a == b

    # ---------------- direct edits ----------------

    def instantiate_assumption(self, index: int) -> ReasoningContext:
        """Start a new fragment justified by the hypothesis at `index`."""
        entries = self.assumptions.all()
        if not 0 <= index < len(entries):
            raise InputError(f"No assumption with index {index}.")
        assumption = entries[index].assumption
        ctx = context_from_conclusion(assumption.conclusion(), self.settings.spawn_x, self.settings.spawn_y)
        ctx.proof_tree.rule = ProofTreeRule("Ident", (assumption.ident,))
        self.contexts.append(ctx)
        self._bump("new context %s from assumption %s", ctx.id, assumption.ident.name)
        return ctx

    def unapply_rule(self, ctx_id: str, node_id: str) -> List[ReasoningContext]:
        """Reopen a justified node: drop the hypotheses its rule introduced and split
        its premises off into contexts of their own."""
        ctx = self.get_context(ctx_id)
        node = self.get_node(ctx_id, node_id)
        rule = node.rule
        if rule is None:
            return []

        self.assumptions.remove_by_owner(ctx_id, node.id)
        if rule.kind in BINDER_RULES:
            self.assumptions.remove_by_identifiers(rule.idents)

        offset = self.settings.split_offset
        split = []
        for premise in node.premises:
            part = ReasoningContext(new_context_id(), premise, None, False, offset, offset)
            self.assumptions.reassign(ctx_id, part.id, set(node_ids(premise)))
            split.append(part)

        replace_node(ctx.proof_tree, node.id, ProofTreeNode(node.id, [], None, node.conclusion), keep_id=True)
        self.contexts.extend(split)
        self._bump("unapplied %s at %s/%s, %d premise(s) split off", rule.kind, ctx_id, node_id, len(split))
        return split

    # ---------------- rendering ----------------

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            version=__version__,
            revision=self.revision,
            goal=self.engine.print_prop(self.goal) if self.goal is not None else None,
            primary_context_id=self.primary_context_id,
            complete=self.is_complete(),
            contexts=[context_to_model(c, self.engine, c.id == self.primary_context_id) for c in self.contexts],
            assumptions=[assumption_to_model(i, a, self.engine) for i, a in enumerate(self.assumptions.all())],
            prompt=prompt_to_model(self.pending.prompt, self.engine) if self.pending else None,
            rules=self.applicable_rules(),
        )

    def _bump(self, msg: str, *args):
        self.revision += 1
        logger.debug(msg, *args)


__all__ = ["ProofSession", "PendingRule", "RuleOutcome", "BINDER_RULES",
           "MOVED", "TRASHED", "MERGED", "RESTORED"]
