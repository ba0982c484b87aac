from __future__ import annotations
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from ..logic.ast import Identifier
from ..logic.engine import LogicEngine
from ..report.render import assumption_text, conclusion_text, rule_label
from .assumptions import AssumptionContext
from .context import ReasoningContext
from .tree import ProofTreeNode, PropIsTrue

# View models handed to a renderer. Runtime state lives in dataclasses;
# these are rebuilt from it on every snapshot.


class IdentifierModel(BaseModel):
    name: str
    unique_id: int


class ConclusionModel(BaseModel):
    kind: Literal["PropIsTrue", "TypeJudgement"]
    text: str
    ident: Optional[IdentifierModel] = None
    type_name: Optional[str] = None


class RuleModel(BaseModel):
    kind: str
    idents: List[IdentifierModel] = Field(default_factory=list)
    label: str


class ProofTreeNodeModel(BaseModel):
    id: str
    premises: List["ProofTreeNodeModel"] = Field(default_factory=list)
    rule: Optional[RuleModel] = None
    conclusion: ConclusionModel
    is_open: bool


class ReasoningContextModel(BaseModel):
    id: str
    proof_tree: ProofTreeNodeModel
    selected_node_id: Optional[str] = None
    is_dragging: bool = False
    x: float = 0
    y: float = 0
    is_primary: bool = False


class AssumptionModel(BaseModel):
    index: int
    kind: Literal["PropIsTrue", "Datatype"]
    ident: IdentifierModel
    text: str
    owning_reasoning_ctx_id: str
    owning_node_id: str


class PromptModel(BaseModel):
    kind: str
    title: str
    placeholder: Optional[str] = None
    prop: Optional[str] = None
    identifier: Optional[IdentifierModel] = None
    candidates: List[IdentifierModel] = Field(default_factory=list)
    options: Dict[str, List[IdentifierModel]] = Field(default_factory=dict)
    choices: List[str] = Field(default_factory=list)


class RuleAvailability(BaseModel):
    id: str
    name: str
    upwards: bool = False
    downwards: bool = False


class SessionSnapshot(BaseModel):
    version: str
    revision: int
    goal: Optional[str] = None
    primary_context_id: Optional[str] = None
    complete: bool = False
    contexts: List[ReasoningContextModel] = Field(default_factory=list)
    assumptions: List[AssumptionModel] = Field(default_factory=list)
    prompt: Optional[PromptModel] = None
    rules: List[RuleAvailability] = Field(default_factory=list)


ProofTreeNodeModel.model_rebuild()


def ident_to_model(ident: Identifier) -> IdentifierModel:
    return IdentifierModel(name=ident.name, unique_id=ident.unique_id)


def node_to_model(node: ProofTreeNode, engine: LogicEngine) -> ProofTreeNodeModel:
    c = node.conclusion
    if isinstance(c, PropIsTrue):
        conclusion = ConclusionModel(kind="PropIsTrue", text=conclusion_text(c, engine))
    else:
        conclusion = ConclusionModel(kind="TypeJudgement", text=conclusion_text(c, engine),
                                     ident=ident_to_model(c.ident), type_name=c.type_name)
    rule = None
    if node.rule is not None:
        rule = RuleModel(kind=node.rule.kind, idents=[ident_to_model(i) for i in node.rule.idents],
                         label=rule_label(node.rule))
    return ProofTreeNodeModel(
        id=node.id,
        premises=[node_to_model(p, engine) for p in node.premises],
        rule=rule,
        conclusion=conclusion,
        is_open=node.rule is None,
    )


def context_to_model(ctx: ReasoningContext, engine: LogicEngine, is_primary: bool = False) -> ReasoningContextModel:
    return ReasoningContextModel(
        id=ctx.id, proof_tree=node_to_model(ctx.proof_tree, engine), selected_node_id=ctx.selected_node_id,
        is_dragging=ctx.is_dragging, x=ctx.x, y=ctx.y, is_primary=is_primary,
    )


def assumption_to_model(index: int, a: AssumptionContext, engine: LogicEngine) -> AssumptionModel:
    return AssumptionModel(
        index=index,
        kind=a.assumption.kind,
        ident=ident_to_model(a.assumption.ident),
        text=assumption_text(a.assumption, engine),
        owning_reasoning_ctx_id=a.owning_reasoning_ctx_id,
        owning_node_id=a.owning_node_id,
    )


def prompt_to_model(prompt, engine: LogicEngine) -> PromptModel:
    m = PromptModel(kind=prompt.kind, title=prompt.title)
    if getattr(prompt, "placeholder", None):
        m.placeholder = prompt.placeholder
    if getattr(prompt, "prop", None) is not None:
        m.prop = engine.print_prop(prompt.prop)
    if getattr(prompt, "identifier", None) is not None:
        m.identifier = ident_to_model(prompt.identifier)
    if getattr(prompt, "candidates", None):
        m.candidates = [ident_to_model(i) for i in prompt.candidates]
    if prompt.kind == "identifier":
        m.options = {name: [ident_to_model(i) for i in idents] for name, idents in prompt.options.items()}
    elif prompt.kind == "assumption":
        m.choices = [assumption_text(a.assumption, engine) for a in prompt.options]
    return m
