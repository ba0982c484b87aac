from __future__ import annotations
import uuid
from dataclasses import dataclass
from typing import Optional

from ..logic.ast import Prop
from .tree import Conclusion, ProofTreeNode, leaf_from_conclusion, leaf_from_prop


@dataclass
class ReasoningContext:
    """One independently positioned proof fragment on the canvas."""
    id: str
    proof_tree: ProofTreeNode
    selected_node_id: Optional[str] = None
    is_dragging: bool = False
    x: float = 0
    y: float = 0


def new_context_id() -> str:
    return str(uuid.uuid4())


def context_from_tree(tree: ProofTreeNode, x: float = 0, y: float = 0) -> ReasoningContext:
    return ReasoningContext(new_context_id(), tree, None, False, x, y)


def context_from_prop(prop: Prop, x: float = 0, y: float = 0) -> ReasoningContext:
    return context_from_tree(leaf_from_prop(prop), x, y)


def context_from_conclusion(conclusion: Conclusion, x: float = 0, y: float = 0) -> ReasoningContext:
    return context_from_tree(leaf_from_conclusion(conclusion), x, y)
