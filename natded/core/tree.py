from __future__ import annotations
import uuid
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union

from ..logic.ast import Identifier, Prop

RULE_KINDS = (
    "TrueIntro", "FalsumElim", "AndIntro", "AndElimFst", "AndElimSnd",
    "ImplIntro", "ImplElim", "OrIntroFst", "OrIntroSnd", "OrElim",
    "ForAllIntro", "ForAllElim", "ExistsIntro", "ExistsElim",
    "Ident", "AlphaEquivalent", "Sorry",
)


@dataclass(frozen=True)
class PropIsTrue:
    prop: Prop


@dataclass(frozen=True)
class TypeJudgement:
    ident: Identifier
    type_name: str


Conclusion = Union[PropIsTrue, TypeJudgement]


@dataclass(frozen=True)
class ProofTreeRule:
    """Rule tag of a justified node; binder rules carry the identifiers they introduced."""
    kind: str
    idents: Tuple[Identifier, ...] = ()

    def __post_init__(self):
        if self.kind not in RULE_KINDS:
            raise ValueError(f"Unknown rule kind: {self.kind}")


@dataclass
class ProofTreeNode:
    id: str
    premises: List["ProofTreeNode"] = field(default_factory=list)
    rule: Optional[ProofTreeRule] = None
    conclusion: Conclusion = None

    @property
    def is_open(self) -> bool:
        return self.rule is None


def new_node_id() -> str:
    return str(uuid.uuid4())


# ---------------- construction ----------------

def leaf_from_prop(prop: Prop) -> ProofTreeNode:
    return ProofTreeNode(new_node_id(), [], None, PropIsTrue(prop))


def leaf_from_type_judgement(ident: Identifier, type_name: str) -> ProofTreeNode:
    return ProofTreeNode(new_node_id(), [], None, TypeJudgement(ident, type_name))


def leaf_from_conclusion(conclusion: Conclusion) -> ProofTreeNode:
    return ProofTreeNode(new_node_id(), [], None, conclusion)


def copy_node(node: ProofTreeNode) -> ProofTreeNode:
    """Shallow copy: same id and children, fresh premise list."""
    return ProofTreeNode(node.id, list(node.premises), node.rule, node.conclusion)


# ---------------- traversal ----------------

def iter_nodes(root: ProofTreeNode) -> Iterator[ProofTreeNode]:
    """Pre-order, depth first."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.premises))


def find_node(root: ProofTreeNode, node_id: str) -> Optional[ProofTreeNode]:
    for node in iter_nodes(root):
        if node.id == node_id:
            return node
    return None


def parent_of(root: ProofTreeNode, node_id: str) -> Optional[ProofTreeNode]:
    for node in iter_nodes(root):
        if any(p.id == node_id for p in node.premises):
            return node
    return None


def open_goals(root: ProofTreeNode) -> List[ProofTreeNode]:
    return [n for n in iter_nodes(root) if n.rule is None]


def node_ids(root: ProofTreeNode) -> List[str]:
    return [n.id for n in iter_nodes(root)]


# ---------------- mutation ----------------

def replace_node(root: ProofTreeNode, node_id: str, replacement: ProofTreeNode, *, keep_id: bool = False) -> bool:
    """Overwrite the fields of the node with `node_id` in place. Returns whether it was found."""
    target = find_node(root, node_id)
    if target is None:
        return False
    if not keep_id:
        target.id = replacement.id
    target.premises = list(replacement.premises)
    target.rule = replacement.rule
    target.conclusion = replacement.conclusion
    return True


def to_kernel_tree(root: ProofTreeNode) -> ProofTreeNode:
    """Deep copy with open propositional goals closed by the Sorry placeholder."""
    rule = root.rule
    if rule is None and isinstance(root.conclusion, PropIsTrue):
        rule = ProofTreeRule("Sorry")
    return ProofTreeNode(root.id, [to_kernel_tree(p) for p in root.premises], rule, root.conclusion)
