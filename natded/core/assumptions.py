from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Collection, Iterable, Iterator, List, Optional, Set

from ..logic.ast import Identifier, Prop
from .tree import Conclusion, PropIsTrue, TypeJudgement


@dataclass(frozen=True)
class Assumption:
    kind: str  # "PropIsTrue" | "Datatype"
    ident: Identifier
    prop: Optional[Prop] = None
    datatype: Optional[str] = None

    @classmethod
    def prop_is_true(cls, ident: Identifier, prop: Prop) -> "Assumption":
        return cls("PropIsTrue", ident, prop=prop)

    @classmethod
    def of_datatype(cls, ident: Identifier, datatype: str) -> "Assumption":
        return cls("Datatype", ident, datatype=datatype)

    @property
    def is_datatype(self) -> bool:
        return self.kind == "Datatype"

    def conclusion(self) -> Conclusion:
        if self.kind == "PropIsTrue":
            return PropIsTrue(self.prop)
        return TypeJudgement(self.ident, self.datatype)


@dataclass(frozen=True)
class AssumptionContext:
    assumption: Assumption
    owning_reasoning_ctx_id: str
    owning_node_id: str


class AssumptionStore:
    """Hypotheses in insertion order, each scoped to a (context, node) owner."""

    def __init__(self):
        self._entries: List[AssumptionContext] = []

    def __iter__(self) -> Iterator[AssumptionContext]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, contexts: Iterable[AssumptionContext]):
        self._entries.extend(contexts)

    def _remove_where(self, pred) -> List[AssumptionContext]:
        removed = [a for a in self._entries if pred(a)]
        self._entries = [a for a in self._entries if not pred(a)]
        return removed

    def remove_by_owner(self, ctx_id: str, node_id: str) -> List[AssumptionContext]:
        return self._remove_where(
            lambda a: a.owning_reasoning_ctx_id == ctx_id and a.owning_node_id == node_id)

    def remove_by_context(self, ctx_id: str) -> List[AssumptionContext]:
        return self._remove_where(lambda a: a.owning_reasoning_ctx_id == ctx_id)

    def remove_by_identifiers(self, idents: Collection[Identifier]) -> List[AssumptionContext]:
        idents = set(idents)
        return self._remove_where(lambda a: a.assumption.ident in idents)

    def query(self, ctx_id: str) -> List[AssumptionContext]:
        return [a for a in self._entries if a.owning_reasoning_ctx_id == ctx_id]

    def all(self) -> List[AssumptionContext]:
        return list(self._entries)

    def reassign(self, from_ctx_id: str, to_ctx_id: str, node_ids: Optional[Collection[str]] = None) -> int:
        """Move ownership from one context to another, optionally only for owners in `node_ids`."""
        moved = 0
        out = []
        for a in self._entries:
            if a.owning_reasoning_ctx_id == from_ctx_id and (node_ids is None or a.owning_node_id in node_ids):
                a = replace(a, owning_reasoning_ctx_id=to_ctx_id)
                moved += 1
            out.append(a)
        self._entries = out
        return moved

    def used_names(self) -> Set[str]:
        return {a.assumption.ident.name for a in self._entries}

    def clear(self):
        self._entries = []
