from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

CANVAS_ID = "proof-tree-view"
TRASH_ID = "trash"


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    def moved(self, dx: float, dy: float) -> "Rect":
        return Rect(self.left + dx, self.top + dy, self.width, self.height)


@dataclass(frozen=True)
class DropCandidate:
    """A droppable region: the canvas, the trash, or an open leaf of some context."""
    id: str
    rect: Rect
    context_id: Optional[str] = None
    node_id: Optional[str] = None

    @property
    def is_canvas(self) -> bool:
        return self.id == CANVAS_ID

    @property
    def is_trash(self) -> bool:
        return self.id == TRASH_ID


def intersection_ratio(entry: Rect, target: Rect) -> float:
    """Intersection over union, rounded to 4 decimals; 0 for edge or corner contact."""
    left = max(target.left, entry.left)
    top = max(target.top, entry.top)
    right = min(target.right, entry.right)
    bottom = min(target.bottom, entry.bottom)
    if left < right and top < bottom:
        inter = (right - left) * (bottom - top)
        return round(inter / (target.area + entry.area - inter), 4)
    return 0.0


def rank_drop_targets(dragged: Rect, candidates: Sequence[DropCandidate]) -> List[Tuple[DropCandidate, float]]:
    """Overlapping candidates, best first. The canvas always sorts last; equal scores by id."""
    scored = []
    for c in candidates:
        score = intersection_ratio(c.rect, dragged)
        if score > 0:
            scored.append((c, score))
    scored.sort(key=lambda cs: (cs[0].is_canvas, -cs[1], cs[0].id))
    return scored


def resolve_drop_target(dragged: Rect, candidates: Sequence[DropCandidate]) -> Optional[DropCandidate]:
    ranked = rank_drop_targets(dragged, candidates)
    return ranked[0][0] if ranked else None
