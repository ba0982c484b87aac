"""FastAPI server exposing proof editing sessions to a browser front end."""
from __future__ import annotations

import logging
import os
import uuid
from typing import Any, Dict, List, Optional
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

import natded as _natded_pkg
from .config import Settings, configure_logging
from .core.tree import find_node
from .dnd.collision import DropCandidate, Rect
from .editor import ProofSession
from .errors import CompatibilityError, ProofEditorError, StalePromptError
from .report.render import to_markdown
from .rules import NATURAL_DEDUCTION_RULES

logger = logging.getLogger(__name__)

app = FastAPI(title="natded API", version=_natded_pkg.__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Process-local; sessions are lost on restart.
SESSIONS: Dict[str, ProofSession] = {}


class SessionRequest(BaseModel):
    prop: str


class ResetRequest(BaseModel):
    prop: Optional[str] = None


class SelectRequest(BaseModel):
    context_id: str
    node_id: str
    additive: bool = False


class RuleRequest(BaseModel):
    rule: str
    direction: str  # "Upwards"/"Downwards" (or up/down)


class PromptAnswer(BaseModel):
    answer: Any = None  # text, index, list of indices or {identifier, indices}; null cancels
    revision: Optional[int] = None  # revision the prompt was shown at


class RectModel(BaseModel):
    left: float
    top: float
    width: float
    height: float

    def to_rect(self) -> Rect:
        return Rect(self.left, self.top, self.width, self.height)


class CandidateModel(BaseModel):
    id: str
    rect: RectModel
    context_id: Optional[str] = None
    node_id: Optional[str] = None

    def to_candidate(self) -> DropCandidate:
        return DropCandidate(self.id, self.rect.to_rect(), self.context_id, self.node_id)


class DropRequest(BaseModel):
    dx: float = 0
    dy: float = 0
    dragged: Optional[RectModel] = None  # with candidates: resolve the target here
    candidates: List[CandidateModel] = []
    target: Optional[CandidateModel] = None  # target already resolved by the client


@app.exception_handler(ProofEditorError)
async def proof_editor_error(request: Request, exc: ProofEditorError):
    status = 409 if isinstance(exc, CompatibilityError) else 400
    return JSONResponse(status_code=status, content={"detail": exc.message, "kind": exc.kind})


def _session(sid: str) -> ProofSession:
    session = SESSIONS.get(sid)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def _context(session: ProofSession, cid: str):
    ctx = session.find_context(cid)
    if ctx is None:
        raise HTTPException(status_code=404, detail="Reasoning context not found")
    return ctx


def _state(session: ProofSession, **extra) -> Dict[str, Any]:
    out = session.snapshot().model_dump()
    out.update(extra)
    return out


@app.get("/api/health")
def health():
    """Health check endpoint"""
    return {"ok": True, "version": _natded_pkg.__version__, "sessions": len(SESSIONS)}


@app.get("/api/rules")
def list_rules():
    return [
        {"id": r.id, "name": r.name, "latex": r.handler.latex}
        for r in NATURAL_DEDUCTION_RULES
    ]


@app.post("/api/sessions")
def create_session(req: SessionRequest):
    if not req.prop.strip():
        raise HTTPException(status_code=400, detail="Proposition cannot be empty")
    session = ProofSession(req.prop, settings=Settings.from_env())
    sid = uuid.uuid4().hex
    SESSIONS[sid] = session
    logger.info("session %s started: %s", sid, req.prop)
    return _state(session, session_id=sid)


@app.get("/api/sessions/{sid}")
def get_session(sid: str):
    return _state(_session(sid), session_id=sid)


@app.get("/api/sessions/{sid}/report")
def get_report(sid: str):
    return {"markdown": to_markdown(_session(sid))}


@app.post("/api/sessions/{sid}/reset")
def reset_session(sid: str, req: ResetRequest):
    session = _session(sid)
    session.reset(req.prop if req.prop else session.goal)
    return _state(session, session_id=sid)


@app.post("/api/sessions/{sid}/select")
def select_node(sid: str, req: SelectRequest):
    session = _session(sid)
    ctx = _context(session, req.context_id)
    if find_node(ctx.proof_tree, req.node_id) is None:
        raise HTTPException(status_code=404, detail="Proof tree node not found")
    session.select_node(ctx.id, req.node_id, req.additive)
    return _state(session, session_id=sid)


@app.post("/api/sessions/{sid}/clear-selection")
def clear_selection(sid: str):
    session = _session(sid)
    session.escape()
    return _state(session, session_id=sid)


@app.post("/api/sessions/{sid}/rules")
def apply_rule(sid: str, req: RuleRequest):
    session = _session(sid)
    outcome = session.begin_rule(req.rule, req.direction)
    return _state(session, session_id=sid, committed=outcome.committed)


@app.post("/api/sessions/{sid}/prompt")
def answer_prompt(sid: str, req: PromptAnswer):
    session = _session(sid)
    if session.pending is None:
        raise HTTPException(status_code=409, detail="No open prompt")
    if req.revision is not None and req.revision != session.pending.revision:
        session.cancel_rule()
        raise StalePromptError("The proof changed while the prompt was open.")
    outcome = session.resume_rule(session.pending, req.answer)
    return _state(session, session_id=sid, committed=outcome.committed)


@app.delete("/api/sessions/{sid}/prompt")
def cancel_prompt(sid: str):
    session = _session(sid)
    session.cancel_rule()
    return _state(session, session_id=sid)


@app.post("/api/sessions/{sid}/assumptions/{index}/instantiate")
def instantiate_assumption(sid: str, index: int):
    session = _session(sid)
    ctx = session.instantiate_assumption(index)
    return _state(session, session_id=sid, context_id=ctx.id)


@app.post("/api/sessions/{sid}/contexts/{cid}/drag")
def start_drag(sid: str, cid: str):
    session = _session(sid)
    session.start_drag(_context(session, cid).id)
    return _state(session, session_id=sid)


@app.post("/api/sessions/{sid}/contexts/{cid}/cancel-drag")
def cancel_drag(sid: str, cid: str):
    session = _session(sid)
    session.cancel_drag(_context(session, cid).id)
    return _state(session, session_id=sid)


@app.post("/api/sessions/{sid}/contexts/{cid}/drop")
def drop_context(sid: str, cid: str, req: DropRequest):
    session = _session(sid)
    ctx = _context(session, cid)
    delta = (req.dx, req.dy)
    candidates = [c.to_candidate() for c in req.candidates]
    target = req.target.to_candidate() if req.target is not None else None
    for c in candidates + ([target] if target else []):
        if c.context_id is not None:
            host = _context(session, c.context_id)
            if c.node_id is None or find_node(host.proof_tree, c.node_id) is None:
                raise HTTPException(status_code=404, detail="Proof tree node not found")
    if req.dragged is not None:
        outcome = session.drop(ctx.id, req.dragged.to_rect(), candidates, delta)
    else:
        outcome = session.end_drag(ctx.id, target, delta)
    return _state(session, session_id=sid, outcome=outcome)


@app.post("/api/sessions/{sid}/contexts/{cid}/nodes/{nid}/unapply")
def unapply_rule(sid: str, cid: str, nid: str):
    session = _session(sid)
    ctx = _context(session, cid)
    if find_node(ctx.proof_tree, nid) is None:
        raise HTTPException(status_code=404, detail="Proof tree node not found")
    split = session.unapply_rule(ctx.id, nid)
    return _state(session, session_id=sid, new_context_ids=[c.id for c in split])


def main():
    import uvicorn
    configure_logging()
    uvicorn.run("natded.server:app", host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))


if __name__ == "__main__":
    main()
