from __future__ import annotations
import argparse, json, sys
from typing import Callable, Dict, List, Optional

import natded as _natded_pkg
from .config import Settings, configure_logging
from .dnd.collision import CANVAS_ID, TRASH_ID, DropCandidate, Rect
from .editor import ProofSession
from .errors import InputError, ProofEditorError
from .report.render import prompt_text, short_ids, to_markdown, to_text

_NOWHERE = Rect(0, 0, 0, 0)

HELP = """\
show                      print contexts, assumptions and the open prompt
rules                     rules applicable to the current selection
select CTX NODE [+]       select a node (+ adds to the selection)
clear                     clear the selection
apply RULE up|down        apply a rule to the selection
answer TEXT               answer a proposition prompt
pick N [N ...]            answer a choice prompt
bind [IDENT] I,J          choose occurrences to bind (IDENT '-' asks for the witness, I,J '*' binds all)
cancel                    cancel the open prompt
assume N                  new context from assumption N
move CTX DX DY            move a context on the canvas
trash CTX                 delete a context
merge CTX TARGET NODE     drop context CTX on open leaf NODE of TARGET
unapply CTX NODE          undo the rule at a node
reset [PROP]              start over
quit"""


class Shell:
    """Line-oriented front end. Contexts and nodes are addressed by the numbers `show` prints."""

    def __init__(self, session: ProofSession, out: Callable[[str], None] = print):
        self.session = session
        self.out = out
        self.commands: Dict[str, Callable[[List[str]], Optional[str]]] = {
            "show": self.cmd_show, "rules": self.cmd_rules, "select": self.cmd_select,
            "clear": self.cmd_clear, "apply": self.cmd_apply, "answer": self.cmd_answer,
            "pick": self.cmd_pick, "bind": self.cmd_bind, "cancel": self.cmd_cancel,
            "assume": self.cmd_assume, "move": self.cmd_move, "trash": self.cmd_trash,
            "merge": self.cmd_merge, "unapply": self.cmd_unapply, "reset": self.cmd_reset,
            "help": lambda args: HELP,
        }

    # ---------------- addressing ----------------

    def context_id(self, num: str) -> str:
        ctx_ids, _ = short_ids(self.session)
        idx = _index(num, len(ctx_ids), "context")
        return ctx_ids[idx]

    def node_id(self, ctx_id: str, num: str) -> str:
        _, nodes = short_ids(self.session)
        idx = _index(num, len(nodes[ctx_id]), "node")
        return nodes[ctx_id][idx]

    # ---------------- commands ----------------

    def cmd_show(self, args):
        return to_text(self.session)

    def cmd_rules(self, args):
        rows = []
        for r in self.session.applicable_rules():
            dirs = [d for d, ok in (("up", r.upwards), ("down", r.downwards)) if ok]
            if dirs:
                rows.append(f"  {r.id:<12} {r.name}  ({', '.join(dirs)})")
        return "\n".join(rows) if rows else "No rule applies to the selection."

    def cmd_select(self, args):
        _arity(args, 2, 3, "select CTX NODE [+]")
        ctx_id = self.context_id(args[0])
        self.session.select_node(ctx_id, self.node_id(ctx_id, args[1]), additive=args[2:] == ["+"])
        return None

    def cmd_clear(self, args):
        self.session.clear_selection()
        return None

    def cmd_apply(self, args):
        _arity(args, 2, 2, "apply RULE up|down")
        return self._outcome(self.session.begin_rule(args[0], args[1]))

    def cmd_answer(self, args, raw: str = ""):
        return self._outcome(self.session.resume_rule(self._pending(), raw))

    def cmd_pick(self, args):
        pending = self._pending()
        if not args:
            raise InputError("usage: pick N [N ...]")
        answer = args[0] if pending.prompt.kind == "assumption" else list(args)
        return self._outcome(self.session.resume_rule(pending, answer))

    def cmd_bind(self, args):
        _arity(args, 1, 2, "bind [IDENT] I,J")
        ident = args[0] if len(args) == 2 and args[0] != "-" else None
        picked = args[-1]
        indices = None if picked == "*" else [i for i in picked.split(",") if i]
        return self._outcome(self.session.resume_rule(self._pending(), {"identifier": ident, "indices": indices}))

    def cmd_cancel(self, args):
        self.session.cancel_rule()
        return "Cancelled."

    def cmd_assume(self, args):
        _arity(args, 1, 1, "assume N")
        self.session.instantiate_assumption(_int(args[0]))
        return to_text(self.session)

    def cmd_move(self, args):
        _arity(args, 3, 3, "move CTX DX DY")
        ctx_id = self.context_id(args[0])
        target = DropCandidate(CANVAS_ID, _NOWHERE)
        return self.session.end_drag(ctx_id, target, (_float(args[1]), _float(args[2])))

    def cmd_trash(self, args):
        _arity(args, 1, 1, "trash CTX")
        return self.session.end_drag(self.context_id(args[0]), DropCandidate(TRASH_ID, _NOWHERE))

    def cmd_merge(self, args):
        _arity(args, 3, 3, "merge CTX TARGET NODE")
        dragged = self.context_id(args[0])
        host = self.context_id(args[1])
        node = self.node_id(host, args[2])
        outcome = self.session.end_drag(dragged, DropCandidate(node, _NOWHERE, host, node))
        return f"{outcome}\n{to_text(self.session)}"

    def cmd_unapply(self, args):
        _arity(args, 2, 2, "unapply CTX NODE")
        ctx_id = self.context_id(args[0])
        self.session.unapply_rule(ctx_id, self.node_id(ctx_id, args[1]))
        return to_text(self.session)

    def cmd_reset(self, args, raw: str = ""):
        self.session.reset(raw or self.session.goal)
        return to_text(self.session)

    # ---------------- driver ----------------

    def execute(self, line: str) -> bool:
        """Run one command line. Returns False on quit."""
        line = line.strip()
        if not line or line.startswith("#"):
            return True
        name, _, rest = line.partition(" ")
        if name in ("quit", "exit"):
            return False
        handler = self.commands.get(name)
        if handler is None:
            self.out(f"Unknown command: {name} (try 'help')")
            return True
        try:
            if name in ("answer", "reset"):
                result = handler([], raw=rest.strip())
            else:
                result = handler(rest.split())
        except ProofEditorError as e:
            self.out(f"error: {e.message}")
            return True
        if result:
            self.out(result)
        return True

    def _pending(self):
        if self.session.pending is None:
            raise InputError("There is no open prompt.")
        return self.session.pending

    def _outcome(self, outcome) -> str:
        if outcome.pending is not None:
            return prompt_text(outcome.pending.prompt, self.session.engine)
        if outcome.cancelled:
            return "Cancelled."
        return to_text(self.session)


def _arity(args: List[str], lo: int, hi: int, usage: str):
    if not lo <= len(args) <= hi:
        raise InputError(f"usage: {usage}")


def _int(s: str) -> int:
    try:
        return int(s)
    except ValueError:
        raise InputError(f"Not a number: {s}")


def _float(s: str) -> float:
    try:
        return float(s)
    except ValueError:
        raise InputError(f"Not a number: {s}")


def _index(num: str, size: int, what: str) -> int:
    n = _int(num)
    if not 1 <= n <= size:
        raise InputError(f"No {what} #{n}.")
    return n - 1


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description=f"Natural deduction proof editor (v{_natded_pkg.__version__})")
    parser.add_argument("prop", nargs="?", help="Proposition to prove, e.g. \"A ∧ B ⊃ B ∧ A\"")
    parser.add_argument("--script", help="Read commands from a file instead of the terminal")
    parser.add_argument("--json", help="Write the final session snapshot as JSON to this path")
    parser.add_argument("--markdown", help="Write a Markdown proof report to this path")
    parser.add_argument("--log-level", help="Logging level (default: NATDED_LOG_LEVEL or WARNING)")
    parser.add_argument("-V", "--version", action="store_true", help="Print version and module path and exit")
    args = parser.parse_args(argv)

    if args.version:
        print(f"natded v{_natded_pkg.__version__} @ {_natded_pkg.__file__}")
        return 0
    if not args.prop:
        parser.error("a proposition is required")

    configure_logging(args.log_level)
    try:
        session = ProofSession(args.prop, settings=Settings.from_env())
    except ProofEditorError as e:
        print(f"error: {e.message}", file=sys.stderr)
        return 2
    shell = Shell(session)

    if args.script:
        with open(args.script, "r", encoding="utf-8") as f:
            for line in f:
                if not shell.execute(line):
                    break
    else:
        print(to_text(session))
        print("Type 'help' for commands.")
        while True:
            try:
                line = input("natded> ")
            except EOFError:
                break
            if not shell.execute(line):
                break

    if args.json:
        with open(args.json, "w", encoding="utf-8") as f:
            json.dump(session.snapshot().model_dump(), f, indent=2, ensure_ascii=False)
    if args.markdown:
        with open(args.markdown, "w", encoding="utf-8") as f:
            f.write(to_markdown(session))
    return 0


if __name__ == "__main__":
    sys.exit(main())
