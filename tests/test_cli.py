import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout

from natded.cli import Shell, main
from natded.logic.ast import Atom, Instantiated
from harness import ident, new_session, value_hyp

SCRIPT = """\
# A ∧ B ⊃ B ∧ A
select 1 1
apply ImplIntro up
select 1 2
apply AndIntro up
assume 0
select 2 1
apply AndElimSnd down
merge 2 1 3
assume 0
select 2 1
apply AndElimFst down
merge 2 1 5
show
"""


class TestScriptMode(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def _path(self, name):
        return os.path.join(self.tmp.name, name)

    def _run(self, argv):
        buf = io.StringIO()
        with redirect_stdout(buf):
            rc = main(argv)
        return rc, buf.getvalue()

    def test_full_proof_from_script(self):
        with open(self._path("proof.txt"), "w", encoding="utf-8") as f:
            f.write(SCRIPT)
        rc, out = self._run(["A && B -> B && A", "--script", self._path("proof.txt"),
                             "--json", self._path("proof.json"), "--markdown", self._path("proof.md")])
        self.assertEqual(rc, 0)
        self.assertNotIn("error:", out)
        self.assertIn("Goal: A ∧ B ⊃ B ∧ A  (complete)", out)

        with open(self._path("proof.json"), "r", encoding="utf-8") as f:
            snap = json.load(f)
        self.assertTrue(snap["complete"])
        self.assertEqual(len(snap["contexts"]), 1)
        with open(self._path("proof.md"), "r", encoding="utf-8") as f:
            self.assertIn("**Status:** ✓ complete", f.read())

    def test_errors_are_reported_and_the_script_goes_on(self):
        with open(self._path("bad.txt"), "w", encoding="utf-8") as f:
            f.write("apply TrueIntro up\nfrobnicate\nselect 9 1\nselect 1 1\napply AndIntro up\nquit\nshow\n")
        rc, out = self._run(["A", "--script", self._path("bad.txt")])
        self.assertEqual(rc, 0)
        self.assertIn("error: Select a proof tree node first.", out)
        self.assertIn("Unknown command: frobnicate", out)
        self.assertIn("error: No context #9.", out)
        self.assertIn("error: Conclusion is not a conjunction.", out)
        # nothing runs after quit
        self.assertNotIn("Goal:", out)

    def test_version(self):
        rc, out = self._run(["-V"])
        self.assertEqual(rc, 0)
        self.assertTrue(out.startswith("natded v"))


class TestShell(unittest.TestCase):
    def setUp(self):
        self.lines = []

    def shell(self, session):
        return Shell(session, out=self.lines.append)

    def test_answer_and_cancel(self):
        sh = self.shell(new_session("B"))
        sh.execute("select 1 1")
        sh.execute("apply ImplElim up")
        self.assertIn("? Enter antecedent of implication.", self.lines[-1])
        sh.execute("answer A -> A")
        self.assertEqual([n.conclusion.prop for n in sh.session.primary_context.proof_tree.premises][1],
                         sh.session.engine.parse_prop("A -> A"))
        sh.execute("cancel")
        self.assertEqual(self.lines[-1], "Cancelled.")
        sh.execute("answer X")
        self.assertEqual(self.lines[-1], "error: There is no open prompt.")

    def test_pick_and_bind(self):
        c = ident("c")
        s = new_session(Atom("P", (Instantiated(c), Instantiated(c))), [value_hyp("c", "t", c)])
        sh = self.shell(s)
        sh.execute("select 1 1")
        sh.execute("apply ForAllElim up")
        self.assertIn("(bind [IDENT_INDEX] I,J   or   bind - I,J)", self.lines[-1])
        sh.execute("bind - 1")
        self.assertIn("[0] c : t", self.lines[-1])
        sh.execute("pick 0")
        bound = s.primary_context.proof_tree.premises[0].conclusion.prop
        self.assertEqual(s.engine.print_prop(bound), "∀x:t. P(c, x)")

    def test_move_trash_and_reset(self):
        s = new_session("A", [value_hyp("c")])
        sh = self.shell(s)
        sh.execute("assume 0")
        sh.execute("move 2 5 5")
        self.assertEqual(self.lines[-1], "moved")
        self.assertEqual((s.contexts[1].x, s.contexts[1].y), (15, 15))
        sh.execute("trash 1")
        self.assertEqual(self.lines[-1], "error: You cannot delete your main proof tree.")
        sh.execute("trash 2")
        self.assertEqual(self.lines[-1], "trashed")
        sh.execute("reset B | C")
        self.assertIn("Goal: B ∨ C", self.lines[-1])

    def test_unapply(self):
        s = new_session("A & B")
        sh = self.shell(s)
        sh.execute("select 1 1")
        sh.execute("apply AndIntro up")
        sh.execute("unapply 1 1")
        self.assertEqual(len(s.contexts), 3)
        self.assertIn("#3 at (100, 100)", self.lines[-1])


if __name__ == "__main__":
    unittest.main()
