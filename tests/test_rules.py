import unittest

from natded.core.assumptions import Assumption
from natded.core.tree import PropIsTrue, TypeJudgement
from natded.errors import CompatibilityError, InputError, SelectionError, ShapeError
from natded.logic.ast import Atom, Instantiated
from natded.rules import (
    NATURAL_DEDUCTION_RULES, AssumptionPrompt, BindingPrompt, IdentifierPrompt, PropPrompt, get_proof_rule,
)
from harness import (
    P, apply, assume, ident, new_session, prop_hyp, select_leaf, select_root, text, value_hyp,
)


def premises(node):
    return [text(p) for p in node.premises]


class TestRuleTable(unittest.TestCase):
    def test_all_fourteen_rules(self):
        ids = [r.id for r in NATURAL_DEDUCTION_RULES]
        self.assertEqual(len(ids), 14)
        self.assertEqual(get_proof_rule("OrElim").handler.rule_id, "OrElim")
        with self.assertRaises(InputError):
            get_proof_rule("Cut")

    def test_unknown_direction(self):
        s = new_session("A")
        select_root(s, s.primary_context)
        with self.assertRaises(InputError):
            s.begin_rule("TrueIntro", "sideways")


class TestTruthRules(unittest.TestCase):
    def test_true_intro_closes_the_goal(self):
        s = new_session("true")
        select_root(s, s.primary_context)
        outcome = apply(s, "TrueIntro", "up")
        self.assertTrue(outcome.committed)
        self.assertEqual(s.primary_context.proof_tree.rule.kind, "TrueIntro")
        self.assertTrue(s.is_complete())

    def test_true_intro_needs_truth(self):
        s = new_session("A")
        select_root(s, s.primary_context)
        with self.assertRaises(ShapeError):
            apply(s, "TrueIntro", "up")

    def test_falsum_elim_upwards(self):
        s = new_session("A")
        select_root(s, s.primary_context)
        apply(s, "FalsumElim", "up")
        self.assertEqual(premises(s.primary_context.proof_tree), ["⊥"])

    def test_falsum_elim_downwards_asks_for_conclusion(self):
        s = new_session("A", [prop_hyp("f", "false")])
        ctx = assume(s, 0)
        select_root(s, ctx)
        outcome = s.begin_rule("FalsumElim", "down")
        self.assertIsInstance(outcome.pending.prompt, PropPrompt)
        outcome = s.resume_rule(outcome.pending, "B -> C")
        self.assertTrue(outcome.committed)
        root = s.find_context(ctx.id).proof_tree
        self.assertEqual(text(root), "B ⊃ C")
        self.assertEqual(premises(root), ["⊥"])
        self.assertEqual(root.premises[0].rule.kind, "Ident")


class TestConjunctionRules(unittest.TestCase):
    def test_and_intro_upwards_keeps_the_conclusion(self):
        s = new_session("A & B")
        root = s.primary_context.proof_tree
        before = (root.id, root.conclusion)
        select_root(s, s.primary_context)
        apply(s, "AndIntro", "Upwards")
        self.assertEqual((root.id, root.conclusion), before)
        self.assertEqual(premises(root), ["A", "B"])
        self.assertTrue(all(p.rule is None for p in root.premises))

    def test_and_intro_downwards_needs_two_props(self):
        s = new_session("C", [prop_hyp("a", "A"), value_hyp("c")])
        x, y = assume(s, 0), assume(s, 1)
        select_root(s, x)
        with self.assertRaises(SelectionError):
            apply(s, "AndIntro", "down")
        select_root(s, y, additive=True)
        with self.assertRaises(ShapeError):
            apply(s, "AndIntro", "down")

    def test_and_elim_upwards_prompts_for_other_conjunct(self):
        s = new_session("A")
        select_root(s, s.primary_context)
        apply(s, "AndElimFst", "up", "B")
        self.assertEqual(premises(s.primary_context.proof_tree), ["A ∧ B"])

        s = new_session("B")
        select_root(s, s.primary_context)
        apply(s, "AndElimSnd", "up", "A")
        self.assertEqual(premises(s.primary_context.proof_tree), ["A ∧ B"])

    def test_and_elim_downwards(self):
        s = new_session("C", [prop_hyp("p", "A & B")])
        fst, snd = assume(s, 0), assume(s, 0)
        select_root(s, fst)
        apply(s, "AndElimFst", "down")
        select_root(s, snd)
        apply(s, "AndElimSnd", "down")
        self.assertEqual(text(s.find_context(fst.id).proof_tree), "A")
        self.assertEqual(text(s.find_context(snd.id).proof_tree), "B")
        self.assertEqual(premises(s.find_context(fst.id).proof_tree), ["A ∧ B"])

    def test_and_elim_downwards_needs_a_conjunction(self):
        s = new_session("C", [prop_hyp("p", "A | B")])
        select_root(s, assume(s, 0))
        with self.assertRaises(ShapeError):
            apply(s, "AndElimFst", "down")


class TestImplicationRules(unittest.TestCase):
    def test_impl_intro_adds_scoped_hypothesis(self):
        s = new_session("A -> B")
        root = s.primary_context.proof_tree
        select_root(s, s.primary_context)
        apply(s, "ImplIntro", "up")
        self.assertEqual(premises(root), ["B"])
        [hyp] = s.assumptions.all()
        self.assertEqual(hyp.assumption.prop, P("A"))
        self.assertEqual(hyp.owning_node_id, root.id)
        self.assertEqual(hyp.owning_reasoning_ctx_id, s.primary_context_id)
        self.assertEqual(root.rule.idents, (hyp.assumption.ident,))

    def test_impl_intro_is_upwards_only(self):
        s = new_session("C", [prop_hyp("h", "A -> B")])
        select_root(s, assume(s, 0))
        with self.assertRaises(SelectionError):
            apply(s, "ImplIntro", "down")

    def test_impl_elim_upwards(self):
        s = new_session("B")
        select_root(s, s.primary_context)
        apply(s, "ImplElim", "up", "A")
        self.assertEqual(premises(s.primary_context.proof_tree), ["A ⊃ B", "A"])

    def test_impl_elim_downwards_on_one_implication(self):
        s = new_session("C", [prop_hyp("h", "A -> B")])
        ctx = assume(s, 0)
        select_root(s, ctx)
        apply(s, "ImplElim", "down")
        root = s.find_context(ctx.id).proof_tree
        self.assertEqual(text(root), "B")
        self.assertEqual(premises(root), ["A ⊃ B", "A"])
        self.assertIsNone(root.premises[1].rule)

    def test_impl_elim_downwards_combines_two_contexts(self):
        s = new_session("C", [prop_hyp("a", "A"), prop_hyp("h", "A -> B")])
        a, h = assume(s, 0), assume(s, 1)
        # selection order does not matter
        select_root(s, a)
        select_root(s, h, additive=True)
        apply(s, "ImplElim", "down")
        self.assertIsNone(s.find_context(a.id))
        self.assertIsNone(s.find_context(h.id))
        root = s.contexts[-1].proof_tree
        self.assertEqual(text(root), "B")
        self.assertEqual(premises(root), ["A ⊃ B", "A"])

    def test_impl_elim_antecedent_mismatch(self):
        s = new_session("D", [prop_hyp("c", "C"), prop_hyp("h", "A -> B")])
        c, h = assume(s, 0), assume(s, 1)
        select_root(s, h)
        select_root(s, c, additive=True)
        revision = s.revision
        with self.assertRaises(CompatibilityError) as cm:
            apply(s, "ImplElim", "down")
        self.assertEqual(cm.exception.message, "Antecedent A does not match C.")
        self.assertEqual(s.revision, revision)
        self.assertEqual(len(s.contexts), 3)
        self.assertEqual(s.find_context(h.id).selected_node_id, h.proof_tree.id)


class TestDisjunctionRules(unittest.TestCase):
    def test_or_intro_upwards(self):
        s = new_session("A | B")
        select_root(s, s.primary_context)
        apply(s, "OrIntroSnd", "up")
        self.assertEqual(premises(s.primary_context.proof_tree), ["B"])

    def test_or_intro_downwards(self):
        s = new_session("C", [prop_hyp("a", "A")])
        fst, snd = assume(s, 0), assume(s, 0)
        select_root(s, fst)
        apply(s, "OrIntroFst", "down", "B")
        select_root(s, snd)
        apply(s, "OrIntroSnd", "down", "B")
        self.assertEqual(text(s.find_context(fst.id).proof_tree), "A ∨ B")
        self.assertEqual(text(s.find_context(snd.id).proof_tree), "B ∨ A")

    def test_or_elim_upwards(self):
        s = new_session("C")
        root = s.primary_context.proof_tree
        select_root(s, s.primary_context)
        apply(s, "OrElim", "up", "A | B")
        self.assertEqual(premises(root), ["A ∨ B", "C", "C"])
        hyps = s.assumptions.all()
        self.assertEqual([h.assumption.prop for h in hyps], [P("A"), P("B")])
        self.assertTrue(all(h.owning_node_id == root.id for h in hyps))
        self.assertEqual([i.name for i in root.rule.idents], ["a", "b"])

    def test_or_elim_rejects_non_disjunction(self):
        s = new_session("C")
        select_root(s, s.primary_context)
        with self.assertRaises(InputError) as cm:
            apply(s, "OrElim", "up", "A & B")
        self.assertEqual(cm.exception.message, "Your input is not a disjunction.")
        self.assertIsNone(s.primary_context.proof_tree.rule)
        self.assertIsNone(s.pending)

    def test_or_elim_downwards(self):
        s = new_session("D", [prop_hyp("d", "A | B")])
        ctx = assume(s, 0)
        select_root(s, ctx)
        apply(s, "OrElim", "down", "C")
        root = s.find_context(ctx.id).proof_tree
        self.assertEqual(premises(root), ["A ∨ B", "C", "C"])
        owned = [h for h in s.assumptions if h.owning_node_id == root.id]
        self.assertEqual([h.assumption.prop for h in owned], [P("A"), P("B")])
        self.assertTrue(all(h.owning_reasoning_ctx_id == ctx.id for h in owned))


class TestQuantifierRules(unittest.TestCase):
    def test_forall_intro(self):
        s = new_session("∀x:t. P(x)")
        root = s.primary_context.proof_tree
        select_root(s, s.primary_context)
        apply(s, "ForAllIntro", "up")
        [hyp] = s.assumptions.all()
        self.assertEqual(hyp.assumption.datatype, "t")
        self.assertEqual(root.premises[0].conclusion,
                         PropIsTrue(Atom("P", (Instantiated(hyp.assumption.ident),))))

    def test_forall_elim_upwards_binds_chosen_value(self):
        c = ident("c")
        goal = Atom("P", (Instantiated(c),))
        s = new_session(goal, [value_hyp("c", "t", c)])
        select_root(s, s.primary_context)
        outcome = s.begin_rule("ForAllElim", "up")
        self.assertIsInstance(outcome.pending.prompt, BindingPrompt)
        self.assertEqual(outcome.pending.prompt.candidates, [c])
        s.resume_rule(s.pending, {"identifier": 0, "indices": None})
        root = s.primary_context.proof_tree
        self.assertEqual(premises(root), ["∀x:t. P(x)", "c : t"])
        self.assertEqual(root.premises[1].conclusion, TypeJudgement(c, "t"))

    def test_forall_elim_asks_for_witness_when_none_chosen(self):
        x = ident("x")
        goal = Atom("P", (Instantiated(x),))
        s = new_session(goal, [value_hyp("x", "t", x)])
        select_root(s, s.primary_context)
        s.begin_rule("ForAllElim", "up")
        outcome = s.resume_rule(s.pending, {"identifier": None, "indices": None})
        self.assertIsInstance(outcome.pending.prompt, AssumptionPrompt)
        s.resume_rule(s.pending, 0)
        # binder name avoids the free value x
        self.assertEqual(premises(s.primary_context.proof_tree), ["∀y:t. P(y)", "x : t"])

    def test_forall_elim_rejects_bad_occurrences(self):
        c = ident("c")
        goal = Atom("P", (Instantiated(c), Instantiated(c)))
        for indices in ([2], [-1]):
            s = new_session(goal, [value_hyp("c", "t", c)])
            select_root(s, s.primary_context)
            s.begin_rule("ForAllElim", "up")
            with self.assertRaises(InputError):
                s.resume_rule(s.pending, {"identifier": 0, "indices": indices})
            self.assertIsNone(s.pending)
            self.assertIsNone(s.primary_context.proof_tree.rule)

    def test_forall_elim_witness_must_occur(self):
        c, d = ident("c"), ident("d")
        s = new_session(Atom("P", (Instantiated(c),)), [value_hyp("c", "t", c), value_hyp("d", "t", d)])
        select_root(s, s.primary_context)
        s.begin_rule("ForAllElim", "up")
        s.resume_rule(s.pending, {"identifier": None, "indices": None})
        with self.assertRaises(InputError) as cm:
            s.resume_rule(s.pending, 1)
        self.assertEqual(cm.exception.message, "d does not occur in the proposition.")
        self.assertIsNone(s.primary_context.proof_tree.rule)

    def test_forall_elim_downwards(self):
        c = ident("c")
        s = new_session("Q", [prop_hyp("u", "∀x:t. P(x)"), value_hyp("c", "t", c)])
        u, v = assume(s, 0), assume(s, 1)
        select_root(s, v)
        select_root(s, u, additive=True)
        apply(s, "ForAllElim", "down")
        root = s.contexts[-1].proof_tree
        self.assertEqual(root.conclusion, PropIsTrue(Atom("P", (Instantiated(c),))))
        self.assertEqual(premises(root), ["∀x:t. P(x)", "c : t"])

    def test_forall_elim_downwards_type_mismatch(self):
        s = new_session("Q", [prop_hyp("u", "∀x:t. P(x)"), value_hyp("c", "s")])
        u, v = assume(s, 0), assume(s, 1)
        select_root(s, u)
        select_root(s, v, additive=True)
        with self.assertRaises(CompatibilityError):
            apply(s, "ForAllElim", "down")
        self.assertEqual(len(s.contexts), 3)

    def test_exists_intro_upwards(self):
        c = ident("c")
        s = new_session("∃x:t. P(x)", [value_hyp("c", "t", c)])
        select_root(s, s.primary_context)
        apply(s, "ExistsIntro", "up", 0)
        root = s.primary_context.proof_tree
        self.assertEqual(premises(root), ["c : t", "P(c)"])
        self.assertEqual(root.premises[1].conclusion, PropIsTrue(Atom("P", (Instantiated(c),))))

    def test_exists_intro_witness_checks(self):
        s = new_session("∃x:t. P(x)")
        select_root(s, s.primary_context)
        with self.assertRaises(InputError) as cm:
            apply(s, "ExistsIntro", "up")
        self.assertEqual(cm.exception.message, "There are no witnesses you can select.")

        s = new_session("∃x:t. P(x)", [value_hyp("c", "s")])
        select_root(s, s.primary_context)
        with self.assertRaises(CompatibilityError):
            apply(s, "ExistsIntro", "up", 0)

    def test_exists_intro_downwards(self):
        c = ident("c")
        has_c = Assumption.prop_is_true(ident("p"), Atom("P", (Instantiated(c),)))
        s = new_session("Q", [value_hyp("c", "t", c), has_c])
        v, p = assume(s, 0), assume(s, 1)
        select_root(s, p)
        select_root(s, v, additive=True)
        outcome = s.begin_rule("ExistsIntro", "down")
        prompt = outcome.pending.prompt
        self.assertEqual(prompt.identifier, c)
        s.resume_rule(s.pending, {"indices": None})
        root = s.contexts[-1].proof_tree
        self.assertEqual(text(root), "∃x:t. P(x)")
        self.assertEqual(premises(root), ["c : t", "P(c)"])

    def test_exists_intro_downwards_rejects_missing_occurrence(self):
        c = ident("c")
        has_c = Assumption.prop_is_true(ident("p"), Atom("P", (Instantiated(c),)))
        s = new_session("Q", [value_hyp("c", "t", c), has_c])
        v, p = assume(s, 0), assume(s, 1)
        select_root(s, p)
        select_root(s, v, additive=True)
        s.begin_rule("ExistsIntro", "down")
        with self.assertRaises(InputError):
            s.resume_rule(s.pending, {"indices": [1]})
        self.assertEqual(len(s.contexts), 3)

    def test_exists_elim_upwards(self):
        s = new_session("C")
        root = s.primary_context.proof_tree
        select_root(s, s.primary_context)
        apply(s, "ExistsElim", "up", "∃x:t. P(x)")
        self.assertEqual(premises(root), ["∃x:t. P(x)", "C"])
        obj, hyp = s.assumptions.all()
        self.assertEqual(obj.assumption.datatype, "t")
        self.assertEqual(hyp.assumption.prop, Atom("P", (Instantiated(obj.assumption.ident),)))
        self.assertEqual(root.rule.idents, (obj.assumption.ident, hyp.assumption.ident))

    def test_exists_elim_rejects_other_input(self):
        s = new_session("C")
        select_root(s, s.primary_context)
        with self.assertRaises(InputError):
            apply(s, "ExistsElim", "up", "∀x:t. P(x)")

    def test_exists_elim_downwards(self):
        s = new_session("D", [prop_hyp("e", "∃x:t. P(x)")])
        ctx = assume(s, 0)
        select_root(s, ctx)
        apply(s, "ExistsElim", "down", "C")
        root = s.find_context(ctx.id).proof_tree
        self.assertEqual(premises(root), ["∃x:t. P(x)", "C"])
        self.assertEqual(len(root.rule.idents), 2)
        self.assertEqual(len([h for h in s.assumptions if h.owning_node_id == root.id]), 2)


class TestPromptedPropositions(unittest.TestCase):
    def test_free_names_resolve_to_values(self):
        c = ident("c")
        s = new_session("B", [value_hyp("c", "t", c)])
        select_root(s, s.primary_context)
        apply(s, "ImplElim", "up", "P(c)")
        antecedent = s.primary_context.proof_tree.premises[1]
        self.assertEqual(antecedent.conclusion, PropIsTrue(Atom("P", (Instantiated(c),))))

    def test_unknown_and_non_value_names(self):
        s = new_session("B", [prop_hyp("h", "A")])
        select_root(s, s.primary_context)
        with self.assertRaises(InputError) as cm:
            apply(s, "ImplElim", "up", "P(z)")
        self.assertEqual(cm.exception.message, "Unknown identifier: z")
        select_root(s, s.primary_context)
        with self.assertRaises(InputError) as cm:
            apply(s, "ImplElim", "up", "P(h)")
        self.assertEqual(cm.exception.message, "Not a value: h")

    def test_ambiguous_names_are_asked_for(self):
        first, second = ident("c"), ident("c")
        s = new_session("B", [value_hyp("c", "t", first), value_hyp("c", "t", second)])
        select_root(s, s.primary_context)
        outcome = apply(s, "ImplElim", "up", "P(c)")
        self.assertIsInstance(outcome.pending.prompt, IdentifierPrompt)
        self.assertEqual(outcome.pending.prompt.options, {"c": [first, second]})
        s.resume_rule(s.pending, ["1"])
        antecedent = s.primary_context.proof_tree.premises[1]
        self.assertEqual(antecedent.conclusion, PropIsTrue(Atom("P", (Instantiated(second),))))

    def test_empty_answer_cancels(self):
        s = new_session("B")
        select_root(s, s.primary_context)
        outcome = apply(s, "ImplElim", "up", "")
        self.assertTrue(outcome.cancelled)
        self.assertIsNone(s.primary_context.proof_tree.rule)


class TestApplicability(unittest.TestCase):
    def test_upwards_needs_an_open_goal(self):
        s = new_session("A & B")
        select_root(s, s.primary_context)
        apply(s, "AndIntro", "up")
        select_root(s, s.primary_context)
        with self.assertRaises(SelectionError):
            apply(s, "AndIntro", "up")

    def test_applicable_rules_follow_the_selection(self):
        s = new_session("A & B", [prop_hyp("p", "C & D")])
        self.assertFalse(any(r.upwards or r.downwards for r in s.applicable_rules()))
        select_root(s, s.primary_context)
        rules = {r.id: r for r in s.applicable_rules()}
        self.assertTrue(rules["AndIntro"].upwards)
        self.assertFalse(rules["OrIntroFst"].upwards)
        self.assertFalse(any(r.downwards for r in rules.values()))
        select_root(s, assume(s, 0))
        rules = {r.id: r for r in s.applicable_rules()}
        self.assertTrue(rules["AndElimFst"].downwards)
        self.assertFalse(rules["AndElimFst"].upwards)

    def test_no_downwards_reasoning_on_the_main_goal(self):
        s = new_session("A & B")
        select_root(s, s.primary_context)
        with self.assertRaises(SelectionError) as cm:
            apply(s, "AndElimFst", "down")
        self.assertEqual(cm.exception.message, "Cannot destruct conclusion as that's what you want to show")

    def test_selecting_a_leaf_of_a_split_goal(self):
        s = new_session("A & (B -> B)")
        select_root(s, s.primary_context)
        apply(s, "AndIntro", "up")
        select_leaf(s, "B ⊃ B")
        apply(s, "ImplIntro", "up")
        self.assertEqual(len(s.assumptions), 1)


if __name__ == "__main__":
    unittest.main()
