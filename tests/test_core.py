import unittest

from natded.core.assumptions import Assumption, AssumptionContext, AssumptionStore
from natded.core.ids import BINDER_ALPHABET, IdentifierGenerator, NumberGenerator
from natded.core.tree import (
    ProofTreeNode, ProofTreeRule, PropIsTrue, TypeJudgement, find_node, iter_nodes, leaf_from_prop,
    leaf_from_type_judgement, open_goals, parent_of, replace_node, to_kernel_tree,
)
from natded.dnd.collision import (
    CANVAS_ID, TRASH_ID, DropCandidate, Rect, intersection_ratio, rank_drop_targets, resolve_drop_target,
)
from natded.logic.ast import Identifier
from harness import P, ident


class TestGenerators(unittest.TestCase):
    def test_identifier_sequence(self):
        gen = IdentifierGenerator()
        names = [gen() for _ in range(28)]
        self.assertEqual(names[:3], ["a", "b", "c"])
        self.assertEqual(names[25:28], ["z", "aa", "ab"])

    def test_no_repeats_within_an_epoch(self):
        gen, num = IdentifierGenerator(), NumberGenerator()
        names = [gen() for _ in range(10000)]
        numbers = [num() for _ in range(10000)]
        self.assertEqual(len(set(names)), 10000)
        self.assertEqual(numbers, list(range(10000)))

    def test_reset_starts_over(self):
        gen, num = IdentifierGenerator(), NumberGenerator()
        gen(), gen(), num()
        gen.reset()
        num.reset()
        self.assertEqual(gen(), "a")
        self.assertEqual(num(), 0)

    def test_custom_alphabet(self):
        gen = IdentifierGenerator(BINDER_ALPHABET)
        self.assertEqual([gen(), gen(), gen()], ["x", "y", "z"])
        with self.assertRaises(ValueError):
            IdentifierGenerator("")
        with self.assertRaises(ValueError):
            IdentifierGenerator("aab")


class TestProofTree(unittest.TestCase):
    def setUp(self):
        self.left = leaf_from_prop(P("A"))
        self.right = leaf_from_prop(P("B"))
        self.root = ProofTreeNode("root", [self.left, self.right], ProofTreeRule("AndIntro"), PropIsTrue(P("A & B")))

    def test_leaves_get_fresh_ids(self):
        self.assertNotEqual(leaf_from_prop(P("A")).id, leaf_from_prop(P("A")).id)
        j = leaf_from_type_judgement(Identifier("c", 0), "t")
        self.assertEqual(j.conclusion, TypeJudgement(Identifier("c", 0), "t"))
        self.assertTrue(j.is_open)

    def test_find_is_preorder(self):
        self.assertEqual([n.id for n in iter_nodes(self.root)], ["root", self.left.id, self.right.id])
        self.assertIs(find_node(self.root, self.right.id), self.right)
        self.assertIsNone(find_node(self.root, "missing"))
        self.assertIs(parent_of(self.root, self.left.id), self.root)

    def test_replace_in_place(self):
        replacement = ProofTreeNode("new", [], ProofTreeRule("Ident", (Identifier("a", 0),)), PropIsTrue(P("A")))
        self.assertTrue(replace_node(self.root, self.left.id, replacement))
        self.assertIs(self.root.premises[0], self.left)
        self.assertEqual(self.left.id, "new")
        self.assertEqual(self.left.rule.kind, "Ident")
        self.assertFalse(replace_node(self.root, "missing", replacement))

    def test_replace_keeping_the_id(self):
        old = self.right.id
        replace_node(self.root, old, ProofTreeNode("other", [], None, PropIsTrue(P("C"))), keep_id=True)
        self.assertEqual(self.right.id, old)
        self.assertEqual(self.right.conclusion, PropIsTrue(P("C")))

    def test_unknown_rule_kind(self):
        with self.assertRaises(ValueError):
            ProofTreeRule("Magic")

    def test_kernel_tree_closes_open_goals_with_sorry(self):
        kernel = to_kernel_tree(self.root)
        self.assertEqual([n.rule.kind for n in iter_nodes(kernel)], ["AndIntro", "Sorry", "Sorry"])
        self.assertEqual(len(open_goals(self.root)), 2)


class TestAssumptionStore(unittest.TestCase):
    def setUp(self):
        self.store = AssumptionStore()
        self.a = AssumptionContext(Assumption.prop_is_true(ident("a"), P("A")), "ctx1", "n1")
        self.b = AssumptionContext(Assumption.of_datatype(ident("b"), "t"), "ctx1", "n2")
        self.c = AssumptionContext(Assumption.prop_is_true(ident("c"), P("C")), "ctx2", "n3")
        self.store.add([self.a, self.b, self.c])

    def test_query_by_context(self):
        self.assertEqual(self.store.query("ctx1"), [self.a, self.b])
        self.assertEqual(len(self.store), 3)
        self.assertEqual(self.store.used_names(), {"a", "b", "c"})

    def test_remove_by_owner(self):
        removed = self.store.remove_by_owner("ctx1", "n1")
        self.assertEqual(removed, [self.a])
        self.assertEqual(self.store.all(), [self.b, self.c])

    def test_remove_by_context_and_identifiers(self):
        self.store.remove_by_context("ctx1")
        self.assertEqual(self.store.all(), [self.c])
        self.store.remove_by_identifiers([self.c.assumption.ident])
        self.assertEqual(len(self.store), 0)

    def test_reassign_keeps_order(self):
        moved = self.store.reassign("ctx1", "ctx9", {"n2"})
        self.assertEqual(moved, 1)
        self.assertEqual([a.owning_reasoning_ctx_id for a in self.store], ["ctx1", "ctx9", "ctx2"])
        self.assertEqual(self.store.query("ctx9"), [self.store.all()[1]])
        self.assertEqual(self.store.all()[1].assumption, self.b.assumption)

    def test_conclusions(self):
        self.assertEqual(self.a.assumption.conclusion(), PropIsTrue(P("A")))
        self.assertEqual(self.b.assumption.conclusion(), TypeJudgement(self.b.assumption.ident, "t"))
        self.assertTrue(self.b.assumption.is_datatype)


class TestDropResolver(unittest.TestCase):
    canvas = DropCandidate(CANVAS_ID, Rect(0, 0, 1000, 1000))

    def test_intersection_over_union(self):
        self.assertEqual(intersection_ratio(Rect(0, 0, 10, 10), Rect(0, 0, 10, 10)), 1.0)
        self.assertEqual(intersection_ratio(Rect(0, 0, 10, 10), Rect(5, 0, 10, 10)), round(50 / 150, 4))
        # touching edges do not count
        self.assertEqual(intersection_ratio(Rect(0, 0, 10, 10), Rect(10, 0, 10, 10)), 0.0)

    def test_canvas_sorts_last(self):
        leaf = DropCandidate("leaf", Rect(0, 0, 10, 10), "ctx", "leaf")
        ranked = rank_drop_targets(Rect(2, 2, 10, 10), [self.canvas, leaf])
        self.assertEqual([c.id for c, _ in ranked], ["leaf", CANVAS_ID])

    def test_best_overlap_wins_and_ties_break_by_id(self):
        trash = DropCandidate(TRASH_ID, Rect(0, 0, 10, 10))
        near = DropCandidate("b-leaf", Rect(20, 0, 10, 10), "ctx", "b-leaf")
        twin = DropCandidate("a-leaf", Rect(20, 0, 10, 10), "ctx", "a-leaf")
        self.assertEqual(resolve_drop_target(Rect(1, 0, 10, 10), [self.canvas, trash, near]), trash)
        self.assertEqual(resolve_drop_target(Rect(20, 0, 10, 10), [near, twin, self.canvas]), twin)

    def test_nothing_under_the_drag(self):
        far = DropCandidate("leaf", Rect(500, 500, 10, 10), "ctx", "leaf")
        self.assertIsNone(resolve_drop_target(Rect(0, 0, 10, 10), [far]))
        self.assertTrue(self.canvas.is_canvas)


if __name__ == "__main__":
    unittest.main()
