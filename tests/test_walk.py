import random
import unittest

from dogfood.loader import Relations, filter_relations
from dogfood.model import build_model
from dogfood.tests_support import StringWalker, decode_walk, sample_relations
from dogfood.walk import format_walk, line_width, render_lines, sample_walk, tokens_per_line


class TestSampleWalk(unittest.TestCase):
    def setUp(self) -> None:
        self.relations = filter_relations(sample_relations())
        self.model = build_model(self.relations)
        self.oracle = StringWalker(self.relations)

    def test_length(self) -> None:
        for w in (1, 2, 17):
            walk = sample_walk(self.model, 0, w, random.Random(w))
            self.assertEqual(len(walk), tokens_per_line(w))
            self.assertEqual(walk[0], 0)

    def test_every_hop_follows_an_edge(self) -> None:
        rng = random.Random(7)
        for dog in self.model.dog_codes():
            for _ in range(25):
                walk = sample_walk(self.model, dog, 5, rng)
                self.assertTrue(self.oracle.is_valid_walk(decode_walk(self.model, walk)))

    def test_matches_string_keyed_walker(self) -> None:
        for seed in range(10):
            coded = sample_walk(self.model, 1, 4, random.Random(seed))
            expected = self.oracle.line("Max", 4, random.Random(seed))
            self.assertEqual(decode_walk(self.model, coded), expected)

    def test_outbound_and_return_hops_are_recorded_separately(self) -> None:
        # d only likes f0, and f0 only holds i0; the flavor s leads back through i0 or i1.
        rel = Relations(
            dog_food=[("d", "f0"), ("d2", "f1")],
            food_ingredient=[("f0", "i0"), ("f1", "i1")],
            ingredient_flavor=[("i0", "s"), ("i1", "s")],
        )
        model = build_model(rel)
        oracle = StringWalker(rel)
        returned_elsewhere = 0
        for seed in range(50):
            walk = sample_walk(model, 0, 1, random.Random(seed))
            self.assertEqual(walk[:4], [0, 0, 0, 0])
            self.assertEqual(walk[4], walk[5])
            self.assertEqual(walk[5], walk[6])
            self.assertTrue(oracle.is_valid_walk(decode_walk(model, walk)))
            if walk[5] != walk[1]:
                returned_elsewhere += 1
        self.assertGreater(returned_elsewhere, 0)

    def test_rejects_zero_walks(self) -> None:
        with self.assertRaises(ValueError):
            sample_walk(self.model, 0, 0)

    def test_unseeded_by_default(self) -> None:
        walks = {tuple(sample_walk(self.model, 0, 30)) for _ in range(5)}
        self.assertGreater(len(walks), 1)


class TestRenderLines(unittest.TestCase):
    def setUp(self) -> None:
        self.model = build_model(filter_relations(sample_relations()))

    def test_line_shape(self) -> None:
        for w in (1, 3, 255):
            out = render_lines(self.model, 1, 4, w, lambda n: random.Random(n))
            self.assertEqual(len(out), 4 * line_width(w))
            lines = out.split(b"\n")
            self.assertEqual(lines[-1], b"")
            for line in lines[:-1]:
                tokens = line.split(b" ")
                self.assertEqual(len(tokens), 1 + 6 * w)
                self.assertTrue(all(len(t) == 3 for t in tokens))
                self.assertEqual(tokens[0], self.model.encoding.encode(1))

    def test_same_bytes_as_format_walk(self) -> None:
        out = render_lines(self.model, 0, 3, 2, lambda n: random.Random(100 + n), first_line=5)
        expected = b"".join(
            format_walk(sample_walk(self.model, 0, 2, random.Random(105 + n)), self.model.encoding)
            for n in range(3)
        )
        self.assertEqual(out, expected)

    def test_zero_lines(self) -> None:
        self.assertEqual(render_lines(self.model, 0, 0, 2, lambda n: random.Random()), b"")
