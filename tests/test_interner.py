import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from dogfood.encoding import CompactEncoding
from dogfood.interner import Interner, UnknownCode, write_mapping


class TestInterner(unittest.TestCase):
    def test_codes_follow_first_appearance(self) -> None:
        it = Interner("dog")
        self.assertEqual([it.intern(s) for s in ["Sparky", "Max", "Sparky", "Rex", "Max"]], [0, 1, 0, 2, 1])
        self.assertEqual(len(it), 3)
        self.assertEqual(list(it.codes()), [0, 1, 2])
        self.assertEqual(list(it.items()), [("Sparky", 0), ("Max", 1), ("Rex", 2)])

    def test_string_for(self) -> None:
        it = Interner("food")
        it.intern("burger")
        it.intern("taco")
        self.assertEqual(it.string_for(1), "taco")
        self.assertEqual(it.string_for(0), "burger")

    def test_string_for_unknown_code(self) -> None:
        it = Interner("flavor")
        it.intern("salty")
        for bad in (1, -1):
            with self.assertRaises(UnknownCode):
                it.string_for(bad)

    def test_write_mapping(self) -> None:
        it = Interner("dog")
        it.intern("Sparky")
        it.intern("Max")
        with TemporaryDirectory() as d:
            p = write_mapping(it, Path(d) / "sub" / "dog_mapping.csv", CompactEncoding(2))
            self.assertEqual(p.read_text(encoding="utf-8"), "Sparky,AAA\nMax,AQA\n")
