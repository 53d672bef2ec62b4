import pickle
import unittest

from dogfood.encoding import MAX_CODES, CompactEncoding, encode_code
from dogfood.interner import UnknownCode


class TestCompactEncoding(unittest.TestCase):
    def test_known_tokens(self) -> None:
        self.assertEqual(encode_code(0), b"AAA")
        self.assertEqual(encode_code(1), b"AQA")
        self.assertEqual(encode_code(256), b"AAE")
        self.assertEqual(encode_code(65535), b"//8")

    def test_cache_matches_encoder_and_is_fixed_width(self) -> None:
        enc = CompactEncoding(1000)
        self.assertEqual(len(enc), 1000)
        for code in (0, 1, 63, 64, 255, 999):
            self.assertEqual(enc.encode(code), encode_code(code))
            self.assertEqual(len(enc.encode(code)), 3)
        self.assertEqual(len(set(enc.tokens)), 1000)

    def test_decode_inverts_encode(self) -> None:
        enc = CompactEncoding(MAX_CODES)
        for code in (0, 7, 4095, 4096, 40000, 65535):
            self.assertEqual(enc.decode(enc.encode(code)), code)
        self.assertEqual(enc.decode("AQA"), 1)

    def test_decode_rejects_bad_tokens(self) -> None:
        enc = CompactEncoding(1)
        for bad in ("AA", "AAAA", "A*A"):
            with self.assertRaises(ValueError):
                enc.decode(bad)

    def test_out_of_range(self) -> None:
        enc = CompactEncoding(3)
        with self.assertRaises(UnknownCode):
            enc.encode(3)
        with self.assertRaises(UnknownCode):
            enc.encode(-1)

    def test_size_limits(self) -> None:
        self.assertEqual(len(CompactEncoding(0)), 0)
        with self.assertRaises(ValueError):
            CompactEncoding(MAX_CODES + 1)

    def test_pickles(self) -> None:
        for size in (0, 5):
            enc = pickle.loads(pickle.dumps(CompactEncoding(size)))
            self.assertEqual(len(enc), size)
