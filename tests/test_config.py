import json
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from dogfood.config import ConfigValidationError, load_run_config, parse_run_config


class TestRunConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        cfg = parse_run_config({})
        self.assertEqual(cfg.lines_per_dog, 128)
        self.assertEqual(cfg.walks_per_line, 64)
        self.assertEqual(cfg.dog_food_path, "dog_food_lines.csv")
        self.assertEqual(cfg.mapping_dir, ".")

    def test_bounds(self) -> None:
        for field in ("lines_per_dog", "walks_per_line"):
            for ok in (1, 255, "12"):
                self.assertIsNotNone(parse_run_config({field: ok}))
            for bad in (0, 256, -3, True, 2.5, "many", [1]):
                with self.subTest(field=field, value=bad):
                    with self.assertRaises(ConfigValidationError):
                        parse_run_config({field: bad})

    def test_mapping_dir_can_be_disabled(self) -> None:
        self.assertIsNone(parse_run_config({"mapping_dir": None}).mapping_dir)
        with self.assertRaises(ConfigValidationError):
            parse_run_config({"mapping_dir": ""})

    def test_rejects_bad_paths_and_unknown_keys(self) -> None:
        with self.assertRaises(ConfigValidationError):
            parse_run_config({"output_path": ""})
        with self.assertRaises(ConfigValidationError):
            parse_run_config({"output_path": 3})
        with self.assertRaises(ConfigValidationError):
            parse_run_config({"lines": 3})
        with self.assertRaises(ConfigValidationError):
            parse_run_config([])  # type: ignore[arg-type]

    def test_load_from_json(self) -> None:
        with TemporaryDirectory() as d:
            p = Path(d) / "run.json"
            p.write_text(json.dumps({"lines_per_dog": 4, "output_path": "corpus.txt"}), encoding="utf-8")
            cfg = load_run_config(str(p))
            self.assertEqual(cfg.lines_per_dog, 4)
            self.assertEqual(cfg.output_path, "corpus.txt")
