import tempfile
import unittest
from pathlib import Path

from detect_kit.metadata import COCO_CLASS_NAMES, class_label, coco_class_names, load_class_names


class TestClassNames(unittest.TestCase):
    def test_coco_has_80_classes(self) -> None:
        names = coco_class_names()
        self.assertEqual(len(COCO_CLASS_NAMES), 80)
        self.assertEqual(names[0], "person")
        self.assertEqual(names[79], "toothbrush")

    def test_load_names_block(self) -> None:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        path = Path(tmpdir.name) / "metadata.yaml"
        path.write_text(
            "description: test\nnames:\n  0: person\n  1: 'traffic light'\nimgsz:\n- 640\n",
            encoding="utf-8",
        )
        self.assertEqual(load_class_names(path), {0: "person", 1: "traffic light"})

    def test_missing_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_class_names("does/not/exist.yaml")

    def test_unknown_class_falls_back_to_id(self) -> None:
        self.assertEqual(class_label({0: "cat"}, 0), "cat")
        self.assertEqual(class_label({0: "cat"}, 7), "7")
        self.assertEqual(class_label(None, 3), "3")


if __name__ == "__main__":
    unittest.main()
