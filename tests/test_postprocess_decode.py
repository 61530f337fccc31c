import unittest

import numpy as np

from detect_kit.errors import ShapeMismatch
from detect_kit.postprocess import BoxDecoder, DecoderConfig, scaled_xyxy


def _preds(boxes_cxcywh, class_scores) -> np.ndarray:
    boxes = np.asarray(boxes_cxcywh, dtype=np.float32).T  # (4, A)
    scores = np.asarray(class_scores, dtype=np.float32)  # (C, A)
    return np.vstack([boxes, scores])[None, ...]


class TestBoxDecoderShape(unittest.TestCase):
    def test_split_layout(self) -> None:
        p = _preds([[50, 60, 10, 20], [55, 66, 12, 18]], [[0.1, 0.7], [0.9, 0.1], [0.2, 0.2]])
        post = BoxDecoder(DecoderConfig(num_classes=3))
        boxes, scores = post._decode(p)
        self.assertEqual(boxes.shape, (2, 4))
        self.assertEqual(scores.shape, (3, 2))
        self.assertTrue(np.allclose(boxes[1], [55, 66, 12, 18]))

    def test_wrong_attribute_count(self) -> None:
        post = BoxDecoder(DecoderConfig(num_classes=80))
        with self.assertRaises(ShapeMismatch):
            post._decode(np.zeros((1, 7, 16), dtype=np.float32))

    def test_wrong_rank_and_batch(self) -> None:
        post = BoxDecoder(DecoderConfig(num_classes=3))
        with self.assertRaises(ShapeMismatch):
            post._decode(np.zeros((7, 16), dtype=np.float32))
        with self.assertRaises(ShapeMismatch):
            post._decode(np.zeros((2, 7, 16), dtype=np.float32))

    def test_shape_mismatch_is_a_value_error(self) -> None:
        with self.assertRaises(ValueError):
            BoxDecoder(DecoderConfig(num_classes=80)).process(
                np.zeros((1, 10, 4), dtype=np.float32), orig_size=(640, 640), input_size=(640, 640)
            )


class TestBoxDecoderProcess(unittest.TestCase):
    def test_scaled_to_original(self) -> None:
        p = _preds([[50, 60, 20, 40]], [[0.9], [0.0], [0.0]])
        post = BoxDecoder(DecoderConfig(num_classes=3, iou_threshold=0.45, score_threshold=0.25))
        dets = post.process(p, orig_size=(200, 100), input_size=(100, 100))
        self.assertEqual(len(dets), 1)
        d = dets[0]
        # scale_x = 2, scale_y = 1
        self.assertEqual((d.left, d.top, d.width, d.height), (80, 40, 39, 39))
        self.assertEqual(d.class_id, 0)
        self.assertAlmostEqual(d.score, 0.9, places=5)

    def test_negative_coordinates_saturate(self) -> None:
        p = _preds([[2, 3, 10, 10]], [[0.9]])
        dets = BoxDecoder(DecoderConfig(num_classes=1)).process(p, orig_size=(64, 64), input_size=(64, 64))
        self.assertEqual((dets[0].left, dets[0].top), (0, 0))
        self.assertEqual(dets[0].width, 9)

    def test_degenerate_box_is_kept(self) -> None:
        p = _preds([[30, 30, 0, 0]], [[0.5]])
        dets = BoxDecoder(DecoderConfig(num_classes=1)).process(p, orig_size=(64, 64), input_size=(64, 64))
        self.assertEqual(len(dets), 1)
        self.assertEqual((dets[0].width, dets[0].height), (0, 0))
        self.assertTrue(dets[0].is_degenerate)

    def test_suppression_and_score_filter(self) -> None:
        p = _preds(
            [[50, 50, 20, 20], [51, 50, 20, 20], [10, 10, 4, 4]],
            [[0.9, 0.8, 0.005], [0.0, 0.6, 0.0]],
        )
        post = BoxDecoder(DecoderConfig(num_classes=2, iou_threshold=0.5, score_threshold=0.01))
        dets = post.process(p, orig_size=(100, 100), input_size=(100, 100))
        self.assertEqual([(d.class_id, round(d.score, 2)) for d in dets], [(0, 0.9), (1, 0.6)])

    def test_default_profile_keeps_duplicates(self) -> None:
        p = _preds([[50, 50, 20, 20], [50, 50, 20, 20]], [[0.9, 0.8]])
        dets = BoxDecoder(DecoderConfig(num_classes=1)).process(p, orig_size=(100, 100), input_size=(100, 100))
        self.assertEqual(len(dets), 2)

    def test_no_candidates(self) -> None:
        p = _preds([[50, 50, 20, 20]], [[0.001]])
        self.assertEqual(BoxDecoder(DecoderConfig(num_classes=1)).process(p, (100, 100), (100, 100)), [])


class TestGeometry(unittest.TestCase):
    def test_left_le_right_after_scaling(self) -> None:
        rng = np.random.default_rng(3)
        for _ in range(200):
            box = rng.uniform(-50, 700, size=4)
            sx, sy = rng.uniform(0.1, 8.0, size=2)
            left, top, right, bottom = scaled_xyxy(box, sx, sy)
            self.assertLessEqual(left, right)
            self.assertLessEqual(top, bottom)


if __name__ == "__main__":
    unittest.main()
