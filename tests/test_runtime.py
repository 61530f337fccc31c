import unittest

import numpy as np

from detect_kit.errors import DetectionError, ModelContractViolation
from detect_kit.postprocess import DecoderConfig
from detect_kit.runtime import DEFAULT_INPUT_SIZE, ObjectDetector, preprocess, resolve_input_size


class TestResolveInputSize(unittest.TestCase):
    def test_fixed_dims(self) -> None:
        self.assertEqual(resolve_input_size([1, 3, 480, 640]), (480, 640))

    def test_dynamic_dims_use_fallback(self) -> None:
        self.assertEqual(resolve_input_size(["batch", 3, "height", "width"]), DEFAULT_INPUT_SIZE)
        self.assertEqual(resolve_input_size([1, 3, None, None], fallback=(320, 256)), (320, 256))

    def test_no_fallback_is_a_contract_violation(self) -> None:
        with self.assertRaises(ModelContractViolation):
            resolve_input_size(["batch", 3, "height", "width"], fallback=None)
        with self.assertRaises(DetectionError):
            resolve_input_size(None)


class TestPreprocess(unittest.TestCase):
    def test_blob_layout(self) -> None:
        img = np.full((30, 40, 3), 255, dtype=np.uint8)
        prep = preprocess(img, (64, 32))
        self.assertEqual(prep.blob.shape, (1, 3, 64, 32))
        self.assertEqual(prep.blob.dtype, np.float32)
        self.assertEqual(prep.orig_size, (40, 30))
        self.assertEqual(prep.input_size, (32, 64))
        self.assertTrue(np.allclose(prep.blob, 1.0))

    def test_rejects_non_rgb(self) -> None:
        with self.assertRaises(ValueError):
            preprocess(np.zeros((10, 10), dtype=np.uint8), (32, 32))


class TestObjectDetector(unittest.TestCase):
    def test_end_to_end_with_fake_model(self) -> None:
        seen = {}

        def infer(blob: np.ndarray) -> np.ndarray:
            seen["shape"] = blob.shape
            out = np.zeros((1, 4 + 2, 3), dtype=np.float32)
            out[0, :4, 0] = [32, 32, 16, 16]
            out[0, 5, 0] = 0.8  # class 1
            return out

        detector = ObjectDetector(
            infer,
            input_shape=[1, 3, 64, 64],
            decoder_cfg=DecoderConfig(num_classes=2, iou_threshold=0.5, score_threshold=0.1),
        )
        dets = detector(np.zeros((128, 256, 3), dtype=np.uint8))
        self.assertEqual(seen["shape"], (1, 3, 64, 64))
        self.assertEqual(len(dets), 1)
        d = dets[0]
        # scale_x = 4, scale_y = 2
        self.assertEqual((d.left, d.top, d.width, d.height, d.class_id), (96, 48, 63, 31, 1))

    def test_dynamic_model_without_fallback_fails_at_construction(self) -> None:
        with self.assertRaises(ModelContractViolation):
            ObjectDetector(lambda b: b, input_shape=[1, 3, "h", "w"], input_fallback=None)


if __name__ == "__main__":
    unittest.main()
