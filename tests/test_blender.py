import unittest

import numpy as np

from Glitch_Art.blender import BACKGROUND_SENTINEL, blend_composites, blend_pixels, canvas_size, tile_sample
from Glitch_Art.compositor import CompositeImage, CompositeKind, LabelPlacement
from Glitch_Art.text import TextStyle


def _sentinel(h: int, w: int) -> np.ndarray:
    img = np.zeros((h, w, 4), dtype=np.uint8)
    img[:, :] = BACKGROUND_SENTINEL
    return img


def _comp(pixels: np.ndarray, labels=None) -> CompositeImage:
    return CompositeImage(kind=CompositeKind.EDGE, pixels=pixels, labels=list(labels or []))


class TestBlendPixels(unittest.TestCase):
    def test_single_bright_pixel_survives(self) -> None:
        lit = _sentinel(4, 4)
        lit[1, 1] = (200, 100, 50, 255)
        canvas = blend_composites([_comp(_sentinel(4, 4)), _comp(_sentinel(4, 4)), _comp(lit)], draw_labels=False)

        self.assertEqual(canvas.shape, (4, 4, 4))
        self.assertEqual(canvas[1, 1].tolist(), [200, 100, 50, 255])
        expected = _sentinel(4, 4)
        expected[1, 1] = (200, 100, 50, 255)
        self.assertTrue(np.array_equal(canvas, expected))

    def test_channel_max_not_average(self) -> None:
        a = _sentinel(2, 2)
        b = _sentinel(2, 2)
        a[0, 0] = (10, 200, 30, 255)
        b[0, 0] = (100, 20, 30, 255)
        canvas = blend_pixels([_comp(a), _comp(b)])
        self.assertEqual(canvas[0, 0].tolist(), [100, 200, 30, 255])

    def test_alpha_comes_from_last_contributor(self) -> None:
        a = _sentinel(2, 2)
        b = _sentinel(2, 2)
        c = _sentinel(2, 2)
        a[0, 1] = (5, 5, 5, 10)
        b[0, 1] = (1, 1, 1, 99)
        # c stays sentinel at (0, 1) and must not reset alpha
        canvas = blend_pixels([_comp(a), _comp(b), _comp(c)])
        self.assertEqual(canvas[0, 1].tolist(), [5, 5, 5, 99])

    def test_transparent_black_is_not_background(self) -> None:
        a = _sentinel(2, 2)
        a[1, 0] = (0, 0, 0, 0)
        canvas = blend_pixels([_comp(a)])
        self.assertEqual(canvas[1, 0].tolist(), [0, 0, 0, 0])

    def test_smaller_images_are_tiled(self) -> None:
        small = _sentinel(2, 3)
        small[1, 2] = (9, 8, 7, 255)
        big = _sentinel(5, 7)
        canvas = blend_pixels([_comp(small), _comp(big)], size=(7, 5))
        lit = {(y, x) for y in range(5) for x in range(7) if canvas[y, x, 0] == 9}
        self.assertEqual(lit, {(1, 2), (1, 5), (3, 2), (3, 5)})

    def test_matches_naive_loop(self) -> None:
        rng = np.random.default_rng(11)
        comps = []
        for h, w in [(5, 6), (4, 9), (7, 5)]:
            px = rng.integers(0, 3, size=(h, w, 4), dtype=np.uint8) * 100
            px[:, :, 3] = np.where(rng.random((h, w)) < 0.5, 255, px[:, :, 3])
            # sprinkle sentinel holes
            holes = rng.random((h, w)) < 0.4
            px[holes] = BACKGROUND_SENTINEL
            comps.append(_comp(px))

        width, height = canvas_size(comps)
        self.assertEqual((width, height), (5, 4))
        canvas = blend_pixels(comps)
        for y in range(height):
            for x in range(width):
                r = g = b = 0
                a = 255
                for c in comps:
                    p = c.pixels[y % c.height, x % c.width]
                    if tuple(int(v) for v in p) != BACKGROUND_SENTINEL:
                        r, g, b = max(r, int(p[0])), max(g, int(p[1])), max(b, int(p[2]))
                        a = int(p[3])
                self.assertEqual(canvas[y, x].tolist(), [r, g, b, a])

    def test_empty_input_rejected(self) -> None:
        with self.assertRaises(ValueError):
            blend_composites([])
        with self.assertRaises(ValueError):
            canvas_size([])

    def test_tile_sample_shape(self) -> None:
        px = np.arange(2 * 3 * 4, dtype=np.uint8).reshape(2, 3, 4)
        out = tile_sample(px, 5, 4)
        self.assertEqual(out.shape, (4, 5, 4))
        self.assertTrue(np.array_equal(out[3, 4], px[1, 1]))


class TestBurnLabels(unittest.TestCase):
    def test_labels_are_drawn_in_red(self) -> None:
        style = TextStyle(size=20.0, thickness=2)
        comp = _comp(_sentinel(60, 120), labels=[LabelPlacement("dog", 5, 10)])
        canvas = blend_composites([comp], text_style=style)
        self.assertGreater(int(canvas[:, :, 0].max()), 0)
        self.assertEqual(int(canvas[:, :, 1].max()), 0)
        self.assertEqual(int(canvas[:, :, 2].max()), 0)
        self.assertTrue(np.all(canvas[:, :, 3] == 255))

    def test_labels_off_canvas_are_clipped(self) -> None:
        style = TextStyle(size=20.0, thickness=2)
        comp = _comp(_sentinel(30, 30), labels=[LabelPlacement("far away", -500, -500), LabelPlacement("x", 100, 100)])
        canvas = blend_composites([comp], text_style=style)
        self.assertTrue(np.array_equal(canvas, _sentinel(30, 30)))

    def test_labels_can_be_disabled(self) -> None:
        comp = _comp(_sentinel(30, 30), labels=[LabelPlacement("cat", 0, 0)])
        canvas = blend_composites([comp], draw_labels=False)
        self.assertTrue(np.array_equal(canvas, _sentinel(30, 30)))


if __name__ == "__main__":
    unittest.main()
