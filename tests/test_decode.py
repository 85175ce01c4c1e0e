import unittest

import numpy as np

from detkit.decode import decode_output, flat_index


def make_output(columns, num_classes):
    """
    Build a (1, 4 + num_classes, N) output from per-column
    (cx, cy, w, h, [class scores]) tuples.
    """

    p = np.zeros((4 + num_classes, len(columns)), dtype=np.float32)
    for i, (cx, cy, w, h, scores) in enumerate(columns):
        p[0:4, i] = [cx, cy, w, h]
        p[4:, i] = scores
    return p[None, ...]


class TestFlatIndex(unittest.TestCase):
    def test_column_one_class_zero_in_6x3(self) -> None:
        self.assertEqual(flat_index(4, 1, 3), 13)

    def test_matches_row_major_layout(self) -> None:
        flat = np.arange(18, dtype=np.float32)
        output = flat.reshape(1, 6, 3)
        self.assertEqual(output[0, 4, 1], flat[flat_index(4, 1, 3)])
        self.assertEqual(output[0, 5, 2], flat[flat_index(5, 2, 3)])


class TestDecodeOutput(unittest.TestCase):
    def test_center_to_corners(self) -> None:
        output = make_output([(50, 60, 10, 20, [0.9])], num_classes=1)
        dets = decode_output(output, conf_threshold=0.4)

        self.assertEqual(len(dets), 1)
        self.assertEqual(dets[0].as_xyxy(), (45.0, 50.0, 55.0, 70.0))
        self.assertAlmostEqual(dets[0].score, 0.9, places=6)
        self.assertEqual(dets[0].class_id, 0)

    def test_reads_scores_along_channel_axis(self) -> None:
        # Shape (1, 6, 3): 2 classes, 3 boxes. Column 1's class-0 score sits at flat index 13.
        flat = np.zeros(18, dtype=np.float32)
        flat[13] = 0.75
        dets = decode_output(flat.reshape(1, 6, 3), conf_threshold=0.5)

        self.assertEqual(len(dets), 1)
        self.assertEqual(dets[0].class_id, 0)
        self.assertEqual(dets[0].score, 0.75)

    def test_best_class_wins(self) -> None:
        output = make_output(
            [
                (50, 60, 10, 20, [0.1, 0.9, 0.2]),
                (55, 66, 12, 18, [0.7, 0.1, 0.2]),
            ],
            num_classes=3,
        )
        dets = decode_output(output, conf_threshold=0.4)
        self.assertEqual([d.class_id for d in dets], [1, 0])
        self.assertTrue(np.allclose([d.score for d in dets], [0.9, 0.7]))

    def test_tie_keeps_lowest_class(self) -> None:
        output = make_output([(10, 10, 4, 4, [0.25, 0.75, 0.75])], num_classes=3)
        dets = decode_output(output, conf_threshold=0.5)
        self.assertEqual(dets[0].class_id, 1)

    def test_score_equal_to_threshold_is_dropped(self) -> None:
        output = make_output(
            [
                (10, 10, 4, 4, [0.5]),
                (20, 20, 4, 4, [0.5000001]),
            ],
            num_classes=1,
        )
        dets = decode_output(output, conf_threshold=0.5)
        self.assertEqual(len(dets), 1)
        self.assertEqual(dets[0].as_xyxy(), (18.0, 18.0, 22.0, 22.0))

    def test_column_order_is_kept(self) -> None:
        output = make_output(
            [
                (10, 10, 2, 2, [0.6]),
                (20, 20, 2, 2, [0.9]),
                (30, 30, 2, 2, [0.1]),
                (40, 40, 2, 2, [0.7]),
            ],
            num_classes=1,
        )
        dets = decode_output(output, conf_threshold=0.4)
        self.assertEqual([d.x1 for d in dets], [9.0, 19.0, 39.0])

    def test_degenerate_boxes_are_kept(self) -> None:
        output = make_output([(10, 10, 0, -4, [0.9])], num_classes=1)
        dets = decode_output(output, conf_threshold=0.4)
        self.assertEqual(len(dets), 1)
        self.assertEqual(dets[0].as_xyxy(), (10.0, 12.0, 10.0, 8.0))
        self.assertEqual(dets[0].area(), 0.0)

    def test_nan_score_does_not_hide_best_class(self) -> None:
        output = make_output([(10, 10, 4, 4, [np.nan, 0.9])], num_classes=2)
        dets = decode_output(output, conf_threshold=0.4)
        self.assertEqual(len(dets), 1)
        self.assertEqual(dets[0].class_id, 1)
        self.assertAlmostEqual(dets[0].score, 0.9, places=6)

    def test_all_nan_column_is_dropped(self) -> None:
        output = make_output([(10, 10, 4, 4, [np.nan, np.nan])], num_classes=2)
        self.assertEqual(decode_output(output, conf_threshold=0.0), [])

    def test_threshold_outside_unit_range_is_rejected(self) -> None:
        output = make_output([(10, 10, 4, 4, [-0.2])], num_classes=1)
        for threshold in (-0.5, 1.5):
            with self.subTest(threshold=threshold):
                with self.assertRaises(ValueError):
                    decode_output(output, conf_threshold=threshold)

    def test_zero_threshold_never_emits_non_positive_scores(self) -> None:
        output = make_output([(10, 10, 4, 4, [-0.2, 0.0])], num_classes=2)
        self.assertEqual(decode_output(output, conf_threshold=0.0), [])

    def test_nothing_above_threshold(self) -> None:
        output = make_output([(10, 10, 2, 2, [0.1, 0.2])], num_classes=2)
        self.assertEqual(decode_output(output, conf_threshold=0.4), [])

    def test_accepts_squeezed_output(self) -> None:
        output = make_output([(10, 10, 2, 2, [0.9])], num_classes=1)[0]
        self.assertEqual(len(decode_output(output, conf_threshold=0.4)), 1)

    def test_zero_boxes(self) -> None:
        self.assertEqual(decode_output(np.zeros((1, 84, 0), dtype=np.float32), 0.4), [])

    def test_missing_class_channels_is_fatal(self) -> None:
        with self.assertRaises(ValueError):
            decode_output(np.zeros((1, 4, 10), dtype=np.float32), 0.4)

    def test_batch_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            decode_output(np.zeros((2, 6, 10), dtype=np.float32), 0.4)

    def test_wrong_rank_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            decode_output(np.zeros((10,), dtype=np.float32), 0.4)


if __name__ == "__main__":
    unittest.main()
