from __future__ import annotations

import unittest

import torch

from candlechart_host.window_matrix import INVALID_PIXEL, FullRewrite, ReplaceRect, WindowMatrix, WriteBatch, to_rgba255


MAGENTA = INVALID_PIXEL


class WindowMatrixTests(unittest.TestCase):
    def test_init_uses_canonical_shape_dtype(self) -> None:
        matrix = WindowMatrix(height=3, width=4, background=(240, 240, 240, 255))
        snap = matrix.read_snapshot()
        self.assertEqual(tuple(snap.shape), (3, 4, 4))
        self.assertEqual(snap.dtype, torch.uint8)
        self.assertTrue(torch.all(snap[:, :, 0] == 240))
        self.assertEqual(matrix.pending_call_blit_count(), 0)
        self.assertEqual(matrix.revision, 0)

    def test_rejects_empty_size(self) -> None:
        with self.assertRaises(ValueError):
            WindowMatrix(height=0, width=4)

    def test_full_rewrite_emits_call_blit(self) -> None:
        matrix = WindowMatrix(height=2, width=2)
        payload = torch.tensor(
            [
                [[1, 2, 3, 4], [10, 11, 12, 13]],
                [[21, 22, 23, 24], [30, 31, 32, 33]],
            ],
            dtype=torch.uint8,
        )
        event = matrix.submit_write_batch(WriteBatch([FullRewrite(payload)]))
        self.assertEqual(event.revision, 1)
        self.assertEqual(matrix.pending_call_blit_count(), 1)
        self.assertIsNotNone(matrix.pop_call_blit())
        self.assertIsNone(matrix.pop_call_blit())
        self.assertTrue(torch.equal(matrix.read_snapshot(), payload))

    def test_invalid_pixels_replaced_and_warned_once_per_batch(self) -> None:
        matrix = WindowMatrix(height=2, width=2)
        invalid_full = torch.tensor(
            [
                [[300, 0, 0, 255], [1, 2, 3, 4]],
                [[5, 6, 7, 8], [9, 10, -1, 12]],
            ],
            dtype=torch.int32,
        )
        invalid_patch = torch.tensor([[[999, 0, 0, 255]]], dtype=torch.int32)
        with self.assertLogs("candlechart_host.window_matrix", level="WARNING") as logs:
            matrix.submit_write_batch(
                WriteBatch(
                    [
                        FullRewrite(invalid_full),
                        ReplaceRect(x=0, y=1, pixels=invalid_patch),
                    ]
                )
            )
        self.assertEqual(len(logs.output), 1)
        self.assertIn("offending_pixels=3", logs.output[0])
        snap = matrix.read_snapshot()
        self.assertTrue(torch.equal(snap[0, 0], MAGENTA))
        self.assertTrue(torch.equal(snap[1, 0], MAGENTA))
        self.assertTrue(torch.equal(snap[1, 1], MAGENTA))
        self.assertTrue(torch.equal(snap[0, 1], torch.tensor([1, 2, 3, 4], dtype=torch.uint8)))

    def test_replace_rect_must_fit(self) -> None:
        matrix = WindowMatrix(height=2, width=2)
        patch = torch.zeros((2, 2, 4), dtype=torch.uint8)
        with self.assertRaises(ValueError):
            matrix.submit_write_batch(WriteBatch([ReplaceRect(x=1, y=0, pixels=patch)]))
        self.assertEqual(matrix.revision, 0)

    def test_shape_mismatch_rejected(self) -> None:
        matrix = WindowMatrix(height=2, width=2)
        with self.assertRaises(ValueError):
            matrix.submit_write_batch(WriteBatch([FullRewrite(torch.zeros((3, 2, 4), dtype=torch.uint8))]))

    def test_empty_batch_and_unknown_op_rejected(self) -> None:
        matrix = WindowMatrix(height=1, width=1)
        with self.assertRaises(ValueError):
            matrix.submit_write_batch(WriteBatch([]))
        with self.assertRaises(TypeError):
            matrix.submit_write_batch(WriteBatch([object()]))  # type: ignore[list-item]

    def test_resize_resets_to_background_without_blit(self) -> None:
        matrix = WindowMatrix(height=2, width=2, background=(9, 9, 9, 255))
        matrix.submit_write_batch(WriteBatch([FullRewrite(torch.zeros((2, 2, 4), dtype=torch.uint8))]))
        matrix.pop_call_blit()
        matrix.resize(height=3, width=5)
        snap = matrix.read_snapshot()
        self.assertEqual((matrix.height, matrix.width), (3, 5))
        self.assertTrue(torch.all(snap[:, :, 0] == 9))
        self.assertEqual(matrix.pending_call_blit_count(), 0)
        with self.assertRaises(ValueError):
            matrix.resize(height=0, width=5)

    def test_to_rgba255_counts_bad_pixels(self) -> None:
        raw = torch.tensor([[[0.0, 0.0, 0.0, 255.0], [float("nan"), 1.0, 1.0, 1.0]]])
        out, bad = to_rgba255(raw)
        self.assertEqual(bad, 1)
        self.assertEqual(out.dtype, torch.uint8)
        self.assertTrue(torch.equal(out[0, 1], INVALID_PIXEL))


if __name__ == "__main__":
    unittest.main()
