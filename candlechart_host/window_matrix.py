from __future__ import annotations

from collections import deque
from dataclasses import dataclass
import logging
import threading
import time
from typing import TypeAlias

import torch


LOGGER = logging.getLogger(__name__)

# Out-of-range or non-finite channels are painted this color so bad frames stay visible.
INVALID_PIXEL = torch.tensor([255, 0, 255, 255], dtype=torch.uint8)


@dataclass(frozen=True)
class FullRewrite:
    """Replace the whole matrix; `pixels` must be (height, width, 4)."""

    pixels: torch.Tensor


@dataclass(frozen=True)
class ReplaceRect:
    """Overwrite the patch whose top-left corner sits at column x, row y."""

    x: int
    y: int
    pixels: torch.Tensor


WriteOp: TypeAlias = FullRewrite | ReplaceRect


@dataclass(frozen=True)
class WriteBatch:
    operations: list[WriteOp]


@dataclass(frozen=True)
class CallBlitEvent:
    event_id: int
    revision: int
    ts_ns: int


class WindowMatrix:
    """RGBA255 surface the host presents.

    Programs never touch pixels directly: they submit a `WriteBatch`, which is
    applied atomically and produces one `CallBlitEvent` for the presenter.
    """

    def __init__(self, height: int, width: int, background: tuple[int, int, int, int] = (0, 0, 0, 255)) -> None:
        self._lock = threading.Lock()
        self._background = torch.tensor(background, dtype=torch.uint8)
        self._blits: deque[CallBlitEvent] = deque()
        self._blit_seq = 0
        self._revision = 0
        self._pixels = self._blank(height, width)

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def revision(self) -> int:
        return self._revision

    def read_snapshot(self) -> torch.Tensor:
        with self._lock:
            return self._pixels.clone()

    def resize(self, height: int, width: int) -> None:
        """Reallocate to a new window size; content resets to the background."""
        blank = self._blank(height, width)
        with self._lock:
            self._pixels = blank
        LOGGER.debug("window matrix resized to %dx%d", width, height)

    def submit_write_batch(self, batch: WriteBatch) -> CallBlitEvent:
        if not batch.operations:
            raise ValueError("write batch must include at least one operation")

        with self._lock:
            staged = self._pixels.clone()
            sanitized = 0
            for op in batch.operations:
                sanitized += _apply(staged, op)
            if sanitized:
                LOGGER.warning(
                    "WindowMatrix write batch sanitized invalid RGBA channels; offending_pixels=%d",
                    sanitized,
                )
            self._pixels = staged
            self._revision += 1
            self._blit_seq += 1
            event = CallBlitEvent(event_id=self._blit_seq, revision=self._revision, ts_ns=time.time_ns())
            self._blits.append(event)
        return event

    def pop_call_blit(self) -> CallBlitEvent | None:
        with self._lock:
            return self._blits.popleft() if self._blits else None

    def pending_call_blit_count(self) -> int:
        with self._lock:
            return len(self._blits)

    def _blank(self, height: int, width: int) -> torch.Tensor:
        if height <= 0 or width <= 0:
            raise ValueError("height and width must be > 0")
        return self._background.view(1, 1, 4).expand(height, width, 4).clone()


def _apply(target: torch.Tensor, op: WriteOp) -> int:
    """Write `op` into `target` in place and return how many pixels were sanitized."""
    height, width = int(target.shape[0]), int(target.shape[1])
    if isinstance(op, FullRewrite):
        _require_rgba(op.pixels, (height, width))
        pixels, bad = to_rgba255(op.pixels)
        target.copy_(pixels)
        return bad
    if isinstance(op, ReplaceRect):
        _require_rgba(op.pixels)
        ph, pw = int(op.pixels.shape[0]), int(op.pixels.shape[1])
        if op.x < 0 or op.y < 0 or op.x + pw > width or op.y + ph > height:
            raise ValueError(f"rect at ({op.x}, {op.y}) size {pw}x{ph} exceeds matrix {width}x{height}")
        pixels, bad = to_rgba255(op.pixels)
        target[op.y : op.y + ph, op.x : op.x + pw] = pixels
        return bad
    raise TypeError(f"Unsupported write op: {type(op)!r}")


def _require_rgba(value: object, size: tuple[int, int] | None = None) -> None:
    if not torch.is_tensor(value):
        raise ValueError("pixels must be a torch.Tensor")
    shape = tuple(value.shape)
    if len(shape) != 3 or shape[2] != 4 or shape[0] == 0 or shape[1] == 0:
        raise ValueError(f"pixels must have shape (H, W, 4) with H, W > 0; got {shape}")
    if size is not None and shape[:2] != size:
        raise ValueError(f"pixels have shape {shape}; expected {size + (4,)}")


def to_rgba255(value: torch.Tensor) -> tuple[torch.Tensor, int]:
    """Convert to uint8, replacing any pixel with an invalid channel by INVALID_PIXEL."""
    if value.dtype == torch.uint8:
        return value.clone(), 0
    raw = value.to(torch.float32)
    bad_mask = (~torch.isfinite(raw) | (raw < 0) | (raw > 255)).any(dim=-1)
    out = torch.nan_to_num(raw, nan=0.0, posinf=255.0, neginf=0.0).clamp(0, 255).to(torch.uint8)
    out[bad_mask] = INVALID_PIXEL
    return out, int(bad_mask.sum().item())
