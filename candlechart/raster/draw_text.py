from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from candlechart.models import RGBA


DEFAULT_FONT_FAMILY = "DejaVu Sans Mono"
DEFAULT_FONT_SIZE_PX = 14.0
# Tick labels are fixed-width strings ("105.00", "2022-10-01 00:00"); prefer monospace faces.
MONO_FALLBACKS = ("dejavusansmono", "liberationmono", "menlo", "monaco", "couriernew", "courier")
FONT_DIRS = (
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
    Path.home() / ".fonts",
    Path.home() / "Library" / "Fonts",
    Path("/Library/Fonts"),
    Path("/System/Library/Fonts"),
)
FONT_SUFFIXES = (".ttf", ".otf", ".ttc")

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont


def draw_text(
    dst: np.ndarray,
    x: int,
    y: int,
    text: str,
    color: RGBA,
    *,
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = DEFAULT_FONT_SIZE_PX,
) -> None:
    """Composite `text` with its ink box's top-left corner at (x, y)."""
    if not text:
        return
    coverage = label_mask(text, font_family, _size_key(font_size_px))
    _composite_coverage(dst, x, y, coverage, color)


def text_size(
    text: str,
    *,
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = DEFAULT_FONT_SIZE_PX,
) -> tuple[int, int]:
    font = load_font(font_family, _size_key(font_size_px))
    if not text:
        ascent, descent = font.getmetrics()
        return 0, max(1, int(ascent + descent))
    left, top, right, bottom = font.getbbox(text)
    return max(0, int(right - left)), max(1, int(bottom - top))


@lru_cache(maxsize=512)
def label_mask(text: str, font_family: str, size_px: int) -> np.ndarray:
    font = load_font(font_family, size_px)
    left, top, right, bottom = font.getbbox(text)
    image = Image.new("L", (max(1, int(right - left)), max(1, int(bottom - top))), 0)
    ImageDraw.Draw(image).text((-left, -top), text, fill=255, font=font)
    mask = np.asarray(image, dtype=np.uint8)
    mask.setflags(write=False)
    return mask


@lru_cache(maxsize=32)
def load_font(font_family: str, size_px: int) -> Font:
    path = find_font_file(font_family)
    if path is not None:
        try:
            return ImageFont.truetype(str(path), size=size_px)
        except OSError:
            pass
    return ImageFont.load_default()


def find_font_file(font_family: str) -> Path | None:
    wanted = _squash(font_family) or _squash(DEFAULT_FONT_FAMILY)
    files = _installed_font_files()
    for needle in (wanted, *MONO_FALLBACKS):
        # Exact stems first so "DejaVuSansMono" wins over "DejaVuSansMono-Bold".
        hits = [p for p in files if needle in _squash(p.stem)]
        if hits:
            return min(hits, key=lambda p: (_squash(p.stem) != needle, len(p.stem)))
    return None


@lru_cache(maxsize=1)
def _installed_font_files() -> tuple[Path, ...]:
    found: list[Path] = []
    for base in FONT_DIRS:
        if base.is_dir():
            found.extend(p for p in sorted(base.rglob("*")) if p.suffix.lower() in FONT_SUFFIXES)
    return tuple(found)


def _composite_coverage(dst: np.ndarray, x: int, y: int, coverage: np.ndarray, color: RGBA) -> None:
    mh, mw = coverage.shape
    top, left = max(0, y), max(0, x)
    bottom, right = min(dst.shape[0], y + mh), min(dst.shape[1], x + mw)
    if bottom <= top or right <= left:
        return

    src_a = coverage[top - y : bottom - y, left - x : right - x].astype(np.float32) * (color[3] / (255.0 * 255.0))
    if not np.any(src_a > 0):
        return
    src_a = src_a[:, :, None]

    region = dst[top:bottom, left:right]
    dst_a = region[:, :, 3:4].astype(np.float32) / 255.0
    keep = dst_a * (1.0 - src_a)
    out_a = src_a + keep
    ink = np.asarray(color[:3], dtype=np.float32)
    rgb = (ink * src_a + region[:, :, :3].astype(np.float32) * keep) / np.maximum(out_a, 1e-6)

    region[:, :, :3] = np.clip(rgb, 0, 255).astype(np.uint8)
    region[:, :, 3] = np.clip(out_a[:, :, 0] * 255.0, 0, 255).astype(np.uint8)


def _size_key(font_size_px: float) -> int:
    return max(1, int(round(font_size_px)))


def _squash(name: str) -> str:
    return name.strip().lower().replace(" ", "").replace("-", "")
