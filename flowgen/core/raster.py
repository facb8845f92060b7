"""Rasterize projected frames: filled dot markers plus fixation square."""

from typing import Optional, Tuple
import cv2
import numpy as np

from .config import RenderConfig
from .dots import Frame

# Fixed-point bits for sub-pixel polygon vertices
_SHIFT = 4


def screen_to_pixels(x: np.ndarray, y: np.ndarray, cfg: RenderConfig) -> Tuple[np.ndarray, np.ndarray]:
    """Screen coords in [-extent, extent] -> (col, row) pixels, y up."""
    scale = cfg.image_size / (2.0 * cfg.view_extent)
    col = (np.asarray(x) + cfg.view_extent) * scale
    row = (cfg.view_extent - np.asarray(y)) * scale
    return col, row


def marker_radius(size: np.ndarray, cfg: RenderConfig) -> np.ndarray:
    """Half-width in pixels of a marker with area ``size`` in points^2."""
    px_per_point = cfg.image_size / cfg.figure_points
    return np.sqrt(np.asarray(size)) / 2.0 * px_per_point


def blank_frame(cfg: RenderConfig) -> np.ndarray:
    img = np.empty((cfg.image_size, cfg.image_size, 3), dtype=np.uint8)
    img[:] = cfg.background
    return img


def _line_type(cfg: RenderConfig) -> int:
    return cv2.LINE_AA if cfg.antialias else cv2.LINE_8


def _draw_fixation(img: np.ndarray, cfg: RenderConfig) -> np.ndarray:
    half = cfg.fixation_size / 2.0
    (c0, c1), (r0, r1) = screen_to_pixels(np.array([-half, half]), np.array([half, -half]), cfg)
    # At least one pixel so the marker survives small images
    c0, r0 = int(np.floor(c0)), int(np.floor(r0))
    c1, r1 = max(int(np.ceil(c1)) - 1, c0), max(int(np.ceil(r1)) - 1, r0)
    cv2.rectangle(img, (c0, r0), (c1, r1), cfg.fixation_color, thickness=-1)
    return img


def _draw_triangles(img: np.ndarray, col: np.ndarray, row: np.ndarray, r: np.ndarray, cfg: RenderConfig):
    # Upward-pointing: apex above the center, base below
    verts = np.stack([
        np.stack([col, row - r], axis=1),
        np.stack([col - r, row + r], axis=1),
        np.stack([col + r, row + r], axis=1),
    ], axis=1)
    pts = np.round(verts * (1 << _SHIFT)).astype(np.int32)
    cv2.fillPoly(img, list(pts), cfg.dot_color, lineType=_line_type(cfg), shift=_SHIFT)


def _draw_circles(img: np.ndarray, col: np.ndarray, row: np.ndarray, r: np.ndarray, cfg: RenderConfig):
    scale = 1 << _SHIFT
    line_type = _line_type(cfg)
    for cx, cy, rad in zip(col, row, r):
        center = (int(round(cx * scale)), int(round(cy * scale)))
        cv2.circle(img, center, max(int(round(rad * scale)), 1), cfg.dot_color,
                   thickness=-1, lineType=line_type, shift=_SHIFT)


_MARKERS = {
    "triangle": _draw_triangles,
    "circle": _draw_circles,
}


def rasterize(frame: Frame, cfg: Optional[RenderConfig] = None) -> np.ndarray:
    """Draw a frame's dots as filled markers with the fixation square on top.

    Returns:
        [H, W, 3] uint8 RGB image
    """
    cfg = cfg or RenderConfig()
    if cfg.marker not in _MARKERS:
        raise ValueError(f"Unknown marker: {cfg.marker}")
    img = blank_frame(cfg)

    if len(frame):
        col, row = screen_to_pixels(frame.x, frame.y, cfg)
        r = marker_radius(frame.size, cfg)
        # Drop markers entirely off-canvas; their vertices may not fit fixed point
        margin = r + 1
        visible = (
            (col + margin >= 0) & (col - margin < cfg.image_size)
            & (row + margin >= 0) & (row - margin < cfg.image_size)
        )
        col, row, r = col[visible], row[visible], r[visible]

        if len(col):
            _MARKERS[cfg.marker](img, col, row, r, cfg)

    return _draw_fixation(img, cfg)


def fixation_frame(cfg: Optional[RenderConfig] = None) -> np.ndarray:
    """Fixation square alone on the background."""
    cfg = cfg or RenderConfig()
    return _draw_fixation(blank_frame(cfg), cfg)
