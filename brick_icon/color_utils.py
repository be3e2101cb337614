"""Vectorised colour-space conversion and palette distance matrices."""

from __future__ import annotations

import numpy as np
from skimage.color import rgb2lab

COLOR_SPACES = ("rgb", "lab")


def rgb_to_lab(rgb: np.ndarray) -> np.ndarray:
    """Convert flat (N, 3) uint8 RGB → (N, 3) float64 CIELAB."""
    return rgb2lab(rgb.astype(np.float64).reshape(1, -1, 3) / 255.0).reshape(-1, 3)


def compute_cost_matrix(
    pixels: np.ndarray,
    palette: np.ndarray,
    color_space: str = "rgb",
    chunk_size: int = 4096,
) -> np.ndarray:
    """Euclidean distance from every pixel to every palette colour.

    Args:
        pixels:  (N, 3) uint8 RGB.
        palette: (K, 3) uint8 RGB.
        color_space: ``"rgb"`` or ``"lab"``.
        chunk_size: Pixel rows computed per batch (controls peak RAM).

    Returns:
        (N, K) float64 distance matrix.
    """
    if color_space == "lab":
        p = rgb_to_lab(pixels)
        q = rgb_to_lab(palette)
    elif color_space == "rgb":
        p = pixels.astype(np.float64)
        q = palette.astype(np.float64)
    else:
        msg = f"Unknown colour space '{color_space}'. Available: {', '.join(COLOR_SPACES)}"
        raise ValueError(msg)

    n = len(p)
    cost = np.empty((n, len(q)), dtype=np.float64)
    for i in range(0, n, chunk_size):
        j = min(i + chunk_size, n)
        diff = p[i:j, np.newaxis, :] - q[np.newaxis, :, :]
        cost[i:j] = np.sqrt(np.sum(diff ** 2, axis=2))
    return cost


def nearest_palette_indices(
    pixels: np.ndarray,
    palette: np.ndarray,
    color_space: str = "rgb",
) -> np.ndarray:
    """Index of the closest palette colour for each pixel.

    Ties resolve to the last equally-near palette entry, matching
    :meth:`brick_icon.palette.Palette.nearest_index`.

    Returns:
        (N,) intp array of palette indices.
    """
    cost = compute_cost_matrix(pixels, palette, color_space)
    k = cost.shape[1]
    # argmin keeps the first minimum, so search the columns reversed.
    return k - 1 - np.argmin(cost[:, ::-1], axis=1)
