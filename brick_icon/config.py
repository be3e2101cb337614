"""Centralised configuration via a frozen dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class IconConfig:
    """All tuneable parameters for an icon run.

    Attributes:
        width:           Icon width in pixels (the editor offers 32-192).
        height:          Icon height in pixels.
        palette:         Preset key (see palette.PALETTE_PRESETS).
        kernel:          Diffusion kernel index 0-8 (see dithering.Kernel).
        serpentine:      Alternate scan direction on every row.
        brightness:      Brightness shift applied before dithering (-128..128).
        contrast:        Contrast delta applied before dithering (-255..255).
        color_space:     Metric for the non-diffusing snap - "rgb" or "lab".
        stats_min_count: Colours used fewer times are left out of the report.
        pixel_upscale:   Each icon pixel becomes n x n in saved images.
        output_format:   Image format for saved files.
        save_comparison: Also write a Source | Filtered | Dithered sheet.
        output_dir:      Folder for results.
    """

    # Icon size
    width: int = 64
    height: int = 64

    # Palette / dithering
    palette: str = "lego"
    kernel: int = 1  # FalseFloydSteinberg
    serpentine: bool = False
    color_space: str = "rgb"

    # Pre-filters
    brightness: int = 0
    contrast: int = 0

    # Reporting
    stats_min_count: int = 2

    # Output
    pixel_upscale: int = 12
    output_format: str = "png"
    save_comparison: bool = True
    output_dir: Path = field(default_factory=lambda: Path("output"))

    SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
        {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp", ".jfif"}
    )
