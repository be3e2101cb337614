"""Tests for icons, the dithering engine, statistics and the CLI."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image
from typer.testing import CliRunner

from brick_icon.cli import app
from brick_icon.color import BLACK, RED, WHITE, Color
from brick_icon.config import IconConfig
from brick_icon.dithering import KERNEL_TAPS, Kernel, dither
from brick_icon.errors import EmptyPaletteError, UnknownKernelError
from brick_icon.icon import Icon
from brick_icon.image_io import (
    load_rgba,
    make_comparison_grid,
    make_palette_strip,
    save_upscaled,
)
from brick_icon.palette import Palette, get_palette, lego_palette
from brick_icon.pipeline import apply_filters
from brick_icon.pixel import Pixel
from brick_icon.statistics import color_key, color_statistics

# -- Fixtures ----------------------------------------------------------

W, H = 12, 9  # non-square to catch row/column mix-ups


@pytest.fixture
def rgba() -> np.ndarray:
    rng = np.random.default_rng(456)
    return rng.integers(0, 256, size=(H, W, 4), dtype=np.uint8)


@pytest.fixture
def icon(rgba: np.ndarray) -> Icon:
    return Icon.from_rgba(rgba.reshape(-1), W, H)


@pytest.fixture
def black_white() -> Palette:
    return Palette((BLACK, WHITE), "Black & White")


def _gray_icon(values: list[list[int]]) -> Icon:
    h, w = len(values), len(values[0])
    flat = []
    for row in values:
        for v in row:
            flat.extend([v, v, v, 255])
    return Icon.from_rgba(flat, w, h)


def _rgb_rows(packed: np.ndarray) -> list[tuple[int, int, int]]:
    return [Color.from_int32(int(w)).rgb for w in packed]


@pytest.fixture
def tmp_image(tmp_path: Path) -> Path:
    """Write a small non-square test PNG to disk."""
    img = Image.fromarray(
        np.random.default_rng(1).integers(0, 256, (48, 64, 3), dtype=np.uint8),
    )
    p = tmp_path / "test.png"
    img.save(p)
    return p


# -- Config ------------------------------------------------------------

class TestConfig:
    def test_defaults(self) -> None:
        cfg = IconConfig()
        assert cfg.palette == "lego"
        assert cfg.kernel == 1
        assert cfg.stats_min_count == 2

    def test_frozen(self) -> None:
        cfg = IconConfig()
        with pytest.raises(AttributeError):
            cfg.kernel = 3  # type: ignore[misc]


# -- Icon raster -------------------------------------------------------

class TestIcon:
    def test_new_icon_is_transparent(self) -> None:
        icon = Icon(3, 2)
        assert len(icon.pixels) == 6
        assert all(p.a == 0 for p in icon.pixels)

    def test_rgba_round_trip(self, icon: Icon, rgba: np.ndarray) -> None:
        np.testing.assert_array_equal(icon.to_uint8_array(), rgba.reshape(-1))
        again = Icon(W, H)
        again.import_uint8_array(icon.to_uint8_array())
        np.testing.assert_array_equal(again.to_uint8_array(), rgba.reshape(-1))

    def test_bytes_input(self) -> None:
        icon = Icon.from_rgba(bytes([1, 2, 3, 4, 5, 6, 7, 8]), 2, 1)
        assert icon.get_pixel(1, 0) == Color(5, 6, 7, 8)

    def test_wrong_buffer_length(self) -> None:
        with pytest.raises(ValueError):
            Icon.from_rgba([0] * 7, 1, 2)

    def test_uint32_export(self) -> None:
        icon = Icon.from_rgba([1, 2, 3, 4], 1, 1)
        packed = icon.to_uint32_array()
        assert packed.dtype == np.uint32
        assert int(packed[0]) == 0xFF030201

    def test_row_major_indexing(self, icon: Icon, rgba: np.ndarray) -> None:
        p = icon.get_pixel(5, 2)
        assert (p.r, p.g, p.b, p.a) == tuple(rgba[2, 5].tolist())
        assert icon.to_array().shape == (H, W, 4)

    def test_set_pixel(self) -> None:
        icon = Icon(4, 2)
        icon.set_pixel(3, 1, RED)
        assert icon.pixels[1 * 4 + 3] == RED
        with pytest.raises(IndexError):
            icon.set_pixel(4, 0, RED)
        with pytest.raises(IndexError):
            icon.get_pixel(0, 2)

    def test_resize_reallocates(self, icon: Icon) -> None:
        icon.resize(5, 7)
        assert icon.size == (5, 7)
        assert len(icon.pixels) == 35
        assert all(p.a == 0 for p in icon.pixels)

    def test_clone_is_independent(self, icon: Icon) -> None:
        copy = icon.clone()
        copy.bright(50)
        assert icon.to_uint8_array().tolist() != copy.to_uint8_array().tolist()
        copy2 = icon.clone()
        np.testing.assert_array_equal(copy2.to_uint8_array(), icon.to_uint8_array())

    def test_from_array_rgb_is_opaque(self) -> None:
        arr = np.zeros((2, 3, 3), dtype=np.uint8)
        icon = Icon.from_array(arr)
        assert icon.size == (3, 2)
        assert all(p.a == 255 for p in icon.pixels)

    def test_snap_matches_per_pixel(self, icon: Icon) -> None:
        pal = lego_palette()
        expected = icon.clone()
        for p in expected.pixels:
            p.snap_to_palette(pal)
        icon.snap_to_palette(pal)
        np.testing.assert_array_equal(icon.to_uint8_array(), expected.to_uint8_array())

    def test_snap_tie_break(self) -> None:
        pal = Palette((Color(90, 100, 100), Color(110, 100, 100)))
        icon = _gray_icon([[100]])
        icon.snap_to_palette(pal)
        assert icon.get_pixel(0, 0).rgb == (110, 100, 100)

    def test_snap_lab(self, icon: Icon) -> None:
        pal = lego_palette()
        icon.snap_to_palette(pal, color_space="lab")
        allowed = set(pal.rgb_tuples)
        assert set(icon.get_pixel_tuples()) <= allowed

    def test_snap_empty_palette(self, icon: Icon) -> None:
        with pytest.raises(EmptyPaletteError):
            icon.snap_to_palette(Palette(()))


# -- Kernels -----------------------------------------------------------

class TestKernels:
    def test_nine_kernels(self) -> None:
        assert [int(k) for k in Kernel] == list(range(9))
        assert set(KERNEL_TAPS) == set(Kernel)

    @pytest.mark.parametrize("kernel", list(Kernel))
    def test_weights_sum_to_one(self, kernel: Kernel) -> None:
        assert sum(w for w, _, _ in kernel.taps) == pytest.approx(1.0, abs=1e-6)

    @pytest.mark.parametrize("kernel", list(Kernel))
    def test_forward_only(self, kernel: Kernel) -> None:
        for _, dx, dy in kernel.taps:
            assert dy > 0 or (dy == 0 and dx > 0)

    def test_display_names(self) -> None:
        assert Kernel.FLOYD_STEINBERG.display_name == "FloydSteinberg"
        assert Kernel.TWO_SIERRA.display_name == "TwoSierra"
        assert Kernel.SIERRA_LITE.display_name == "SierraLite"

    def test_resolve(self) -> None:
        assert Kernel.resolve(3) is Kernel.ATKINSON
        assert Kernel.resolve("Jarvis") is Kernel.JARVIS
        assert Kernel.resolve(np.int64(8)) is Kernel.SIERRA_LITE

    @pytest.mark.parametrize("selector", [-1, 9, "Nope", True, 2.0])
    def test_unknown(self, selector: object) -> None:
        with pytest.raises(UnknownKernelError):
            Kernel.resolve(selector)  # type: ignore[arg-type]


# -- Dithering ---------------------------------------------------------

class TestDithering:
    @pytest.mark.parametrize("serpentine", [False, True])
    @pytest.mark.parametrize("kernel", list(Kernel))
    def test_palette_membership(self, icon: Icon, kernel: Kernel, serpentine: bool) -> None:
        pal = lego_palette()
        packed = dither(icon, pal, kernel, serpentine)
        assert packed.shape == (W * H,)
        assert set(_rgb_rows(packed)) <= set(pal.rgb_tuples)
        assert np.all((packed >> 24) == 0xFF)

    def test_deterministic(self, icon: Icon) -> None:
        pal = get_palette("sharpie")
        a = dither(icon, pal, Kernel.STUCKI, serpentine=True)
        b = dither(icon, pal, Kernel.STUCKI, serpentine=True)
        np.testing.assert_array_equal(a, b)

    def test_source_untouched(self, icon: Icon, rgba: np.ndarray) -> None:
        dither(icon, lego_palette(), 0)
        np.testing.assert_array_equal(icon.to_uint8_array(), rgba.reshape(-1))

    def test_two_pixel_scenario(self, black_white: Palette) -> None:
        icon = _gray_icon([[10, 250]])
        packed = dither(icon, black_white, Kernel.FLOYD_STEINBERG)
        assert _rgb_rows(packed) == [BLACK.rgb, WHITE.rgb]

    def test_serpentine_changes_scan(self, black_white: Palette) -> None:
        icon = _gray_icon([[100, 100], [100, 100]])
        b, w = BLACK.rgb, WHITE.rgb

        forward = dither(icon, black_white, Kernel.SIERRA_LITE, serpentine=False)
        assert _rgb_rows(forward) == [b, w, b, b]

        snake = dither(icon, black_white, Kernel.SIERRA_LITE, serpentine=True)
        assert _rgb_rows(snake) == [b, w, w, b]

    def test_error_clamped_and_truncated(self) -> None:
        # The second white pixel would exceed 255 without clamping and push
        # enough error into the third to flip it to the light grey.
        pal = Palette((BLACK, Color(100, 100, 100), Color(180, 180, 180)))
        icon = _gray_icon([[255, 255, 100]])
        packed = dither(icon, pal, Kernel.SIERRA_LITE)
        assert _rgb_rows(packed) == [(180, 180, 180), (180, 180, 180), (100, 100, 100)]

    def test_tie_break_in_engine(self) -> None:
        pal = Palette((Color(90, 100, 100), Color(110, 100, 100)))
        packed = dither(_gray_icon([[100]]), pal, 0)
        assert _rgb_rows(packed) == [(110, 100, 100)]

    def test_unknown_kernel(self, icon: Icon, rgba: np.ndarray) -> None:
        with pytest.raises(UnknownKernelError):
            icon.stick_to_palette(lego_palette(), 9)
        np.testing.assert_array_equal(icon.to_uint8_array(), rgba.reshape(-1))

    def test_empty_palette(self, icon: Icon) -> None:
        with pytest.raises(EmptyPaletteError):
            dither(icon, Palette(()), 0)

    def test_stick_to_palette_is_opaque(self, icon: Icon) -> None:
        pal = lego_palette()
        icon.stick_to_palette(pal, Kernel.ATKINSON)
        assert all(p.a == 255 for p in icon.pixels)
        assert set(icon.get_pixel_tuples()) <= set(pal.rgb_tuples)

    def test_empty_icon(self, black_white: Palette) -> None:
        packed = dither(Icon(0, 0), black_white, 0)
        assert packed.shape == (0,)


# -- Statistics --------------------------------------------------------

class TestStatistics:
    def test_key(self) -> None:
        assert color_key((12, 34, 255)) == "012034255"

    def test_singletons_dropped(self) -> None:
        icon = Icon(3, 1)
        for x, c in enumerate([WHITE, WHITE, RED]):
            icon.set_pixel(x, 0, Pixel(c))
        stats = color_statistics(icon, lego_palette())
        assert stats.counts == {"White 302401/3024": 2}
        assert stats.colors == 1

    def test_min_count_configurable(self) -> None:
        icon = Icon(3, 1)
        for x, c in enumerate([WHITE, WHITE, RED]):
            icon.set_pixel(x, 0, c)
        stats = icon.color_statistics(lego_palette(), min_count=1)
        assert stats.counts == {"White 302401/3024": 2, "Red 302421/3024": 1}
        assert stats.colors == 2
        assert stats.total == 3

    def test_raw_key_when_unmatched(self, black_white: Palette) -> None:
        icon = Icon(2, 2)
        icon.set_pixel(0, 0, Color(12, 34, 255))
        icon.set_pixel(1, 0, Color(12, 34, 255))
        icon.set_pixel(0, 1, BLACK)
        icon.set_pixel(1, 1, BLACK)
        stats = color_statistics(icon, black_white)
        # black_white entries carry no tags, so both stay as raw keys
        assert stats.counts == {"012034255": 2, "000000000": 2}

    def test_shared_tag_counts_summed(self) -> None:
        pal = Palette((BLACK.with_tag("Dark"), Color(10, 10, 10, tag="Dark")))
        icon = Icon(2, 2)
        icon.set_pixel(0, 0, BLACK)
        icon.set_pixel(1, 0, BLACK)
        icon.set_pixel(0, 1, Color(10, 10, 10))
        icon.set_pixel(1, 1, Color(10, 10, 10))
        stats = color_statistics(icon, pal)
        assert stats.counts == {"Dark": 4}
        assert stats.colors == 2
        assert stats.total == 4


# -- Pipeline ----------------------------------------------------------

class TestPipeline:
    def test_base_untouched(self, icon: Icon, rgba: np.ndarray) -> None:
        pal = lego_palette()
        result = apply_filters(icon, pal, contrast=40, brightness=-10, kernel=1)
        np.testing.assert_array_equal(icon.to_uint8_array(), rgba.reshape(-1))
        assert set(result.icon.get_pixel_tuples()) <= set(pal.rgb_tuples)
        assert result.stats.total <= W * H

    def test_brightness_applied(self, black_white: Palette) -> None:
        base = _gray_icon([[100, 100], [100, 100]])
        result = apply_filters(base, black_white, brightness=100)
        assert result.icon.get_pixel_tuples() == [WHITE.rgb] * 4
        assert result.stats.counts == {"255255255": 4}
        assert result.stats.colors == 1


# -- Image I/O ---------------------------------------------------------

class TestImageIO:
    def test_load_fills_exact_size(self, tmp_image: Path) -> None:
        arr = load_rgba(tmp_image, 20, 10)
        assert arr.shape == (10, 20, 4)
        assert arr.dtype == np.uint8

    def test_save_upscaled(self, tmp_path: Path) -> None:
        arr = np.random.default_rng(2).integers(0, 256, (6, 10, 4), dtype=np.uint8)
        out = tmp_path / "test_upscaled.png"
        save_upscaled(arr, out, pixel_upscale=4)
        assert out.exists()
        img = Image.open(out)
        assert img.size == (40, 24)  # 10*4, 6*4

    def test_comparison_grid(self, icon: Icon, tmp_path: Path) -> None:
        pal = lego_palette()
        result = apply_filters(icon, pal)
        out = tmp_path / "comparison.png"
        make_comparison_grid(
            icon.to_array(), icon.to_array(), result.icon.to_array(), pal, out, 2,
        )
        assert out.exists()

    def test_palette_strip(self) -> None:
        strip = make_palette_strip(lego_palette(), swatch=5)
        assert strip.size == (60, 5)

    def test_palette_strip_empty(self) -> None:
        with pytest.raises(EmptyPaletteError):
            make_palette_strip(Palette(()))


# -- CLI ---------------------------------------------------------------

runner = CliRunner()


class TestCli:
    def test_palettes(self) -> None:
        result = runner.invoke(app, ["palettes"])
        assert result.exit_code == 0
        assert "lego" in result.output

    def test_kernels(self) -> None:
        result = runner.invoke(app, ["kernels"])
        assert result.exit_code == 0
        assert "SierraLite" in result.output

    def test_dither(self, tmp_image: Path, tmp_path: Path) -> None:
        out_dir = tmp_path / "out"
        result = runner.invoke(app, [
            "dither", str(tmp_image),
            "--output", str(out_dir),
            "--width", "16", "--height", "12",
            "--palette", "black_white",
            "--no-comparison",
        ])
        assert result.exit_code == 0, result.output
        assert (out_dir / "test_FalseFloydSteinberg.png").exists()

    def test_dither_bad_kernel(self, tmp_image: Path, tmp_path: Path) -> None:
        result = runner.invoke(app, [
            "dither", str(tmp_image), "--output", str(tmp_path), "--kernel", "12",
        ])
        assert result.exit_code == 1
