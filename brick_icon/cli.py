"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
import time
from pathlib import Path

import numpy as np
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from brick_icon.config import IconConfig
from brick_icon.dithering import Kernel
from brick_icon.icon import Icon
from brick_icon.image_io import load_rgba, make_comparison_grid, save_upscaled
from brick_icon.palette import PALETTE_PRESETS, get_palette
from brick_icon.pipeline import apply_filters
from brick_icon.statistics import ColorStatistics

app = typer.Typer(
    name="brick-icon",
    help="Turn any image into a palette-locked pixel icon (bricks, markers, ...).",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=True)],
    )


def _quality_metric(target: np.ndarray, result: np.ndarray) -> float:
    t = target[..., :3].reshape(-1, 3).astype(np.float64)
    r = result[..., :3].reshape(-1, 3).astype(np.float64)
    return float(np.mean(np.sqrt(np.sum((t - r) ** 2, axis=1))))


def _stats_table(stats: ColorStatistics, title: str) -> Table:
    table = Table(title=title, title_style="bold cyan")
    table.add_column("Colour")
    table.add_column("Pixels", justify="right")
    for label, count in sorted(stats.counts.items(), key=lambda kv: -kv[1]):
        table.add_row(label, str(count))
    table.caption = f"{stats.colors} colours, {stats.total} px"
    return table


def _check_input(image: Path, cfg: IconConfig) -> None:
    if not image.is_file():
        console.print(f"[red]No such image: {image}[/red]")
        raise typer.Exit(1)
    if image.suffix.lower() not in cfg.SUPPORTED_EXTENSIONS:
        console.print(f"[yellow]Unrecognised extension {image.suffix}, trying anyway[/yellow]")


# Defaults come from IconConfig - single source of truth
_DEFAULTS = IconConfig()


# -- dither command ----------------------------------------------------

@app.command()
def dither(
    image: Path = typer.Argument(..., help="Source image"),
    output_dir: Path = typer.Option(
        _DEFAULTS.output_dir, "--output", "-o", help="Results folder",
    ),
    width: int = typer.Option(_DEFAULTS.width, "--width", "-W", min=1, help="Icon width"),
    height: int = typer.Option(_DEFAULTS.height, "--height", "-H", min=1, help="Icon height"),
    palette_name: str = typer.Option(
        _DEFAULTS.palette, "--palette", "-p", help="Palette preset (see 'palettes')",
    ),
    kernel: int = typer.Option(
        _DEFAULTS.kernel, "--kernel", "-k", help="Diffusion kernel 0-8 (see 'kernels')",
    ),
    serpentine: bool = typer.Option(
        _DEFAULTS.serpentine, "--serpentine/--no-serpentine", help="Alternate scan direction",
    ),
    brightness: int = typer.Option(
        _DEFAULTS.brightness, "--brightness", "-b", min=-128, max=128,
    ),
    contrast: int = typer.Option(
        _DEFAULTS.contrast, "--contrast", "-c", min=-255, max=255,
    ),
    min_count: int = typer.Option(
        _DEFAULTS.stats_min_count, "--min-count",
        help="Hide colours used fewer times than this in the report",
    ),
    upscale: int = typer.Option(
        _DEFAULTS.pixel_upscale, "--upscale", "-u", help="Pixel upscale factor",
    ),
    comparison: bool = typer.Option(
        _DEFAULTS.save_comparison, "--comparison/--no-comparison",
        help="Save a Source | Filtered | Dithered sheet",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Dither IMAGE onto a palette with error diffusion."""
    _setup_logging(verbose)
    logger = logging.getLogger("brick_icon")

    cfg = IconConfig(
        width=width,
        height=height,
        palette=palette_name,
        kernel=kernel,
        serpentine=serpentine,
        brightness=brightness,
        contrast=contrast,
        stats_min_count=min_count,
        pixel_upscale=upscale,
        save_comparison=comparison,
        output_dir=output_dir,
    )
    _check_input(image, cfg)

    try:
        palette = get_palette(cfg.palette)
        k = Kernel.resolve(cfg.kernel)
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc

    console.print(Panel.fit(
        f"[bold]BRICK ICON[/bold]\n"
        f"Size: {cfg.width}x{cfg.height}  |  Palette: {palette.name} ({len(palette)})\n"
        f"Kernel: {k.display_name}  |  Serpentine: {cfg.serpentine}\n"
        f"Brightness: {cfg.brightness}  |  Contrast: {cfg.contrast}",
        border_style="cyan",
    ))

    t_total = time.perf_counter()
    output_dir.mkdir(parents=True, exist_ok=True)

    source = load_rgba(image, cfg.width, cfg.height)
    base = Icon.from_array(source)
    logger.info("Loaded %s → %dx%d", image.name, base.width, base.height)

    result = apply_filters(
        base, palette,
        contrast=cfg.contrast,
        brightness=cfg.brightness,
        kernel=k,
        serpentine=cfg.serpentine,
        min_count=cfg.stats_min_count,
    )

    out_path = output_dir / f"{image.stem}_{k.display_name}.{cfg.output_format}"
    dithered = result.icon.to_array()
    save_upscaled(dithered, out_path, cfg.pixel_upscale)

    filtered = base.clone()
    if cfg.contrast:
        filtered.contrast(cfg.contrast)
    if cfg.brightness:
        filtered.bright(cfg.brightness)

    if cfg.save_comparison:
        comp_path = output_dir / f"{image.stem}_comparison.{cfg.output_format}"
        make_comparison_grid(
            source, filtered.to_array(), dithered, palette, comp_path, cfg.pixel_upscale,
        )
        logger.debug("Comparison sheet written to %s", comp_path)

    console.print(_stats_table(result.stats, palette.name or cfg.palette))

    err = _quality_metric(filtered.to_array(), dithered)
    elapsed = time.perf_counter() - t_total
    console.print(
        f"[green]✓[/green] {out_path}  "
        f"[dim]{cfg.width}x{cfg.height}  error={err:.1f}  time={elapsed:.1f}s[/dim]"
    )


# -- snap command ------------------------------------------------------

@app.command()
def snap(
    image: Path = typer.Argument(..., help="Source image"),
    output: Path = typer.Option(Path("output/snapped.png"), "--output", "-o"),
    width: int = typer.Option(_DEFAULTS.width, "--width", "-W", min=1),
    height: int = typer.Option(_DEFAULTS.height, "--height", "-H", min=1),
    palette_name: str = typer.Option(_DEFAULTS.palette, "--palette", "-p"),
    color_space: str = typer.Option(
        _DEFAULTS.color_space, "--color-space", help="'rgb' or 'lab'",
    ),
    upscale: int = typer.Option(_DEFAULTS.pixel_upscale, "--upscale", "-u"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Snap IMAGE to the nearest palette colours without dithering."""
    _setup_logging(verbose)
    _check_input(image, _DEFAULTS)

    try:
        palette = get_palette(palette_name)
        icon = Icon.from_array(load_rgba(image, width, height))
        icon.snap_to_palette(palette, color_space)
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc

    output.parent.mkdir(parents=True, exist_ok=True)
    save_upscaled(icon.to_array(), output, upscale)

    stats = icon.color_statistics(palette, _DEFAULTS.stats_min_count)
    console.print(
        f"[green]✓[/green] Saved to {output}  "
        f"[dim]{width}x{height}  {stats.colors} colours ({color_space})[/dim]"
    )


# -- listings ----------------------------------------------------------

@app.command()
def palettes() -> None:
    """List the palette presets."""
    table = Table(title="Palettes", title_style="bold cyan")
    table.add_column("Key", style="bold")
    table.add_column("Name")
    table.add_column("Colours", justify="right")
    table.add_column("Swatches")
    for key in PALETTE_PRESETS:
        pal = get_palette(key)
        swatches = "".join(f"[{c.to_hex_string()}]█[/]" for c in pal)
        table.add_row(key, pal.name or "", str(len(pal)), swatches)
    console.print(table)


@app.command()
def kernels() -> None:
    """List the diffusion kernels."""
    table = Table(title="Diffusion kernels", title_style="bold cyan")
    table.add_column("#", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Taps", justify="right")
    table.add_column("Reach")
    for k in Kernel:
        reach_x = max(abs(dx) for _, dx, _ in k.taps)
        reach_y = max(dy for _, _, dy in k.taps)
        table.add_row(str(int(k)), k.display_name, str(len(k.taps)), f"±{reach_x} x +{reach_y}")
    console.print(table)


if __name__ == "__main__":
    app()
