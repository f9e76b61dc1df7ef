"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from tile_mosaic.benchmark import BenchmarkReport, run_benchmark
from tile_mosaic.checker import CorrectnessReport, check_correctness
from tile_mosaic.config import MosaicConfig
from tile_mosaic.engine import MosaicEngine
from tile_mosaic.errors import MosaicError
from tile_mosaic.image_io import load_image
from tile_mosaic.strategies import Algorithm, get_strategy

app = typer.Typer(
    name="tile-mosaic",
    help="Flatten an image into square tiles of their average colour.",
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
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
    )


def _fail(exc: MosaicError) -> typer.Exit:
    console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
    return typer.Exit(1)


def _build_engine(input_path: Path, tile_side: int) -> MosaicEngine:
    try:
        image = load_image(input_path)
        return MosaicEngine.from_image(image, tile_side)
    except MosaicError as exc:
        raise _fail(exc) from exc


def _fmt_ms(ns: int) -> str:
    return f"{ns / 1e6:.3f} ms"


def _correctness_table(reports: dict[str, CorrectnessReport], isolated: bool) -> Table:
    mode = "isolated stages" if isolated else "end to end"
    table = Table(title=f"Correctness vs serial ({mode})", border_style="cyan")
    table.add_column("Algorithm")
    table.add_column("Tile sums", justify="right")
    table.add_column("Tile averages", justify="right")
    table.add_column("Global average", justify="right")
    table.add_column("Mosaic", justify="right")
    table.add_column("Status")
    for name, report in reports.items():
        table.add_row(
            name,
            str(report.tile_sum),
            str(report.tile_average),
            str(report.global_average),
            str(report.mosaic),
            "[green]OK[/green]" if report.ok else "[red]MISMATCH[/red]",
        )
    return table


def _benchmark_table(reports: list[BenchmarkReport]) -> Table:
    runs = reports[0].runs if reports else 0
    table = Table(title=f"Mean stage duration ({runs} runs)", border_style="cyan")
    table.add_column("Algorithm")
    table.add_column("Sum", justify="right")
    table.add_column("Average", justify="right")
    table.add_column("Mosaic", justify="right")
    table.add_column("Total", justify="right")
    for report in reports:
        table.add_row(
            report.strategy,
            _fmt_ms(report.sum_ns),
            _fmt_ms(report.average_ns),
            _fmt_ms(report.mosaic_ns),
            _fmt_ms(report.total_ns),
        )
    return table


# Defaults come from MosaicConfig - single source of truth
_DEFAULTS = MosaicConfig()


# -- render command ----------------------------------------------------

@app.command()
def render(
    input_path: Path = typer.Argument(..., help="Path to a source image"),
    algorithm: Algorithm = typer.Option(
        Algorithm(_DEFAULTS.algorithm), "--algorithm", "-a",
        help="Execution strategy",
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o",
        help="Where to save the mosaic; the extension picks the format",
    ),
    tile_side: int = typer.Option(
        _DEFAULTS.tile_side, "--tile-side", "-t", help="Tile side length in pixels",
    ),
    benchmark_runs: int = typer.Option(
        _DEFAULTS.benchmark_runs, "--benchmark-runs", "-b",
        help="Check correctness and benchmark over N runs before saving (0 = off)",
    ),
    isolated_stages: bool = typer.Option(
        _DEFAULTS.isolated_stages, "--isolated-stages/--end-to-end",
        help="Feed serial stage outputs into the checked strategy",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Build a tile mosaic of INPUT_PATH."""
    _setup_logging(verbose)
    logger = logging.getLogger("tile_mosaic")

    engine = _build_engine(input_path, tile_side)
    strategy = get_strategy(algorithm)

    console.print(Panel.fit(
        f"[bold]TILE MOSAIC[/bold]\n"
        f"Image: {engine.width}x{engine.height}x{engine.channels} "
        f"({engine.image.color_format.value})\n"
        f"Tiles: {engine.tiles_x}x{engine.tiles_y} of {engine.tile_side}px  |  "
        f"Algorithm: {strategy.name}",
        border_style="cyan",
    ))

    if benchmark_runs > 0:
        console.rule("[bold cyan]Benchmark[/bold cyan]")
        report = check_correctness(engine, strategy, isolated_stages=isolated_stages)
        console.print(_correctness_table({strategy.name: report}, isolated_stages))
        if not report.ok:
            logger.warning("%s disagrees with the serial reference", strategy.name)
        console.print(_benchmark_table([run_benchmark(engine, strategy, benchmark_runs)]))

    t0 = time.perf_counter()
    mosaic = engine.generate_mosaic(strategy)
    elapsed = time.perf_counter() - t0

    if output is None:
        console.print(
            f"[green]✓[/green] Mosaic computed  "
            f"[dim]{engine.width}x{engine.height}  time={elapsed:.3f}s  (not saved)[/dim]"
        )
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    try:
        engine.save(mosaic, output)
    except MosaicError as exc:
        raise _fail(exc) from exc

    console.print(
        f"[green]✓[/green] Saved to {escape(str(output))}  "
        f"[dim]{engine.width}x{engine.height}  time={elapsed:.3f}s[/dim]"
    )


# -- compare command ---------------------------------------------------

@app.command()
def compare(
    input_path: Path = typer.Argument(..., help="Path to a source image"),
    tile_side: int = typer.Option(
        _DEFAULTS.tile_side, "--tile-side", "-t", help="Tile side length in pixels",
    ),
    runs: int = typer.Option(
        _DEFAULTS.compare_runs, "--runs", "-r", help="Benchmark runs per algorithm",
    ),
    isolated_stages: bool = typer.Option(
        _DEFAULTS.isolated_stages, "--isolated-stages/--end-to-end",
        help="Feed serial stage outputs into each checked strategy",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Check and time every algorithm on INPUT_PATH."""
    _setup_logging(verbose)

    if runs <= 0:
        console.print("[bold red]Error:[/bold red] --runs must be positive")
        raise typer.Exit(1)

    engine = _build_engine(input_path, tile_side)
    console.print(Panel.fit(
        f"[bold]TILE MOSAIC - COMPARE[/bold]\n"
        f"Image: {engine.width}x{engine.height}x{engine.channels}  |  "
        f"Tiles: {engine.tiles_x}x{engine.tiles_y} of {engine.tile_side}px",
        border_style="cyan",
    ))

    correctness: dict[str, CorrectnessReport] = {}
    timings: list[BenchmarkReport] = []
    for algorithm in Algorithm:
        strategy = get_strategy(algorithm)
        correctness[strategy.name] = check_correctness(
            engine, strategy, isolated_stages=isolated_stages,
        )
        timings.append(run_benchmark(engine, strategy, runs))

    console.print(_correctness_table(correctness, isolated_stages))
    console.print(_benchmark_table(timings))

    if not all(r.ok for r in correctness.values()):
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
