#!/usr/bin/env python3
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import NoReturn

import typer

REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = REPO_ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from accent_color import AccentColorError, build_histogram, decode, get_accent_color  # noqa: E402
from accent_color.config import load_config  # noqa: E402
from accent_color.histogram import default_concurrency_hint  # noqa: E402
from accent_color.selector import rank_bins  # noqa: E402
from common.png_utils import load_pixel_buffer  # noqa: E402

app = typer.Typer(
    add_completion=False,
    help="Extract an accent color or inspect the color histogram of an image.",
)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)


def _fail(exc: AccentColorError) -> NoReturn:
    typer.echo(f"ERROR {exc.code}: {exc.message}", err=True)
    typer.echo(f"HINT: {exc.hint}", err=True)
    raise typer.Exit(code=1)


@app.command()
def extract(
    input_image: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Input image to analyze.",
    ),
    downsample: int | None = typer.Option(
        None,
        "--downsample",
        help="Sample every Nth pixel within each chunk (default from config).",
    ),
    workers: int | None = typer.Option(
        None,
        "--workers",
        help="Histogram worker count (default: three quarters of the CPUs).",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        dir_okay=False,
        help="Optional accent config YAML.",
    ),
    output_format: str = typer.Option(
        "hex",
        "--format",
        help="Output format: hex or json.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Print the accent color of an image."""
    _configure_logging(verbose)
    fmt = output_format.strip().lower()
    if fmt not in {"hex", "json"}:
        typer.echo("ERROR E1103_FORMAT_INVALID: format must be hex or json.", err=True)
        typer.echo("HINT: Use --format hex or --format json.", err=True)
        raise typer.Exit(code=1)
    try:
        config = load_config(config_path)
        buffer = load_pixel_buffer(input_image)
    except AccentColorError as exc:
        _fail(exc)
    result = get_accent_color(buffer, downsample, workers, config)
    if fmt == "json":
        typer.echo(json.dumps(result.to_dict(), indent=2, sort_keys=True))
        if not result.ok:
            raise typer.Exit(code=1)
        return
    if not result.ok:
        _fail(result.error)
    typer.echo(result.color.to_hex())


@app.command()
def histogram(
    input_image: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Input image to analyze.",
    ),
    downsample: int = typer.Option(1, "--downsample", help="Sampling stride."),
    workers: int | None = typer.Option(None, "--workers", help="Histogram worker count."),
    top: int = typer.Option(10, "--top", help="How many populated bins to print."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Print the most frequent color bins as JSON."""
    _configure_logging(verbose)
    try:
        buffer = load_pixel_buffer(input_image)
        counts = build_histogram(buffer, downsample, workers or default_concurrency_hint())
    except AccentColorError as exc:
        _fail(exc)
    bins = []
    for bin_index, count in rank_bins(counts)[: max(top, 0)]:
        r, g, b = decode(bin_index)
        bins.append({"bin": bin_index, "count": count, "rgb": [r, g, b]})
    payload = {
        "width": buffer.width,
        "height": buffer.height,
        "sampled": int(counts.sum()),
        "populated_bins": int((counts > 0).sum()),
        "bins": bins,
    }
    typer.echo(json.dumps(payload, indent=2, sort_keys=True))


if __name__ == "__main__":
    app(prog_name="accent-color")
