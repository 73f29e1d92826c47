"""Command-line interface for loudness-probe."""

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from loudness_probe.config import SUPPORTED_INPUT_FORMATS
from loudness_probe.core.probe import LoudnessProbe
from loudness_probe.core.report import DurationUnit, LoudnessReport, ProbeOptions
from loudness_probe.exceptions import LoudnessProbeError
from loudness_probe.utils.tools import check_tool

app = typer.Typer(
    name="loudness-probe",
    help="BS.1770 loudness and length measurement via bs1770gain and sox",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def setup_logging(verbose: bool) -> None:
    """Route library logging through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def collect_audio_files(paths: list[Path], recursive: bool = False) -> list[Path]:
    """Collect all audio files from the given paths.

    Files given explicitly are kept whatever their extension; directories are
    searched for supported extensions only.

    Args:
        paths: List of file or directory paths
        recursive: Whether to search directories recursively

    Returns:
        Sorted list of audio file paths
    """
    audio_files = []

    for path in paths:
        if path.is_file():
            audio_files.append(path)
        elif path.is_dir():
            candidates = path.rglob("*") if recursive else path.glob("*")
            audio_files.extend(
                p for p in candidates
                if p.is_file() and p.suffix.lower() in SUPPORTED_INPUT_FORMATS
            )
        else:
            err_console.print(f"[red]Path not found: {escape(str(path))}[/red]")

    return sorted(set(audio_files))


def required_tools(options: ProbeOptions) -> list[str]:
    """Executables a probe with these options will call."""
    tools = [options.bs1770gain_binary]
    if options.measure_duration:
        tools.insert(0, options.sox_binary)
    return tools


def format_duration(report: LoudnessReport) -> str:
    if report.duration is None:
        return "-"
    if report.duration_unit == DurationUnit.microseconds:
        return f"{report.duration} µs"
    return f"{report.duration:.2f} s"


def display_report_table(
    results: list[tuple[Path, LoudnessReport]],
    include_maxima: bool,
    title: str = "Loudness Analysis",
) -> None:
    """Display loudness reports in a table.

    Args:
        results: List of (path, report) tuples
        include_maxima: Whether to show momentary and short-term maxima
        title: Table title
    """
    table = Table(title=title)
    table.add_column("File", style="cyan", no_wrap=True)
    table.add_column("Integrated", justify="right")
    table.add_column("True Peak", justify="right")
    table.add_column("Range", justify="right")
    if include_maxima:
        table.add_column("Max Moment.", justify="right")
        table.add_column("Max Short", justify="right")
    table.add_column("Length", justify="right")

    for path, report in results:
        row = [
            escape(path.name),
            f"{report.integrated_loudness:.2f} LUFS",
            f"{report.true_peak:.2f}",
            f"{report.loudness_range:.2f} LU",
        ]
        if include_maxima:
            row.append(f"{report.momentary_maximum:.2f} LUFS")
            row.append(f"{report.shortterm_maximum:.2f} LUFS")
        row.append(format_duration(report))
        table.add_row(*row)

    console.print(table)


@app.command()
def analyze(
    files: Annotated[
        list[Path],
        typer.Argument(help="Audio files or directories to analyze"),
    ],
    recursive: Annotated[
        bool,
        typer.Option("-r", "--recursive", help="Search directories recursively"),
    ] = False,
    output_json: Annotated[
        bool,
        typer.Option("--json", help="Output results as JSON"),
    ] = False,
    highpass: Annotated[
        bool,
        typer.Option("--highpass", help="Measure a copy highpassed at 150 Hz"),
    ] = False,
    maxima: Annotated[
        bool,
        typer.Option("--maxima", help="Also measure momentary and short-term maximum"),
    ] = False,
    unit: Annotated[
        DurationUnit,
        typer.Option("--unit", help="Unit of the reported length"),
    ] = DurationUnit.seconds,
    no_duration: Annotated[
        bool,
        typer.Option("--no-duration", help="Skip the sox length measurement"),
    ] = False,
    timeout: Annotated[
        Optional[float],
        typer.Option("--timeout", help="Deadline per external tool run, in seconds (default: none)"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Log tool invocations"),
    ] = False,
) -> None:
    """Analyze loudness of audio files (ITU BS.1770).

    Displays integrated loudness, true peak, loudness range and length
    for each file, optionally with momentary and short-term maxima.
    """
    setup_logging(verbose)

    try:
        options = ProbeOptions(
            measure_duration=not no_duration,
            highpass=highpass,
            include_maxima=maxima,
            duration_unit=unit,
            timeout=timeout,
        )
    except LoudnessProbeError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    missing = [tool for tool in required_tools(options) if not check_tool(tool)]
    if missing:
        err_console.print(
            f"[red]Error: {', '.join(missing)} not found. Please install it.[/red]"
        )
        raise typer.Exit(1)

    audio_files = collect_audio_files(files, recursive)

    if not audio_files:
        err_console.print("[yellow]No audio files found.[/yellow]")
        raise typer.Exit(0)

    if not output_json:
        console.print(f"Found {len(audio_files)} audio file(s)\n")

    probe = LoudnessProbe(options)
    results: list[tuple[Path, LoudnessReport]] = []
    failed = 0

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=err_console,
        disable=output_json,
    ) as progress:
        task = progress.add_task("Analyzing...", total=len(audio_files))

        for file_path in audio_files:
            progress.update(task, description=f"Analyzing {escape(file_path.name)}...")
            try:
                report = probe.compute_loudness(file_path)
                results.append((file_path, report))
            except LoudnessProbeError as e:
                failed += 1
                err_console.print(
                    f"[red]Error analyzing {escape(str(file_path))}: {escape(str(e))}[/red]"
                )
            progress.advance(task)

    if output_json:
        json_results = [
            {"file": str(path), **report.to_dict()}
            for path, report in results
        ]
        console.print(
            json.dumps(json_results, indent=2),
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
    elif results:
        display_report_table(results, include_maxima=maxima)

    if failed:
        raise typer.Exit(1)


@app.command()
def check() -> None:
    """Check that sox and bs1770gain are installed."""
    options = ProbeOptions()
    missing = False

    for tool in (options.sox_binary, options.bs1770gain_binary):
        if check_tool(tool):
            console.print(f"[green]✓[/green] {tool}")
        else:
            console.print(f"[red]✗[/red] {tool} not found")
            missing = True

    if missing:
        raise typer.Exit(1)


@app.callback()
def main() -> None:
    """BS.1770 loudness and length measurement via bs1770gain and sox."""
    pass


if __name__ == "__main__":
    app()
