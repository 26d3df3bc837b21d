"""Typer-based command line interface for coverage projections."""

from __future__ import annotations

import logging
import time
from enum import Enum
from pathlib import Path
from typing import List, Optional

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pandas as pd
import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, TextColumn, TimeElapsedColumn
from rich.table import Table

from ..config import (
    DEFAULT_DISPERSION,
    DEFAULT_PERCENTILE,
    DEFAULT_REPLICATES,
    DEFAULT_TARGET_DETECTION,
    LOG_LEVEL,
    MAX_WORKERS,
)
from ..core.validator import DomainError
from ..engine import CoverageEngine
from ..models.request import SamplingDesign, SimulationRequest
from ..models.results import SimulationResults
from ..reporting import CAVEAT, INSUFFICIENT_DATA, cv_recommendation, detection_recommendation
from ..runtime.analysis_runner import AnalysisRunner, Task
from ..utils.numbers import decimalize
from ..visualization import plot_cv_projection, plot_detection_probability, plot_sample_size

app = typer.Typer(help="Project bycatch estimation precision and detection probability vs observer coverage")
console = Console()

_POLL_SECONDS = 0.05


class Method(str, Enum):
    interpolate = "interpolate"
    scan = "scan"


@app.callback()
def _configure(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable INFO logging")) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else getattr(logging, LOG_LEVEL, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _percent(value: float) -> str:
    if pd.isna(value):
        return "-"
    return f"{100.0 * value:.1f}%"


def _build_summary_table(results: SimulationResults) -> Table:
    """Create a Rich table of the per-level summary."""
    summary = results.summary
    finite = results.design is SamplingDesign.FINITE_POPULATION
    title = f"CV of Bycatch Estimate ({results.percentile:g}th percentile)" if finite else "CV of Bycatch Estimate"
    table = Table(title=title, show_lines=False)
    table.add_column("Coverage", justify="right")
    table.add_column("Units", justify="right")
    table.add_column("Replicates", justify="right")
    if finite:
        for column in ("CV", "Median", "80th", "95th"):
            table.add_column(column, justify="right")
    else:
        table.add_column("CV", justify="right")

    for row in summary.itertuples(index=False):
        cells = [f"{100.0 * row.coverage:g}%", f"{int(row.observed_units):,}", f"{int(row.replicates):,}"]
        if finite:
            if row.replicates == 0:
                cells.extend([f"[yellow]{INSUFFICIENT_DATA}[/yellow]", "", "", ""])
            else:
                cells.extend([_percent(row.qcv), _percent(row.q50), _percent(row.q80), _percent(row.q95)])
        else:
            cells.append(_percent(row.cv))
        table.add_row(*cells)
    return table


def _save_figure(fig: plt.Figure, output_dir: Path, name: str) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / name
    fig.savefig(path, dpi=150)
    plt.close(fig)
    return path


def _run_with_progress(task: Task) -> SimulationResults:
    """Run a simulation in the background, drawing its progress; Ctrl-C cancels it."""
    runner = AnalysisRunner()
    try:
        runner.start(task)
        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=console,
            transient=True,
        ) as progress:
            task_id = progress.add_task("Simulating", total=None)
            while not runner.done:
                for event in runner.drain_progress():
                    progress.update(task_id, completed=event.rows_done, total=event.rows_total)
                time.sleep(_POLL_SECONDS)
        return runner.result()
    except KeyboardInterrupt:
        runner.cancel()
        console.print("[yellow]Simulation cancelled[/yellow]")
        raise typer.Exit(code=130)
    finally:
        runner.shutdown(wait=True)


@app.command()
def simulate(
    total_effort: int = typer.Argument(..., help="Total effort in the fishery (trips or sets)"),
    bpue: float = typer.Argument(..., help="Bycatch per unit effort"),
    dispersion: float = typer.Option(DEFAULT_DISPERSION, "--dispersion", "-d", help="Dispersion index (>= 1)"),
    nsim: int = typer.Option(DEFAULT_REPLICATES, help="Replicates per coverage level"),
    target_cv: float = typer.Option(30.0, help="Target CV (percent, or decimal < 1.5)"),
    percentile: float = typer.Option(DEFAULT_PERCENTILE, help="Probability (%) of achieving the target CV"),
    method: Method = typer.Option(Method.interpolate, case_sensitive=False, help="Target solving method"),
    design: SamplingDesign = typer.Option(
        SamplingDesign.FINITE_POPULATION, case_sensitive=False, help="Simulation design"
    ),
    seed: Optional[int] = typer.Option(None, help="Random seed for reproducible runs"),
    workers: int = typer.Option(MAX_WORKERS, help="Worker threads across coverage levels"),
    plot_dir: Optional[Path] = typer.Option(None, help="Directory for PNG figures"),
) -> None:
    """Simulate CV vs observer coverage and report the minimum coverage for a target CV."""
    target = decimalize(target_cv)
    try:
        request = SimulationRequest(
            total_effort=total_effort,
            rate=bpue,
            dispersion=dispersion,
            replicates=nsim,
            design=design,
            seed=seed,
        )
        engine = CoverageEngine(max_workers=workers)
        results = _run_with_progress(
            lambda report, cancel: engine.simulate(
                request, percentile=percentile, progress_callback=report, cancel_event=cancel
            )
        )
        target_result = engine.minimum_coverage_for_cv(results, target, method=method.value)
    except DomainError as exc:
        raise typer.BadParameter(str(exc)) from exc

    console.print(_build_summary_table(results))
    finite = results.design is SamplingDesign.FINITE_POPULATION
    console.print(cv_recommendation(target_result, target, results.percentile if finite else None))

    if finite:
        validation = engine.validate(results)
        for warning in validation.warnings:
            console.print(f"[yellow]Diagnostic warning: {warning}[/yellow]")
        for check in validation.failed_checks:
            console.print(f"[red]Diagnostic check failed: {check}[/red]")

    if plot_dir is not None:
        column = "qcv" if finite else "cv"
        paths = [
            _save_figure(
                plot_cv_projection(
                    results.summary,
                    column=column,
                    percentile=results.percentile if finite else None,
                    target=target_result,
                    target_cv=target,
                ),
                plot_dir,
                "cv_vs_coverage.png",
            )
        ]
        if finite:
            paths.append(_save_figure(plot_sample_size(engine.sample_size(results)), plot_dir, "sample_size.png"))
        for path in paths:
            console.print(f"Figure saved to: {path}")
    console.print(f"[dim]{CAVEAT}[/dim]")


@app.command()
def detect(
    total_effort: int = typer.Argument(..., help="Total effort in the fishery (trips or sets)"),
    bpue: float = typer.Argument(..., help="Bycatch per unit effort"),
    dispersion: float = typer.Option(DEFAULT_DISPERSION, "--dispersion", "-d", help="Dispersion index (>= 1)"),
    target: float = typer.Option(
        DEFAULT_TARGET_DETECTION, help="Target probability (%) of observing bycatch when it occurs"
    ),
    plot_dir: Optional[Path] = typer.Option(None, help="Directory for PNG figures"),
) -> None:
    """Minimum coverage to observe bycatch with a target probability."""
    engine = CoverageEngine()
    try:
        result = engine.minimum_coverage_for_detection(total_effort, bpue, dispersion, target)
        curve = engine.detection_curve(total_effort, bpue, dispersion) if plot_dir is not None else None
    except DomainError as exc:
        raise typer.BadParameter(str(exc)) from exc

    console.print(detection_recommendation(result))
    if curve is not None:
        path = _save_figure(plot_detection_probability(curve, target=result), plot_dir, "detection_probability.png")
        console.print(f"Figure saved to: {path}")
    console.print(f"[dim]{CAVEAT}[/dim]")


@app.command()
def probzero(
    bpue: float = typer.Argument(..., help="Bycatch per unit effort"),
    units: List[int] = typer.Argument(..., help="Observed effort levels (trips or sets)"),
    dispersion: float = typer.Option(DEFAULT_DISPERSION, "--dispersion", "-d", help="Dispersion index (>= 1)"),
) -> None:
    """Probability of zero bycatch in each of the given effort levels."""
    try:
        probabilities = CoverageEngine.probability_zero(units, bpue, dispersion)
    except DomainError as exc:
        raise typer.BadParameter(str(exc)) from exc

    table = Table(title="Probability of Zero Bycatch")
    table.add_column("Units", justify="right")
    table.add_column("P(zero)", justify="right")
    for n, p in zip(units, probabilities):
        table.add_row(f"{n:,}", f"{p:.4g}")
    console.print(table)


@app.command()
def ucl(
    units: List[int] = typer.Argument(..., help="Observed effort levels with zero bycatch"),
    dispersion: float = typer.Option(DEFAULT_DISPERSION, "--dispersion", "-d", help="Dispersion index (>= 1)"),
    confidence: float = typer.Option(0.95, help="Confidence level (decimal)"),
) -> None:
    """Upper confidence limit of bycatch per unit effort when none was observed."""
    try:
        limits = CoverageEngine.upper_confidence_limit(units, dispersion, confidence)
    except DomainError as exc:
        raise typer.BadParameter(str(exc)) from exc

    table = Table(title=f"Upper {confidence:.0%} Confidence Limit Given Zero Observed")
    table.add_column("Units", justify="right")
    table.add_column("UCL (bpue)", justify="right")
    for n, limit in zip(units, limits):
        table.add_row(f"{n:,}", f"{limit:.4g}")
    console.print(table)


def main() -> None:
    """Entry point for CLI execution."""
    app()


if __name__ == "__main__":
    main()
