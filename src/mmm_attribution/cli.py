"""
Command-line interface for mmm-attribution.

Provides commands for:
  - Seeding a SQLite database with synthetic weekly data
  - Running the OLS regression
  - Decomposing contributions per channel and week
  - Generating chart series (generic or Plotly JSON)
  - Starting the API server

Results are printed to stdout as JSON; logs go to stderr.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Optional

import typer
from loguru import logger

from mmm_attribution.config import EngineConfig, load_config
from mmm_attribution.core.exceptions import MMMAttributionError

app = typer.Typer(
    name="mmm-attribution",
    help="Marketing-mix OLS regression and channel attribution",
    add_completion=False,
)

_state: dict[str, Any] = {"config_path": None}


@app.callback()
def main(
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to config.yaml",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Configure logging and the config file for every command."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")
    _state["config_path"] = config_path


def _config() -> EngineConfig:
    return load_config(_state["config_path"])


def _engine(database: Optional[Path]):
    from mmm_attribution.connectors.sqlite import SQLiteProvider
    from mmm_attribution.engine import MMMEngine

    cfg = _config()
    return MMMEngine(SQLiteProvider(database or cfg.storage.database_path), cfg)


def _emit(payload: Any, output: Optional[Path] = None) -> None:
    text = json.dumps(payload, indent=2)
    if output is None:
        typer.echo(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text)
    logger.info(f"Wrote {output}")


def _fail(error: MMMAttributionError) -> None:
    logger.error(f"[{error.code}] {error.message}")
    raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# seed
# ---------------------------------------------------------------------------

@app.command()
def seed(
    database: Optional[Path] = typer.Option(None, "--database", "-d", help="SQLite file"),
    weeks: Optional[int] = typer.Option(None, "--weeks", help="Number of weekly periods"),
    start: Optional[str] = typer.Option(None, "--start", help="First week start (YYYY-MM-DD)"),
    random_seed: Optional[int] = typer.Option(None, "--seed", help="Random seed"),
    no_noise: bool = typer.Option(False, "--no-noise", help="Generate noise-free outcomes"),
):
    """
    Generate synthetic weekly data and write it to a fresh SQLite database.
    """
    from mmm_attribution.synthetic import generate_synthetic_data, seed_database

    cfg = _config()
    path = database or cfg.storage.database_path
    dataset = generate_synthetic_data(
        n_weeks=weeks or cfg.synthetic.n_weeks,
        start=start or cfg.synthetic.start,
        seed=random_seed if random_seed is not None else cfg.synthetic.seed,
        noise=not no_noise,
    )
    try:
        seed_database(path, dataset)
    except MMMAttributionError as e:
        _fail(e)
    logger.info(f"Seeded {path}")


# ---------------------------------------------------------------------------
# regress / decompose / chart
# ---------------------------------------------------------------------------

@app.command()
def regress(
    target: str = typer.Option("revenue", "--target", "-t", help="revenue or conversions"),
    database: Optional[Path] = typer.Option(None, "--database", "-d"),
    start: Optional[str] = typer.Option(None, "--start"),
    end: Optional[str] = typer.Option(None, "--end"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON to this file"),
):
    """Fit OLS of the target on weekly channel spend."""
    try:
        result = _engine(database).run_regression(target, start=start, end=end)
    except MMMAttributionError as e:
        _fail(e)
    _emit(result.model_dump(mode="json"), output)


@app.command()
def decompose(
    target: str = typer.Option("revenue", "--target", "-t", help="revenue or conversions"),
    database: Optional[Path] = typer.Option(None, "--database", "-d"),
    start: Optional[str] = typer.Option(None, "--start"),
    end: Optional[str] = typer.Option(None, "--end"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON to this file"),
):
    """Attribute each week's target to base and channels."""
    try:
        result = _engine(database).decompose_contributions(target, start=start, end=end)
    except MMMAttributionError as e:
        _fail(e)
    _emit(result.model_dump(mode="json"), output)


@app.command()
def chart(
    chart_type: str = typer.Argument(
        ..., help="spend_over_time, revenue_vs_spend, channel_comparison, contribution_breakdown",
    ),
    target: str = typer.Option("revenue", "--target", "-t"),
    plotly: bool = typer.Option(False, "--plotly", help="Emit Plotly JSON"),
    database: Optional[Path] = typer.Option(None, "--database", "-d"),
    start: Optional[str] = typer.Option(None, "--start"),
    end: Optional[str] = typer.Option(None, "--end"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON to this file"),
):
    """Generate chart series for one of the four chart kinds."""
    try:
        data = _engine(database).generate_chart_series(chart_type, target, start=start, end=end)
    except MMMAttributionError as e:
        _fail(e)
    _emit(data.to_plotly() if plotly else data.to_dict(), output)


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------

@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host"),
    port: Optional[int] = typer.Option(None, "--port", "-p"),
):
    """Start the HTTP API."""
    import uvicorn

    from mmm_attribution.api.app import create_app

    cfg = _config()
    uvicorn.run(
        create_app(config=cfg),
        host=host or cfg.server.api_host,
        port=port or cfg.server.api_port,
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()
