import json
from typing import List, Optional

import typer

from .app_logging import configure_logging
from .config import Settings
from .engine import CalculationEngine
from .models import InvalidWeightError
from .validation import validate_weight

app = typer.Typer(help="Neonatal insensible water loss calculator")


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to IWL_LOG_LEVEL or INFO)",
    ),
) -> None:
    try:
        settings = Settings() if log_level is None else Settings(log_level=log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level") from exc
    configure_logging(settings.log_level)


@app.command()
def calculate(
    weight: str = typer.Option(..., "--weight", "-w", help="Birth weight in grams"),
    factor: List[str] = typer.Option(
        [],
        "--factor",
        "-f",
        help="Active environmental factor id (repeatable)",
    ),
) -> None:
    """Compute the IWL rate and daily volume for a neonate."""
    engine = CalculationEngine()
    for factor_id in factor:
        if factor_id not in engine.catalog:
            known = ", ".join(engine.catalog.ids())
            raise typer.BadParameter(f"unknown factor {factor_id!r} (known: {known})", param_hint="--factor")
    try:
        weight_grams = validate_weight(weight)
    except InvalidWeightError as exc:
        raise typer.BadParameter(exc.message, param_hint="--weight") from exc

    result = engine.compute(weight_grams, {factor_id: True for factor_id in factor})
    typer.echo(
        json.dumps(
            {
                "weight_grams": result.weight_grams,
                "band": result.band.label,
                "baseline_rate": result.baseline_rate,
                "applied_multiplier": round(result.applied_multiplier, 4),
                "per_kg_per_day_rate": result.per_kg_per_day_rate,
                "total_ml_per_day": result.total_ml_per_day,
                "applied_factors": list(result.applied_factor_ids),
                "skipped_factors": list(result.skipped_factor_ids),
                "trace": list(result.trace),
            },
            ensure_ascii=False,
        )
    )


@app.command()
def bands() -> None:
    """List the baseline IWL rate for each birth-weight band."""
    engine = CalculationEngine()
    typer.echo(
        json.dumps(
            [
                {
                    "label": band.label,
                    "min_grams": band.min_grams,
                    "max_grams": band.max_grams,
                    "baseline_rate": band.baseline_rate,
                }
                for band in engine.table
            ],
            ensure_ascii=False,
        )
    )


@app.command()
def factors() -> None:
    """List the environmental adjustment factors in trace order."""
    engine = CalculationEngine()
    typer.echo(
        json.dumps(
            [
                {
                    "id": f.id,
                    "label": f.label,
                    "kind": f.kind,
                    "magnitude": f.magnitude,
                    "applicability": f.applicability,
                    "description": f.description,
                }
                for f in engine.catalog
            ],
            ensure_ascii=False,
        )
    )


if __name__ == "__main__":
    app()
