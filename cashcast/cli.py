import asyncio
from datetime import date, datetime
from pathlib import Path
from typing import Annotated, Optional

import pandas as pd
import typer

from cashcast.config import get_settings
from cashcast.economic import CachedEconomicDataProvider, StaticEconomicDataProvider
from cashcast.exceptions import CashcastError
from cashcast.export import export_forecast_csv
from cashcast.model_registry import ModelRegistry, seed_default_models
from cashcast.models import ForecastConfig, ModelType, Transaction
from cashcast.noise import UniformNoise, ZeroNoise
from cashcast.orchestrator import ForecastOrchestrator
from cashcast.primitives.preprocessing import build_daily_net_flow
from cashcast.primitives.runway import calculate_runway
from cashcast.primitives.variance import calculate_variance_analysis
from cashcast.utilities.logger import setup_logging

cli = typer.Typer(help="Cash flow forecasting engine")

TransactionsFile = Annotated[Path, typer.Argument(help="CSV file with 'date' and 'amount' columns", exists=True)]
OrgOption = Annotated[Optional[str], typer.Option(help="Organization id; defaults to the configured org")]  # noqa
AsOfOption = Annotated[Optional[datetime], typer.Option(help="First day after the history window", formats=["%Y-%m-%d"])]  # noqa


def read_transactions(path: Path) -> list[Transaction]:
    """Read a transactions CSV with 'date' and 'amount' columns."""
    df = pd.read_csv(path)
    missing = {"date", "amount"} - set(df.columns)
    if missing:
        typer.secho(f"Error: {path} is missing columns: {', '.join(sorted(missing))}", fg=typer.colors.RED, bold=True)
        raise typer.Exit(code=1)
    df = df.dropna(subset=["date", "amount"])
    return [Transaction(date=row.date, amount=row.amount) for row in df.itertuples(index=False)]


def build_orchestrator(org_id: str, seed: int | None = None, deterministic: bool = False) -> ForecastOrchestrator:
    settings = get_settings()
    setup_logging(settings)
    registry = ModelRegistry()
    seed_default_models(registry, org_id)
    noise = ZeroNoise() if deterministic else UniformNoise(settings.NOISE_AMPLITUDE, seed if seed is not None else settings.RANDOM_SEED)
    return ForecastOrchestrator(registry, settings=settings, noise=noise)


def _as_date(value: datetime | None) -> date:
    return value.date() if value is not None else date.today()


@cli.command("forecast")
def forecast(
    transactions_file: TransactionsFile,
    horizon: Annotated[int, typer.Option(help="Days to forecast (1-365)")] = 30,
    model_type: Annotated[ModelType, typer.Option(help="Model kind, or auto to select by backtest")] = ModelType.AUTO,
    org_id: OrgOption = None,
    as_of: AsOfOption = None,
    economic: Annotated[bool, typer.Option(help="Apply the current economic scenario")] = False,
    seed: Annotated[Optional[int], typer.Option(help="Noise seed")] = None,  # noqa
    deterministic: Annotated[bool, typer.Option(help="Disable the noise term")] = False,
    output: Annotated[Optional[Path], typer.Option(help="Write the forecast to this CSV file")] = None,  # noqa
):
    """Forecast daily net cash flow from a transactions CSV"""
    org_id = org_id or get_settings().DEFAULT_ORG_ID
    orchestrator = build_orchestrator(org_id, seed, deterministic)
    transactions = read_transactions(transactions_file)
    config = ForecastConfig(org_id=org_id, horizon_days=horizon, model_type=model_type)
    provider = CachedEconomicDataProvider(StaticEconomicDataProvider(seed=seed)) if economic else None

    try:
        result = asyncio.run(
            orchestrator.generate_forecast_async(config, transactions, economic_provider=provider, as_of=_as_date(as_of))
        )
    except CashcastError as exc:
        typer.secho(f"Error: {exc.message}", fg=typer.colors.RED, bold=True)
        raise typer.Exit(code=1) from exc

    metrics = result.accuracy_metrics
    typer.secho(
        f"Model {result.model_id} ({result.model_kind}): accuracy {metrics.accuracy:.1%}, MAPE {metrics.mape:.2f}%",
        fg=typer.colors.GREEN,
    )
    if result.scenario_impact is not None:
        impact = result.scenario_impact
        typer.secho(
            f"Scenario: revenue x{impact.revenue_multiplier:.4f}, expenses x{impact.expense_multiplier:.4f}",
            fg=typer.colors.YELLOW,
        )
    for point in result.forecast:
        typer.echo(
            f"{point.date.isoformat()}  {point.predicted_value:>12.2f}  "
            f"[{point.lower_bound:>12.2f}, {point.upper_bound:>12.2f}]  {point.confidence:.2f}  {point.trend}"
        )

    if output is not None:
        history = build_daily_net_flow(transactions, as_of=_as_date(as_of))
        export_forecast_csv(result, output, history=history)
        typer.secho(f"Forecast written to {output}", fg=typer.colors.GREEN)


@cli.command("models")
def list_models(org_id: OrgOption = None):
    """List the default models registered for an org"""
    org_id = org_id or get_settings().DEFAULT_ORG_ID
    registry = ModelRegistry()
    for model in seed_default_models(registry, org_id):
        typer.echo(f"{model.id:<30} {model.kind:<15} {model.status:<9} accuracy={model.accuracy:.2f}  {model.name}")


@cli.command("evaluate")
def evaluate(transactions_file: TransactionsFile, org_id: OrgOption = None, as_of: AsOfOption = None):
    """Backtest and rank the default models against a transactions CSV"""
    org_id = org_id or get_settings().DEFAULT_ORG_ID
    orchestrator = build_orchestrator(org_id)
    evaluations = orchestrator.evaluate_models(org_id, read_transactions(transactions_file), as_of=_as_date(as_of))

    for evaluation in evaluations:
        if evaluation.succeeded:
            perf = evaluation.performance
            typer.secho(
                f"#{perf.ranking} {evaluation.model_id:<30} MAPE={perf.mape:.2f}% variance={perf.variance:.2f} "
                f"accuracy={perf.accuracy:.1%}",
                fg=typer.colors.GREEN,
            )
        else:
            typer.secho(f"-- {evaluation.model_id:<30} failed: {evaluation.error}", fg=typer.colors.RED)


@cli.command("runway")
def runway(transactions_file: TransactionsFile, as_of: AsOfOption = None, months: int = 3):
    """Estimate cash runway from a transactions CSV"""
    analysis = calculate_runway(read_transactions(transactions_file), as_of=_as_date(as_of), months=months)
    color = typer.colors.RED if analysis.significance.startswith("CRITICAL") else typer.colors.GREEN
    typer.secho(
        f"Runway: {analysis.runway_months:.1f} months ({analysis.significance}); "
        f"balance {analysis.current_balance:.2f}, monthly net flow {analysis.monthly_burn_rate:.2f}",
        fg=color,
    )
    typer.echo(analysis.trend_analysis)


@cli.command("variance")
def variance(
    transactions_file: TransactionsFile,
    test_fraction: Annotated[float, typer.Option(help="Share of transactions held out for the backtest")] = 0.3,
    trend_months: Annotated[int, typer.Option(help="Trailing training months behind the projection")] = 3,
):
    """Compare a monthly trend projection with the latest transactions"""
    try:
        analysis = calculate_variance_analysis(
            read_transactions(transactions_file), test_fraction=test_fraction, trend_months=trend_months
        )
    except CashcastError as exc:
        typer.secho(f"Error: {exc.message}", fg=typer.colors.RED, bold=True)
        raise typer.Exit(code=1) from exc

    for month in analysis.monthly_accuracy:
        typer.echo(
            f"{month.month}  actual {month.actual:>12.2f}  forecast {month.forecast:>12.2f}  "
            f"variance {month.variance:>12.2f} ({month.variance_percentage:+.1f}%)"
        )
    color = typer.colors.GREEN if analysis.accuracy_percentage >= 80 else typer.colors.YELLOW
    typer.secho(
        f"Test period {analysis.test_period}: MAPE {analysis.overall_mape:.2f}%, "
        f"accuracy {analysis.accuracy_percentage:.1f}%, RMSE {analysis.rmse:.2f}, MAE {analysis.mae:.2f}",
        fg=color,
    )


if __name__ == "__main__":
    cli()
