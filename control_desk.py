"""Mini README: Entry point CLI for RoadLedger.

This script exposes a Typer CLI with two commands: ``run`` starts the JSON
API under uvicorn, and ``calculate`` prints a trip breakdown for figures
given on the command line, which is handy for checking a load offer.
"""

from __future__ import annotations

import typer
import uvicorn

from roadledger.configuration import get_settings
from roadledger.interface import format_currency
from roadledger.logging_utils import configure_root_logger
from roadledger.trips import CompanyTerms, ExpenseSnapshot, calculate_breakdown
from roadledger.utils import parse_number

cli = typer.Typer(help="Run and query the RoadLedger budget and trip calculator.")


@cli.command()
def run(
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    production: bool = typer.Option(
        False, help="Use production server settings (disable auto-reload)."
    ),
) -> None:
    """Start the FastAPI application using uvicorn."""

    settings = get_settings()
    effective_host = host or settings.interface_host
    effective_port = port or settings.interface_port
    configure_root_logger(settings.log_level)

    # 0.0.0.0 cannot be opened in a browser; point at localhost instead.
    browser_host = "127.0.0.1" if effective_host in {"0.0.0.0", "::"} else effective_host
    typer.echo(
        f"Starting RoadLedger on {effective_host}:{effective_port}.\n"
        f"API docs at http://{browser_host}:{effective_port}/docs"
    )
    uvicorn.run(
        "roadledger.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
    )


@cli.command()
def calculate(
    gross: str = typer.Argument(..., help="Trip gross revenue, e.g. 2450 or 2450,50."),
    miles: str = typer.Argument(..., help="Loaded plus empty miles."),
    days: str = typer.Option("1", help="Days on the road."),
    rent_per_week: str = typer.Option("0", help="Truck rent charged per week."),
    percentage: str = typer.Option("0", help="Company percentage of gross."),
    rate_per_mile: str = typer.Option("0", help="Company charge per mile."),
) -> None:
    """Print the company deductions, net profit and rate per mile of a trip."""

    terms = CompanyTerms(
        rent_per_week=parse_number(rent_per_week),
        percentage_from_gross=parse_number(percentage),
        rate_per_mile_company_charge=parse_number(rate_per_mile),
    )
    result = calculate_breakdown(gross, miles, days, ExpenseSnapshot(terms=terms))
    typer.echo(f"Rent:               {format_currency(result.rent_charge)}")
    typer.echo(f"Percentage:         {format_currency(result.percentage_charge)}")
    typer.echo(f"Per-mile charge:    {format_currency(result.company_mile_charge)}")
    typer.echo(f"Company deductions: {format_currency(result.company_deductions)}")
    typer.echo(f"Net profit:         {format_currency(result.net_profit)}")
    typer.echo(f"Rate per mile:      {format_currency(result.rate_per_mile)}")
    if not result.profitable:
        typer.secho("This trip loses money.", fg=typer.colors.RED)


if __name__ == "__main__":
    cli()
