"""
Read-only schedule projection.
Previews how an asset would depreciate over its useful life, period by period,
with the same strategies, clamp and rounding as the posting run.
Nothing here touches the ledger.
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from fixed_assets.core.calculator import compute_period_depreciation
from fixed_assets.core.errors import ConfigurationError
from fixed_assets.core.periods import resolve_period
from fixed_assets.core.validator import validate_asset_parameters


@dataclass
class ProjectedPeriod:
    period_start: date
    period_end: date
    period_type: str
    opening_value: Decimal
    depreciation_amount: Decimal
    accumulated_depreciation: Decimal
    closing_value: Decimal
    method: str


def project_schedule(
    purchase_price: Decimal,
    salvage_value: Decimal,
    useful_life_years: int,
    method: str,
    start_date: date,
    period_type: str = "monthly",
    rate_pct: Decimal | None = None,
    opening_value: Decimal | None = None,
) -> list[ProjectedPeriod]:
    """
    Project the schedule from the period containing start_date.

    Stops after useful_life_years worth of periods, or earlier once the value
    reaches salvage. Declining balance may therefore end above salvage.
    """
    opening = opening_value if opening_value is not None else purchase_price
    validation = validate_asset_parameters(
        purchase_price=purchase_price,
        salvage_value=salvage_value,
        useful_life_years=useful_life_years,
        method=method,
        rate_pct=rate_pct,
        current_book_value=opening,
    )
    if validation.has_errors:
        raise ConfigurationError(None, validation.errors)

    period = resolve_period(start_date, period_type)
    total_periods = useful_life_years * period.periods_per_year
    rows: list[ProjectedPeriod] = []
    current = opening

    for _ in range(total_periods):
        if current <= salvage_value:
            break
        result = compute_period_depreciation(
            opening_value=current,
            purchase_price=purchase_price,
            salvage_value=salvage_value,
            useful_life_years=useful_life_years,
            method=method,
            rate_pct=rate_pct,
            periods_per_year=period.periods_per_year,
        )
        rows.append(
            ProjectedPeriod(
                period_start=period.start,
                period_end=period.end,
                period_type=period.period_type,
                opening_value=result.opening_value,
                depreciation_amount=result.depreciation_amount,
                accumulated_depreciation=result.accumulated_depreciation,
                closing_value=result.closing_value,
                method=method,
            )
        )
        current = result.closing_value
        period = period.next_period()

    return rows
