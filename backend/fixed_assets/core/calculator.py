"""
Periodic depreciation calculator.
One strategy per method; unknown methods fall back to straight line so the
engine stays total when a new method name shows up before it is implemented.
"""
from dataclasses import dataclass
from decimal import Decimal

from fixed_assets.utils.config_loader import get_currency_places, get_rounding_mode


def round_currency(value: Decimal, rounding: str | None = None) -> Decimal:
    """Quantize to the currency's minor unit (2 places, half away from zero by default)."""
    quantum = Decimal(1).scaleb(-get_currency_places())
    return value.quantize(quantum, rounding=rounding or get_rounding_mode())


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class MethodStrategy:
    """Computes the unclamped, unrounded depreciation for one period."""

    name = ""

    def compute(
        self,
        opening: Decimal,
        purchase_price: Decimal,
        salvage_value: Decimal,
        useful_life_years: int,
        rate_pct: Decimal | None = None,
        periods_per_year: int = 12,
    ) -> Decimal:
        raise NotImplementedError


class StraightLine(MethodStrategy):
    """Same amount every period: (cost - salvage) spread over the useful life."""

    name = "straight_line"

    def compute(self, opening, purchase_price, salvage_value, useful_life_years,
                rate_pct=None, periods_per_year=12):
        depreciable_amount = purchase_price - salvage_value
        return depreciable_amount / (Decimal(useful_life_years) * periods_per_year)


class DecliningBalance(MethodStrategy):
    """
    Fixed rate applied to the opening value, so the amount shrinks every period.
    Without an explicit annual rate, 1 / useful life is used.
    """

    name = "declining_balance"

    def compute(self, opening, purchase_price, salvage_value, useful_life_years,
                rate_pct=None, periods_per_year=12):
        if rate_pct is not None:
            annual_rate = rate_pct / Decimal("100")
        else:
            annual_rate = Decimal("1") / Decimal(useful_life_years)
        return opening * annual_rate / periods_per_year


STRATEGIES: dict[str, MethodStrategy] = {
    StraightLine.name: StraightLine(),
    DecliningBalance.name: DecliningBalance(),
}
DEFAULT_STRATEGY = STRATEGIES[StraightLine.name]


def get_strategy(method: str | None) -> MethodStrategy:
    return STRATEGIES.get(method, DEFAULT_STRATEGY)


def register_strategy(strategy: MethodStrategy) -> None:
    STRATEGIES[strategy.name] = strategy


@dataclass(frozen=True)
class DepreciationResult:
    opening_value: Decimal
    depreciation_amount: Decimal
    closing_value: Decimal
    accumulated_depreciation: Decimal
    method: str | None


def compute_period_depreciation(
    opening_value,
    purchase_price,
    salvage_value,
    useful_life_years: int,
    method: str | None,
    rate_pct=None,
    periods_per_year: int = 12,
) -> DepreciationResult:
    """
    Compute one period's depreciation for an asset.

    The amount is clamped so the closing value never drops below salvage value,
    then rounded. Closing value and accumulated depreciation are derived from
    the rounded amount so that:
        closing = opening - amount
        accumulated = purchase_price - closing

    Parameters are assumed validated (see core.validator); no exception is
    raised for a valid input range.
    """
    opening = round_currency(_to_decimal(opening_value))
    price = _to_decimal(purchase_price)
    salvage = _to_decimal(salvage_value)
    rate = _to_decimal(rate_pct) if rate_pct is not None else None

    strategy = get_strategy(method)
    raw_amount = strategy.compute(
        opening, price, salvage, useful_life_years, rate, periods_per_year
    )

    remaining = max(opening - salvage, Decimal("0"))
    amount = round_currency(min(raw_amount, remaining))

    # Smallest posting unit, so declining balance still converges to salvage.
    minor_unit = Decimal(1).scaleb(-get_currency_places())
    if amount <= 0 and remaining > 0:
        amount = min(minor_unit, round_currency(remaining))

    closing = round_currency(opening - amount)
    accumulated = round_currency(price - closing)
    return DepreciationResult(
        opening_value=opening,
        depreciation_amount=amount,
        closing_value=closing,
        accumulated_depreciation=accumulated,
        method=method,
    )
