"""
Asset parameter validation.
Rejects configurations that would yield a zero, negative or unbounded
depreciation amount before any calculation happens.
"""
from dataclasses import dataclass, field
from decimal import Decimal

from fixed_assets.core.calculator import STRATEGIES


@dataclass
class ValidationIssue:
    level: str  # 'error' | 'warning'
    code: str
    message: str
    field: str | None = None


@dataclass
class ValidationResult:
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(i.level == "error" for i in self.issues)

    @property
    def errors(self):
        return [i for i in self.issues if i.level == "error"]

    @property
    def warnings(self):
        return [i for i in self.issues if i.level == "warning"]


def validate_asset_parameters(
    purchase_price: Decimal | None,
    salvage_value: Decimal | None,
    useful_life_years: int | None,
    method: str | None,
    rate_pct: Decimal | None = None,
    current_book_value: Decimal | None = None,
) -> ValidationResult:
    result = ValidationResult()
    salvage = salvage_value if salvage_value is not None else Decimal("0")

    # 1. Purchase price
    if purchase_price is None or purchase_price <= 0:
        result.issues.append(
            ValidationIssue(
                level="error",
                code="PURCHASE_PRICE_INVALID",
                message=f"Prix d'achat invalide : {purchase_price}.",
                field="purchase_price",
            )
        )

    # 2. Salvage value bounds
    if salvage < 0:
        result.issues.append(
            ValidationIssue(
                level="error",
                code="SALVAGE_NEGATIVE",
                message=f"Valeur résiduelle négative : {salvage}.",
                field="salvage_value",
            )
        )
    elif purchase_price is not None and salvage > purchase_price:
        result.issues.append(
            ValidationIssue(
                level="error",
                code="SALVAGE_ABOVE_PRICE",
                message=(
                    f"La valeur résiduelle ({salvage:.2f}) dépasse "
                    f"le prix d'achat ({purchase_price:.2f})."
                ),
                field="salvage_value",
            )
        )

    # 3. Useful life
    if useful_life_years is None or useful_life_years <= 0:
        result.issues.append(
            ValidationIssue(
                level="error",
                code="USEFUL_LIFE_INVALID",
                message=f"Durée d'utilité invalide : {useful_life_years}.",
                field="useful_life_years",
            )
        )

    # 4. Method-specific fields
    if method == "declining_balance" and rate_pct is not None and rate_pct <= 0:
        result.issues.append(
            ValidationIssue(
                level="error",
                code="RATE_INVALID",
                message=f"Taux dégressif invalide : {rate_pct} %.",
                field="depreciation_rate",
            )
        )
    if method not in STRATEGIES:
        result.issues.append(
            ValidationIssue(
                level="warning",
                code="UNKNOWN_METHOD",
                message=f"Méthode '{method}' inconnue, amortissement linéaire appliqué.",
                field="depreciation_method",
            )
        )

    # 5. Running book value must sit between salvage and cost
    if current_book_value is not None and purchase_price is not None:
        if current_book_value > purchase_price or current_book_value < salvage:
            result.issues.append(
                ValidationIssue(
                    level="error",
                    code="BOOK_VALUE_OUT_OF_RANGE",
                    message=(
                        f"Valeur comptable {current_book_value:.2f} hors de "
                        f"[{salvage:.2f}, {purchase_price:.2f}]."
                    ),
                    field="current_book_value",
                )
            )

    return result
