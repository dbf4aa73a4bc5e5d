"""Per-unit cost rollup for generated tasks.

material_total = sum(quantity * unit_price) over material lines
labor_total    = sum(quantity * unit_price) over labor lines
grand_total    = material_total + labor_total

A line without a resolved price contributes 0 ("price not yet set" is a valid
state). Prices are never converted: all lines must share one currency.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from paramtasks.models import CostLine, CostScope

ZERO = Decimal("0")


class MixedCurrencyError(ValueError):
    """Raised when lines priced in different currencies are aggregated together."""

    def __init__(self, currencies: Iterable[str]):
        self.currencies = sorted(currencies)
        super().__init__(
            f"Cannot aggregate costs across mixed currencies: {', '.join(self.currencies)}"
        )


@dataclass(frozen=True, slots=True)
class CostBreakdown:
    material_total: Decimal
    labor_total: Decimal
    grand_total: Decimal
    currency: str | None = None
    material_count: int = 0
    labor_count: int = 0

    def total_for(self, scope: CostScope | str) -> Decimal:
        scope = CostScope(scope)
        if scope is CostScope.MATERIALS_ONLY:
            return self.material_total
        if scope is CostScope.LABOR_ONLY:
            return self.labor_total
        return self.grand_total

    @property
    def is_empty(self) -> bool:
        return self.material_count == 0 and self.labor_count == 0


def line_subtotal(line: CostLine) -> Decimal:
    """quantity * unit_price, with a missing price counted as zero."""
    price = line.unit_price if line.unit_price is not None else ZERO
    return Decimal(line.quantity) * Decimal(price)


def single_currency(lines: Iterable[CostLine]) -> str | None:
    """Return the one currency used by lines, or None if none declare one.

    Raises:
        MixedCurrencyError: If more than one currency is present
    """
    currencies = {line.currency.strip().upper() for line in lines if line.currency and line.currency.strip()}
    if len(currencies) > 1:
        raise MixedCurrencyError(currencies)
    return next(iter(currencies), None)


def unit_cost(
    material_lines: Sequence[CostLine], labor_lines: Sequence[CostLine]
) -> CostBreakdown:
    """Aggregate material and labor lines into a per-unit cost.

    Args:
        material_lines: Material lines with resolved unit prices
        labor_lines: Labor lines with resolved unit prices

    Returns:
        CostBreakdown with material, labor and grand totals

    Raises:
        MixedCurrencyError: If the lines are priced in more than one currency
    """
    material_lines = list(material_lines)
    labor_lines = list(labor_lines)
    currency = single_currency([*material_lines, *labor_lines])

    material_total = sum((line_subtotal(line) for line in material_lines), ZERO)
    labor_total = sum((line_subtotal(line) for line in labor_lines), ZERO)

    return CostBreakdown(
        material_total=material_total,
        labor_total=labor_total,
        grand_total=material_total + labor_total,
        currency=currency,
        material_count=len(material_lines),
        labor_count=len(labor_lines),
    )
