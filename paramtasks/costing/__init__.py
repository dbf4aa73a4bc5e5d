"""Material and labor cost rollups for generated tasks."""

from paramtasks.costing.rollup import (
    CostBreakdown,
    MixedCurrencyError,
    line_subtotal,
    single_currency,
    unit_cost,
)

__all__ = [
    "CostBreakdown",
    "MixedCurrencyError",
    "line_subtotal",
    "single_currency",
    "unit_cost",
]
