"""Labour cost calculation engine."""

from labour_cost.calculators.aggregation import Aggregate, AggregationEngine, Breakdown
from labour_cost.calculators.break_calculator import BreakCalculator, parse_break_rules
from labour_cost.calculators.cost_calculator import PayrollCostCalculator
from labour_cost.calculators.engine import LabourCostEngine, StaffCostReport
from labour_cost.calculators.forecast import ForecastEngine, ForecastResult
from labour_cost.calculators.periods import Period, parse_month, parse_week_start
from labour_cost.calculators.rate_resolver import RateResolver

__all__ = [
    "Aggregate",
    "AggregationEngine",
    "Breakdown",
    "BreakCalculator",
    "parse_break_rules",
    "PayrollCostCalculator",
    "LabourCostEngine",
    "StaffCostReport",
    "ForecastEngine",
    "ForecastResult",
    "Period",
    "parse_month",
    "parse_week_start",
    "RateResolver",
]
