"""Employer cost calculation: National Insurance and holiday accrual."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from labour_cost.calculators.rounding import ZERO
from labour_cost.calculators.types import (
    CostResult,
    IntervalCost,
    NIContribution,
    PayrollConfig,
    PaymentType,
    StaffMember,
)


class PayrollCostCalculator:
    """Converts gross pay into full employer cost for one staff member.

    HOURLY staff: gross pay is the sum of their intervals' pay; holiday
    accrual is gross pay x the organization's accrual ratio.

    MONTHLY staff: gross pay is the fixed salary regardless of hours;
    holiday accrual is 0 (included in salary). A salaried member with no
    salary on record costs nothing.

    Both: NI is charged on gross pay above each payer's threshold, and
    total cost = gross pay + employer NI + holiday accrual. Employee NI is
    reported but never added to total cost.

    No rounding happens here; results stay at full precision until a
    report is built.
    """

    def __init__(self, config: PayrollConfig):
        self.config = config

    def calculate(
        self,
        staff: StaffMember,
        interval_costs: Iterable[IntervalCost] = (),
    ) -> CostResult:
        """Calculate a staff member's cost for the period."""
        if staff.payment_type == PaymentType.MONTHLY:
            if staff.monthly_salary is None:
                return CostResult()
            return self.cost_from_gross(staff.monthly_salary, PaymentType.MONTHLY)

        gross_pay = sum((c.pay for c in interval_costs), ZERO)
        return self.cost_from_gross(gross_pay, PaymentType.HOURLY)

    def cost_from_gross(self, gross_pay: Decimal, payment_type: PaymentType) -> CostResult:
        """Build a CostResult from a gross pay figure."""
        holiday_accrual = self.holiday_accrual(gross_pay, payment_type)
        employee_ni = self.calculate_ni(gross_pay, self.config.employee_ni)
        employer_ni = self.calculate_ni(gross_pay, self.config.employer_ni)

        return CostResult(
            gross_pay=gross_pay,
            holiday_accrual=holiday_accrual,
            employee_ni=employee_ni,
            employer_ni=employer_ni,
            total_cost=gross_pay + employer_ni + holiday_accrual,
        )

    def holiday_accrual(self, gross_pay: Decimal, payment_type: PaymentType) -> Decimal:
        """Holiday accrual; salaried staff have holiday included in salary."""
        if payment_type == PaymentType.MONTHLY or gross_pay <= 0:
            return ZERO
        return gross_pay * self.config.holiday_accrual_ratio

    @staticmethod
    def calculate_ni(gross_pay: Decimal, contribution: NIContribution) -> Decimal:
        """NI on earnings above the threshold, with an optional upper band."""
        if gross_pay <= contribution.threshold:
            return ZERO

        upper = contribution.upper_threshold
        if upper is None or upper <= contribution.threshold or gross_pay <= upper:
            return (gross_pay - contribution.threshold) * contribution.rate

        main_band = (upper - contribution.threshold) * contribution.rate
        additional_band = (gross_pay - upper) * contribution.upper_rate
        return main_band + additional_band
