"""
Tests for the payslip calculator.

Covers:
- Worked scenarios (full attendance, partial attendance, overtime)
- Banker's rounding of every money figure
- Attendance beyond the working days is capped
- Validation order of bad inputs
- Purity and monotonicity in attendance
"""

from decimal import Decimal

import pytest

from payroll_kernel.domain.payslip_calculator import (
    OVERTIME_MULTIPLIER,
    PayslipInputs,
    calculate_payslip,
)
from payroll_kernel.exceptions import (
    InvalidAttendanceError,
    InvalidSalaryError,
    InvalidWorkingDaysError,
    ValidationError,
)


def _inputs(**overrides) -> PayslipInputs:
    values = {
        "base_salary": Decimal("5000000"),
        "attendance_days": 22,
        "total_working_days": 22,
        "overtime_hours": Decimal("0"),
        "approved_reimbursements": Decimal("0"),
    }
    values.update(overrides)
    return PayslipInputs(**values)


class TestScenarios:

    def test_full_attendance_pays_base_salary(self):
        result = calculate_payslip(_inputs())

        assert result.prorated_salary == Decimal("5000000.00")
        assert result.overtime_amount == Decimal("0.00")
        assert result.gross_pay == Decimal("5000000.00")
        assert result.deductions == Decimal("0.00")
        assert result.net_pay == Decimal("5000000.00")

    def test_partial_attendance_is_prorated(self):
        result = calculate_payslip(_inputs(attendance_days=18))

        # 5,000,000 * 18 / 22 = 4,090,909.0909...
        assert result.prorated_salary == Decimal("4090909.09")
        assert result.net_pay == Decimal("4090909.09")

    def test_overtime_at_double_hourly_rate(self):
        result = calculate_payslip(
            _inputs(
                base_salary=Decimal("4000000"),
                attendance_days=20,
                total_working_days=20,
                overtime_hours=Decimal("60"),
            )
        )

        # 4,000,000 / (20 * 8) = 25,000 per hour
        assert result.hourly_rate == Decimal("25000.00")
        assert result.overtime_rate == Decimal("50000.00")
        assert result.overtime_amount == Decimal("3000000.00")
        assert result.gross_pay == Decimal("7000000.00")
        assert result.net_pay == Decimal("7000000.00")

    def test_overtime_rate_uses_prorated_salary(self):
        result = calculate_payslip(
            _inputs(
                base_salary=Decimal("4000000"),
                attendance_days=10,
                total_working_days=20,
                overtime_hours=Decimal("2"),
            )
        )

        assert result.prorated_salary == Decimal("2000000.00")
        assert result.hourly_rate == Decimal("12500.00")
        assert result.overtime_rate == result.hourly_rate * OVERTIME_MULTIPLIER
        assert result.overtime_amount == Decimal("50000.00")

    def test_overtime_amount_rounded_once_from_unrounded_rate(self):
        result = calculate_payslip(
            _inputs(attendance_days=18, overtime_hours=Decimal("60"))
        )

        # 4,090,909.09 / 176 = 23,243.8016477...; x 2 x 60 = 2,789,256.1977...
        assert result.hourly_rate == Decimal("23243.801647727")
        assert result.overtime_rate == Decimal("46487.603295454")
        assert result.overtime_amount == Decimal("2789256.20")
        assert result.gross_pay == Decimal("6880165.29")

    def test_reimbursements_added_to_net_not_gross(self):
        result = calculate_payslip(_inputs(approved_reimbursements=Decimal("150000")))

        assert result.gross_pay == Decimal("5000000.00")
        assert result.total_reimbursements == Decimal("150000.00")
        assert result.net_pay == Decimal("5150000.00")

    def test_zero_attendance(self):
        result = calculate_payslip(
            _inputs(attendance_days=0, approved_reimbursements=Decimal("100"))
        )

        assert result.prorated_salary == Decimal("0.00")
        assert result.hourly_rate == Decimal("0.00")
        assert result.net_pay == Decimal("100.00")

    def test_attendance_above_working_days_is_capped(self):
        result = calculate_payslip(_inputs(attendance_days=25))

        assert result.attendance_days == 25
        assert result.credited_attendance_days == 22
        assert result.prorated_salary == Decimal("5000000.00")
        assert result.attendance_rate == Decimal("1")

    def test_zero_salary(self):
        result = calculate_payslip(_inputs(base_salary=Decimal("0")))
        assert result.net_pay == Decimal("0.00")


class TestRounding:

    @pytest.mark.parametrize(
        "reimbursement,expected",
        [
            (Decimal("0.125"), Decimal("0.12")),
            (Decimal("0.135"), Decimal("0.14")),
            (Decimal("10.005"), Decimal("10.00")),
        ],
    )
    def test_half_even(self, reimbursement, expected):
        result = calculate_payslip(
            _inputs(base_salary=Decimal("0"), approved_reimbursements=reimbursement)
        )
        assert result.total_reimbursements == expected

    def test_decimal_places_setting(self):
        result = calculate_payslip(_inputs(attendance_days=18), decimal_places=0)
        assert result.prorated_salary == Decimal("4090909")

    def test_hours_per_working_day_setting(self):
        result = calculate_payslip(
            _inputs(
                base_salary=Decimal("4000000"),
                attendance_days=20,
                total_working_days=20,
                overtime_hours=Decimal("1"),
            ),
            hours_per_working_day=10,
        )
        assert result.hourly_rate == Decimal("20000.00")
        assert result.overtime_amount == Decimal("40000.00")


class TestValidation:

    @pytest.mark.parametrize("working_days", [0, -1])
    def test_invalid_working_days(self, working_days):
        with pytest.raises(InvalidWorkingDaysError) as exc_info:
            calculate_payslip(_inputs(total_working_days=working_days))
        assert exc_info.value.code == "INVALID_WORKING_DAYS"

    def test_negative_salary(self):
        with pytest.raises(InvalidSalaryError):
            calculate_payslip(_inputs(base_salary=Decimal("-1")))

    @pytest.mark.parametrize("salary", [Decimal("NaN"), Decimal("Infinity")])
    def test_non_finite_salary(self, salary):
        with pytest.raises(InvalidSalaryError):
            calculate_payslip(_inputs(base_salary=salary))

    def test_non_finite_overtime(self):
        with pytest.raises(ValidationError) as exc_info:
            calculate_payslip(_inputs(overtime_hours=Decimal("NaN")))
        assert exc_info.value.field == "overtime_hours"

    def test_negative_attendance(self):
        with pytest.raises(InvalidAttendanceError):
            calculate_payslip(_inputs(attendance_days=-1))

    def test_negative_overtime(self):
        with pytest.raises(ValidationError) as exc_info:
            calculate_payslip(_inputs(overtime_hours=Decimal("-0.5")))
        assert exc_info.value.field == "overtime_hours"

    def test_negative_reimbursements(self):
        with pytest.raises(ValidationError) as exc_info:
            calculate_payslip(_inputs(approved_reimbursements=Decimal("-1")))
        assert exc_info.value.field == "approved_reimbursements"

    def test_working_days_checked_before_salary(self):
        with pytest.raises(InvalidWorkingDaysError):
            calculate_payslip(_inputs(total_working_days=0, base_salary=Decimal("-1")))

    def test_salary_checked_before_attendance(self):
        with pytest.raises(InvalidSalaryError):
            calculate_payslip(_inputs(base_salary=Decimal("-1"), attendance_days=-1))


class TestProperties:

    def test_identical_inputs_identical_outputs(self):
        inputs = _inputs(attendance_days=17, overtime_hours=Decimal("4.5"))
        assert calculate_payslip(inputs) == calculate_payslip(inputs)

    def test_net_pay_never_decreases_with_attendance(self):
        previous = None
        for days in range(0, 23):
            net = calculate_payslip(
                _inputs(attendance_days=days, overtime_hours=Decimal("3"))
            ).net_pay
            if previous is not None:
                assert net >= previous
            previous = net

    def test_net_equals_gross_plus_reimbursements_minus_deductions(self):
        result = calculate_payslip(
            _inputs(
                attendance_days=13,
                overtime_hours=Decimal("7.5"),
                approved_reimbursements=Decimal("123456.78"),
            )
        )
        assert result.gross_pay == result.prorated_salary + result.overtime_amount
        assert result.net_pay == (
            result.gross_pay + result.total_reimbursements - result.deductions
        )
