from decimal import Decimal

from tuition_center.payroll.calculator.standard_calculator import StandardSalaryCalculator


def test_net_is_base_plus_extras_minus_deductions():
    calc = StandardSalaryCalculator()

    net = calc.net_salary(
        base_amount=Decimal("50000"), allowances=Decimal("2500.50"), bonus=Decimal("1000"), deductions=Decimal("750.25")
    )

    assert net == Decimal("52750.25")


def test_missing_amounts_count_as_zero():
    calc = StandardSalaryCalculator()

    assert calc.net_salary(base_amount=Decimal("45000"), allowances=None, bonus=None, deductions=None) == Decimal("45000.00")
