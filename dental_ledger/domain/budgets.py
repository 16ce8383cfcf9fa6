"""Budget quoting for orthodontic and specialty treatment"""

from decimal import Decimal, ROUND_HALF_UP

from dental_ledger.domain.exceptions import InvalidAmount, InvalidCount
from dental_ledger.domain.installments import MIN_PLAN_INSTALLMENTS, split_amount
from dental_ledger.domain.models import BudgetQuote


def apply_cash_discount(total_cents: int, cash_discount: float) -> int:
    """Upfront price: total minus the cash discount, rounded half up to the cent"""
    factor = Decimal(1) - Decimal(str(cash_discount))
    return int((Decimal(total_cents) * factor).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def quote_budget(
    monthly_value_cents: int,
    installments: int,
    cash_discount: float,
    total_cents: int = 0,
) -> BudgetQuote:
    """
    Price a budget.

    Monthly-priced budgets (ortho) total monthly value x installments, so the
    schedule is the monthly value repeated. Budgets priced as a lump sum
    (specialty procedures, monthly value 0) split the given total with the
    standard first-installment remainder policy.
    """
    if installments < 1:
        raise InvalidCount(f"Budget needs at least 1 installment, got {installments}")
    if not 0 <= cash_discount < 1:
        raise InvalidAmount(f"Cash discount must be in [0, 1), got {cash_discount}")

    if monthly_value_cents > 0:
        total = monthly_value_cents * installments
        schedule = [monthly_value_cents] * installments
        monthly = monthly_value_cents
    elif total_cents > 0:
        total = total_cents
        schedule = split_amount(total, installments) if installments >= MIN_PLAN_INSTALLMENTS else [total]
        monthly = schedule[-1]
    else:
        raise InvalidAmount("Budget needs a monthly value or a total")

    return BudgetQuote(
        monthly_value_cents=monthly,
        installments=installments,
        total_cents=total,
        cash_value_cents=apply_cash_discount(total, cash_discount),
        schedule=schedule,
    )
