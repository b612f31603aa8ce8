# This project was developed with assistance from AI tools.
"""Risk assessment at submission time.

Pure function -- no DB access. A coarse rating from employment status
and the ratio of an estimated monthly repayment to monthly income.
"""

from decimal import Decimal

from db.enums import RiskLevel

# Repayment is estimated as the principal spread over two years.
ESTIMATED_TERM_MONTHS = 24

_LOW_RATIO = 0.3
_HIGH_RATIO = 0.5

_EMPLOYMENT_RISK = {
    "employed": RiskLevel.LOW,
    "self-employed": RiskLevel.MEDIUM,
    "self_employed": RiskLevel.MEDIUM,
}


def employment_risk(employment_status: str | None) -> RiskLevel:
    key = (employment_status or "").strip().lower()
    return _EMPLOYMENT_RISK.get(key, RiskLevel.HIGH)


def assess_risk(
    employment_status: str | None,
    loan_amount: Decimal,
    monthly_income: Decimal | None,
) -> RiskLevel:
    """Rate an application low, medium or high risk.

    Without a positive monthly income the payment ratio cannot be computed
    and the application is rated high.
    """
    emp_risk = employment_risk(employment_status)
    if monthly_income is None or monthly_income <= 0:
        return RiskLevel.HIGH

    monthly_payment = loan_amount / ESTIMATED_TERM_MONTHS
    ratio = float(monthly_payment / monthly_income)

    if ratio < _LOW_RATIO and emp_risk == RiskLevel.LOW:
        return RiskLevel.LOW
    if ratio > _HIGH_RATIO or emp_risk == RiskLevel.HIGH:
        return RiskLevel.HIGH
    return RiskLevel.MEDIUM
