# This project was developed with assistance from AI tools.
"""Rationale text for rejections and partial approvals.

Used to pre-fill the notes of a decision when the approver leaves them
empty. Amount arguments are form text and go through ``parse_amount``;
malformed amounts raise ``AmountValidationError``. A missing or zero
monthly income means the debt-to-income checks are skipped.
"""

from decimal import Decimal

from db.enums import WorkflowRole

from .amounts import AmountValidationError, format_ugx, parse_amount, parse_optional_amount

DIRECTOR_RISK_THRESHOLD = 0.6

_ROLE_BOILERPLATE: dict[WorkflowRole, str] = {
    WorkflowRole.FIELD_OFFICER: (
        "Applicant details collected in the field could not be verified."
    ),
    WorkflowRole.MANAGER: (
        "Application documentation is incomplete or could not be verified. "
        "Please provide the outstanding supporting documents and resubmit."
    ),
    WorkflowRole.DIRECTOR: (
        "The applicant's risk profile does not meet current lending criteria."
    ),
    WorkflowRole.CHAIRPERSON: (
        "Approving this loan would exceed the acceptable risk limits of the "
        "current loan portfolio."
    ),
    WorkflowRole.CEO: (
        "The application does not align with the institution's current "
        "strategic lending priorities."
    ),
}


def debt_to_income_ratio(loan_amount: Decimal, monthly_income: Decimal | None) -> float | None:
    """Loan amount over annualized income, or None when income is unknown."""
    if monthly_income is None or monthly_income <= 0:
        return None
    return float(loan_amount / (monthly_income * 12))


def generate_rejection_reason(
    role: WorkflowRole | str,
    employment_status: str | None,
    loan_amount_text: str,
    monthly_income_text: str | None,
) -> str:
    """Explain why ``role`` rejects the application; first matching rule wins."""
    role = WorkflowRole(role)
    loan_amount = parse_amount(loan_amount_text)
    monthly_income = parse_optional_amount(monthly_income_text)
    ratio = debt_to_income_ratio(loan_amount, monthly_income)

    if ratio is not None and ratio > 1:
        return (
            f"The requested loan amount of {format_ugx(loan_amount)} exceeds the "
            f"applicant's annual income of {format_ugx(monthly_income * 12)}. "
            f"Debt-to-income ratio: {ratio * 100:.1f}%."
        )
    if ratio is not None and ratio > DIRECTOR_RISK_THRESHOLD and role == WorkflowRole.DIRECTOR:
        return (
            f"The debt-to-income ratio of {ratio * 100:.1f}% is above the "
            f"{DIRECTOR_RISK_THRESHOLD * 100:.0f}% risk threshold set for director approval."
        )
    if (employment_status or "").strip().lower() == "unemployed":
        return (
            "The applicant is currently unemployed and has no verifiable source "
            "of income to service the loan."
        )
    return _ROLE_BOILERPLATE[role]


def generate_downsizing_reason(
    original_amount_text: str,
    approved_amount_text: str,
    monthly_income_text: str | None,
) -> str:
    """Explain a partial approval: the reduction and its effect on debt-to-income."""
    original = parse_amount(original_amount_text)
    approved = parse_amount(approved_amount_text)
    monthly_income = parse_optional_amount(monthly_income_text)

    if original <= 0:
        raise AmountValidationError("Original amount must be greater than zero")

    reduction = float((original - approved) / original * 100)
    message = (
        f"Loan amount adjusted from {format_ugx(original)} to {format_ugx(approved)} "
        f"({reduction:.1f}% reduction)."
    )

    original_ratio = debt_to_income_ratio(original, monthly_income)
    approved_ratio = debt_to_income_ratio(approved, monthly_income)
    if original_ratio is not None and approved_ratio is not None:
        message += (
            f" Debt-to-income ratio improves from {original_ratio * 100:.1f}% "
            f"to {approved_ratio * 100:.1f}%."
        )
    return message
