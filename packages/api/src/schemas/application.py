# This project was developed with assistance from AI tools.
"""Application request/response schemas."""

from datetime import datetime
from decimal import Decimal

from db.enums import ApplicationStatus, RiskLevel
from pydantic import BaseModel, ConfigDict, Field

from . import Pagination


class ApplicationCreate(BaseModel):
    """Submit a new loan application on behalf of a client.

    Amounts are accepted as form text ("5,000,000", "UGX 250000") and
    validated by the service.
    """

    client_name: str = Field(min_length=1, max_length=255)
    phone_number: str | None = Field(default=None, max_length=32)
    id_number: str | None = Field(default=None, max_length=32)
    loan_amount: str
    loan_type: str | None = Field(default=None, max_length=50)
    purpose_of_loan: str | None = None
    employment_status: str | None = Field(default=None, max_length=50)
    monthly_income: str | None = None


class ApplicationResponse(BaseModel):
    """Single application response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    loan_identification_number: str
    client_name: str
    phone_number: str | None = None
    id_number: str | None = None
    loan_amount: Decimal
    approved_amount: Decimal | None = None
    loan_type: str | None = None
    purpose_of_loan: str | None = None
    employment_status: str | None = None
    monthly_income: Decimal | None = None
    status: ApplicationStatus
    risk_assessment: RiskLevel | None = None
    approval_notes: str | None = None
    rejection_reason: str | None = None
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime


class ApplicationListResponse(BaseModel):
    """Paginated list of applications."""

    data: list[ApplicationResponse]
    pagination: Pagination
