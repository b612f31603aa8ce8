# This project was developed with assistance from AI tools.
"""Client request/response schemas."""

from datetime import datetime
from decimal import Decimal

from db.enums import MatchType
from pydantic import BaseModel, ConfigDict, Field

from .application import ApplicationResponse


class ClientCreate(BaseModel):
    """Register a client."""

    full_name: str = Field(min_length=1, max_length=255)
    phone_number: str | None = Field(default=None, max_length=32)
    id_number: str | None = Field(default=None, max_length=32)
    email: str | None = Field(default=None, max_length=255)
    address: str | None = None


class ClientResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    phone_number: str | None = None
    id_number: str | None = None
    email: str | None = None
    address: str | None = None
    created_by: str | None = None
    created_at: datetime


class MatchedApplication(BaseModel):
    """An application attributed to a client, with how it was matched."""

    score: float
    match_type: MatchType
    application: ApplicationResponse


class ClientStatisticsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_applications: int
    active_applications: int
    approved_loans: int
    total_loan_amount: Decimal


class ClientApplicationsResponse(BaseModel):
    client: ClientResponse
    statistics: ClientStatisticsResponse
    data: list[MatchedApplication]
