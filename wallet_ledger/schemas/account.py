"""
Pydantic schemas for account operations.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class AccountCreate(BaseModel):
    """Request to onboard a new wallet account."""
    display_name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=5, max_length=255)


class AccountResponse(BaseModel):
    external_id: uuid.UUID
    display_name: str
    email: str
    handle: str
    balance: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}


class AccountPublicResponse(BaseModel):
    """What a payer sees when resolving a handle."""
    display_name: str
    handle: str

    model_config = {"from_attributes": True}
