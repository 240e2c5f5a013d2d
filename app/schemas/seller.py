# app/schemas/seller.py
from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class SellerCreate(SQLModel):
    """
    Onboarding payload collected across the three wizard steps.
    """

    model_config = ConfigDict(extra="forbid")

    company_name: str = Field(max_length=120)
    description: str = ""
    shipping_policy: str = ""
    return_policy: str = ""

    @field_validator("company_name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("company_name cannot be empty")
        return v


class SellerRead(SQLModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    company_name: str
    description: str = ""
    logo_url: str | None = None
    shipping_policy: str = ""
    return_policy: str = ""
    created_at: str | None = None
