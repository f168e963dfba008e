"""
Member model for the Lending Ledger.

Members borrow books. The e-mail address is unique across the library and
deleting a member deletes their loan history.
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class Member(BaseModel):
    """Represents a library member."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Unique identifier for the member", ge=1)

    name: str = Field(
        ...,
        description="Full name of the member",
        min_length=1,
        max_length=100,
        examples=["Alice Smith", "Bob Johnson"],
    )

    email: EmailStr = Field(
        ...,
        description="Unique e-mail address",
        examples=["alice@example.com"],
    )

    phone: str | None = Field(
        None,
        description="Contact phone number",
        max_length=15,
        pattern=r"^\+?[\d\s\-\(\)]+$",
        examples=["123-456-7890"],
    )

    membership_date: date = Field(
        default_factory=date.today,
        description="Date when the member joined the library",
    )
