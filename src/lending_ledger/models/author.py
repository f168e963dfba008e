"""
Author model for the Lending Ledger.

Authors own books. Removing an author removes their books, so the model
is mostly descriptive: name, birth date and nationality.
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Author(BaseModel):
    """Represents an author in the catalog."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "name": "J.R.R. Tolkien",
                "birth_date": "1892-01-03",
                "nationality": "British",
            }
        },
    )

    id: int = Field(..., description="Unique identifier for the author", ge=1)

    name: str = Field(
        ...,
        description="Full name of the author",
        min_length=1,
        max_length=100,
        examples=["J.K. Rowling", "George R.R. Martin"],
    )

    birth_date: date | None = Field(
        None,
        description="Author's date of birth",
        examples=["1965-07-31", "1948-09-20"],
    )

    nationality: str | None = Field(
        None,
        description="Author's nationality",
        max_length=50,
        examples=["British", "American"],
    )

    @field_validator("birth_date")
    @classmethod
    def validate_birth_date(cls, v: date | None) -> date | None:
        if v is not None and v > date.today():
            raise ValueError("Birth date cannot be in the future")
        return v

    @field_validator("nationality")
    @classmethod
    def normalize_nationality(cls, v: str | None) -> str | None:
        """Normalize nationality to title case."""
        if v is None:
            return v
        return v.strip().title()
