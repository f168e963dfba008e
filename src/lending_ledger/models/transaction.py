"""
Loan models for the Lending Ledger.

A LoanTransaction is a two-state record:

    open --return--> closed

It is created open by an issue and closed exactly once by a return. The
report rows below are read-only projections over open and closed loans.
"""

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class LoanStatus(str, Enum):
    """State of a loan."""

    OPEN = "open"
    CLOSED = "closed"


class LoanTransaction(BaseModel):
    """
    Represents one loan of one book to one member.

    ``return_date`` is None while the loan is open.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Unique identifier for the transaction", ge=1)

    book_id: int = Field(..., description="Identifier of the borrowed book", ge=1)

    member_id: int = Field(..., description="Identifier of the borrowing member", ge=1)

    issue_date: date = Field(
        ...,
        description="Date the book was issued",
        examples=["2024-03-01"],
    )

    return_date: date | None = Field(
        None,
        description="Date the book came back; empty while the loan is open",
        examples=["2024-03-10", None],
    )

    @model_validator(mode="after")
    def validate_dates(self) -> "LoanTransaction":
        if self.return_date is not None and self.return_date < self.issue_date:
            raise ValueError("Return date cannot be before issue date")
        return self

    @property
    def status(self) -> LoanStatus:
        return LoanStatus.OPEN if self.return_date is None else LoanStatus.CLOSED

    @property
    def is_open(self) -> bool:
        return self.return_date is None

    def days_out(self, as_of: date | None = None) -> int:
        """
        Number of days the book has been (or was) out.

        Args:
            as_of: Reference date for open loans (default: today)
        """
        end_date = self.return_date or as_of or date.today()
        return (end_date - self.issue_date).days


class OverdueLoan(BaseModel):
    """One row of the overdue report."""

    transaction_id: int
    member_name: str
    book_title: str
    days_overdue: int = Field(..., ge=1, description="Days past the loan period")


class LoanHistoryEntry(BaseModel):
    """One row of a member's loan history."""

    transaction_id: int
    book_id: int
    book_title: str
    issue_date: date
    return_date: date | None = None

    @property
    def status(self) -> LoanStatus:
        return LoanStatus.OPEN if self.return_date is None else LoanStatus.CLOSED
