"""Loan Resources - Read-only views of the ledger

Resources:
- ledger://loans/overdue - Open loans past the loan period
- ledger://loans/open - Every open loan, oldest first
"""

import logging
from typing import Any

from fastmcp.exceptions import ResourceError
from pydantic import BaseModel, Field

from ..config import get_config
from ..database.ledger_repository import LendingLedger
from ..database.session import session_scope
from ..models.transaction import LoanTransaction, OverdueLoan

logger = logging.getLogger(__name__)


class OverdueResponse(BaseModel):
    """Overdue report with the parameters it was computed for."""

    as_of: str = Field(..., description="Reference date of the report")
    loan_period_days: int = Field(..., description="Loan period in days")
    loans: list[OverdueLoan] = Field(..., description="Overdue loans, most overdue first")
    total: int = Field(..., description="Number of overdue loans")


class OpenLoansResponse(BaseModel):
    loans: list[LoanTransaction]
    total: int


async def overdue_loans_handler() -> dict[str, Any]:
    """Returns the overdue report for today."""
    try:
        with session_scope() as session:
            ledger = LendingLedger(session, loan_period_days=get_config().loan_period_days)
            report = ledger.overdue_books()
            loans = list(report)

            logger.debug("MCP Resource Request - loans/overdue: %d rows", len(loans))

            return OverdueResponse(
                as_of=report.as_of.isoformat(),
                loan_period_days=report.loan_period_days,
                loans=loans,
                total=len(loans),
            ).model_dump(mode="json")

    except Exception as e:
        logger.exception("Error in loans/overdue resource")
        raise ResourceError(f"Failed to build overdue report: {e!s}") from e


async def open_loans_handler() -> dict[str, Any]:
    """Returns every open loan."""
    try:
        with session_scope() as session:
            loans = LendingLedger(session).open_loans()
            return OpenLoansResponse(loans=loans, total=len(loans)).model_dump(mode="json")

    except Exception as e:
        logger.exception("Error in loans/open resource")
        raise ResourceError(f"Failed to list open loans: {e!s}") from e


loan_resources: list[dict[str, Any]] = [
    {
        "uri": "ledger://loans/overdue",
        "name": "Overdue Loans",
        "description": (
            "Open loans older than the loan period, with member name, book title "
            "and days overdue."
        ),
        "mime_type": "application/json",
        "handler": overdue_loans_handler,
    },
    {
        "uri": "ledger://loans/open",
        "name": "Open Loans",
        "description": "Every loan that has not been returned yet, oldest first.",
        "mime_type": "application/json",
        "handler": open_loans_handler,
    },
]
