"""
Lending tools for the Lending Ledger MCP server.

Two tools change ledger state:
1. issue_book: open a loan and take a copy off the shelf
2. return_book: close a loan and put the copy back

Handlers take their arguments as typed parameters, so FastMCP advertises
``book_id``/``member_id``/``transaction_id`` in the tool schema. Arguments
are re-validated with a Pydantic input model, the ledger operation runs in
its own session, and the answer is a text message plus structured data.
Ledger failures (unknown ids, no copies, double returns) raise ToolError,
which reaches the MCP caller as an error result.
"""

import logging
from datetime import date
from typing import Any

from fastmcp.exceptions import ToolError
from pydantic import BaseModel, Field, ValidationError

from ..config import get_config
from ..database.ledger_repository import LendingLedger
from ..database.repository import NotFoundError, RepositoryException
from ..database.session import get_session
from ..models.transaction import LoanTransaction

logger = logging.getLogger(__name__)


def _transaction_data(transaction: LoanTransaction) -> dict[str, Any]:
    return {
        "id": transaction.id,
        "book_id": transaction.book_id,
        "member_id": transaction.member_id,
        "issue_date": transaction.issue_date.isoformat(),
        "return_date": transaction.return_date.isoformat() if transaction.return_date else None,
        "status": transaction.status.value,
    }


def _ledger(session) -> LendingLedger:
    return LendingLedger(session, loan_period_days=get_config().loan_period_days)


# =============================================================================
# ISSUE TOOL
# =============================================================================


class IssueBookInput(BaseModel):
    """Input schema for the issue_book tool."""

    book_id: int = Field(..., description="Identifier of the book to lend", ge=1, examples=[1])

    member_id: int = Field(
        ..., description="Identifier of the borrowing member", ge=1, examples=[1]
    )

    issued_on: date | None = Field(
        default=None,
        description="Issue date; defaults to today",
        examples=["2024-03-01"],
    )


async def issue_book_handler(
    book_id: int, member_id: int, issued_on: date | None = None
) -> dict[str, Any]:
    """
    Handler for the issue_book tool.

    Args:
        book_id: Book to lend
        member_id: Borrowing member
        issued_on: Issue date (default: today)

    Raises:
        ToolError: When the arguments are invalid, the member or book is
            unknown, or no copy of the book is available
    """
    try:
        params = IssueBookInput(book_id=book_id, member_id=member_id, issued_on=issued_on)
    except ValidationError as e:
        logger.warning("Invalid issue parameters: %s", e)
        raise ToolError(f"Invalid issue parameters: {e}") from e

    try:
        with get_session() as session:
            transaction = _ledger(session).issue_book(
                params.book_id, params.member_id, params.issued_on
            )
    except NotFoundError as e:
        logger.info("Issue failed - entity not found: %s", e)
        raise ToolError(str(e)) from e
    except RepositoryException as e:
        logger.info("Issue failed - business rule: %s", e)
        raise ToolError(str(e)) from e
    except Exception as e:
        logger.exception("Unexpected error in issue_book tool")
        raise ToolError(f"Issue failed: {e!s}") from e

    message = (
        f"Issued book {transaction.book_id} to member {transaction.member_id} "
        f"on {transaction.issue_date.isoformat()} (transaction {transaction.id})."
    )
    return {
        "content": [{"type": "text", "text": message}],
        "data": {"transaction": _transaction_data(transaction)},
    }


# =============================================================================
# RETURN TOOL
# =============================================================================


class ReturnBookInput(BaseModel):
    """Input schema for the return_book tool."""

    transaction_id: int = Field(
        ..., description="Identifier of the loan to close", ge=1, examples=[1]
    )

    returned_on: date | None = Field(
        default=None,
        description="Return date; defaults to today",
        examples=["2024-03-10"],
    )


async def return_book_handler(
    transaction_id: int, returned_on: date | None = None
) -> dict[str, Any]:
    """
    Handler for the return_book tool.

    Raises:
        ToolError: For invalid arguments and for unknown or already closed
            transactions
    """
    try:
        params = ReturnBookInput(transaction_id=transaction_id, returned_on=returned_on)
    except ValidationError as e:
        logger.warning("Invalid return parameters: %s", e)
        raise ToolError(f"Invalid return parameters: {e}") from e

    try:
        with get_session() as session:
            transaction = _ledger(session).return_book(params.transaction_id, params.returned_on)
    except NotFoundError as e:
        logger.info("Return failed - transaction not found: %s", e)
        raise ToolError(str(e)) from e
    except RepositoryException as e:
        logger.info("Return failed - business rule: %s", e)
        raise ToolError(str(e)) from e
    except Exception as e:
        logger.exception("Unexpected error in return_book tool")
        raise ToolError(f"Return failed: {e!s}") from e

    days_out = transaction.days_out()
    message = (
        f"Returned book {transaction.book_id} (transaction {transaction.id}) "
        f"after {days_out} day{'s' if days_out != 1 else ''}."
    )
    return {
        "content": [{"type": "text", "text": message}],
        "data": {"transaction": _transaction_data(transaction)},
    }


issue_book = {
    "name": "issue_book",
    "description": (
        "Lend one copy of a book to a member. Takes a copy off the shelf and opens a "
        "loan transaction. Fails when no copy is available."
    ),
    "handler": issue_book_handler,
}

return_book = {
    "name": "return_book",
    "description": (
        "Close an open loan transaction and put the copy back on the shelf. "
        "A transaction can only be returned once."
    ),
    "handler": return_book_handler,
}
