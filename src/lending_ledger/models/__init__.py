"""
Lending Ledger Models.

Pydantic models for the entities the ledger persists and reports on:
- Author: who wrote a book
- Book: catalog entry with total and available copy counts
- Member: someone allowed to borrow
- LoanTransaction: one loan, open until returned
- OverdueLoan / LoanHistoryEntry: report rows
"""

from .author import Author
from .book import Book
from .member import Member
from .transaction import LoanHistoryEntry, LoanStatus, LoanTransaction, OverdueLoan

__all__ = [
    "Author",
    "Book",
    "LoanHistoryEntry",
    "LoanStatus",
    "LoanTransaction",
    "Member",
    "OverdueLoan",
]
