"""
Database package for the Lending Ledger.

This package provides:
- SQLAlchemy schema definitions (schema.py)
- Session management and connection handling (session.py)
- Catalog repositories for authors, books and members
- The lending ledger itself (ledger_repository.py)
"""

from .author_repository import AuthorRepository
from .book_repository import BookRepository
from .ledger_repository import LOAN_PERIOD_DAYS, LendingLedger, OverdueReport
from .member_repository import MemberRepository
from .repository import (
    AlreadyReturnedError,
    AuthorNotFoundError,
    BaseRepository,
    BookNotFoundError,
    BookUnavailableError,
    CopyCountError,
    DuplicateError,
    MemberNotFoundError,
    NotFoundError,
    PaginatedResponse,
    PaginationParams,
    RepositoryException,
    TransactionNotFoundError,
)
from .schema import Author, Base, Book, Member, Transaction
from .session import (
    DatabaseManager,
    get_db_manager,
    get_session,
    reset_db_manager,
    safe_commit,
    safe_query,
    session_scope,
)

__all__ = [
    "LOAN_PERIOD_DAYS",
    "AlreadyReturnedError",
    "Author",
    "AuthorNotFoundError",
    "AuthorRepository",
    "Base",
    "BaseRepository",
    "Book",
    "BookNotFoundError",
    "BookRepository",
    "BookUnavailableError",
    "CopyCountError",
    "DatabaseManager",
    "DuplicateError",
    "LendingLedger",
    "Member",
    "MemberNotFoundError",
    "MemberRepository",
    "NotFoundError",
    "OverdueReport",
    "PaginatedResponse",
    "PaginationParams",
    "RepositoryException",
    "Transaction",
    "TransactionNotFoundError",
    "get_db_manager",
    "get_session",
    "reset_db_manager",
    "safe_commit",
    "safe_query",
    "session_scope",
]
