"""
Lending ledger repository for the Lending Ledger.

This is the consistency core of the system:

1. **Issue**: open a loan and take one copy off the shelf
2. **Return**: close a loan and put the copy back
3. **Overdue**: report open loans older than the loan period

Both mutations are written as single conditional UPDATE statements
(compare-and-decrement / compare-and-increment) inside one database
transaction, so the availability check and the change cannot be separated
by a concurrent writer. Zero affected rows means the guard failed; the
transaction is rolled back and nothing is changed.
"""

import logging
from collections.abc import Iterator
from datetime import date, timedelta

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database.schema import Book as BookDB
from ..database.schema import Member as MemberDB
from ..database.schema import Transaction as TransactionDB
from ..database.session import safe_commit, safe_query
from ..models.transaction import LoanTransaction, OverdueLoan
from .repository import (
    AlreadyReturnedError,
    BookNotFoundError,
    BookUnavailableError,
    CopyCountError,
    MemberNotFoundError,
    RepositoryException,
    TransactionNotFoundError,
)

logger = logging.getLogger(__name__)

# Days a loan may stay open before it is overdue
LOAN_PERIOD_DAYS = 14


class OverdueReport:
    """
    Lazy, restartable view of overdue loans.

    Nothing is read until the report is iterated, and every iteration runs
    the query again against the current state. Rows come most overdue
    first; ties are broken by transaction id.
    """

    def __init__(self, session: Session, as_of: date, loan_period_days: int):
        self.session = session
        self.as_of = as_of
        self.loan_period_days = loan_period_days

    @property
    def cutoff(self) -> date:
        """Loans issued before this date are overdue."""
        return self.as_of - timedelta(days=self.loan_period_days)

    def _query(self):
        return (
            select(
                TransactionDB.id,
                MemberDB.name,
                BookDB.title,
                TransactionDB.issue_date,
            )
            .join(MemberDB, TransactionDB.member_id == MemberDB.id)
            .join(BookDB, TransactionDB.book_id == BookDB.id)
            .where(
                TransactionDB.return_date.is_(None),
                TransactionDB.issue_date < self.cutoff,
            )
            .order_by(TransactionDB.issue_date, TransactionDB.id)
        )

    def __iter__(self) -> Iterator[OverdueLoan]:
        result = safe_query(
            self.session,
            lambda s: s.execute(self._query()),
            "Failed to run overdue report",
        )
        for row in result:
            yield OverdueLoan(
                transaction_id=row.id,
                member_name=row.name,
                book_title=row.title,
                days_overdue=(self.as_of - row.issue_date).days - self.loan_period_days,
            )

    def count(self) -> int:
        count_query = select(func.count()).select_from(self._query().subquery())
        return (
            safe_query(
                self.session,
                lambda s: s.execute(count_query).scalar(),
                "Failed to count overdue loans",
            )
            or 0
        )


class LendingLedger:
    """
    Repository for lending operations.

    Every date the ledger uses can be passed in explicitly; ``None`` means
    today. This keeps issue/return/overdue deterministic under test.
    """

    def __init__(self, session: Session, loan_period_days: int = LOAN_PERIOD_DAYS):
        if loan_period_days < 1:
            raise ValueError("Loan period must be at least one day")
        self.session = session
        self.loan_period_days = loan_period_days

    def issue_book(
        self, book_id: int, member_id: int, issued_on: date | None = None
    ) -> LoanTransaction:
        """
        Lend one copy of a book to a member.

        Args:
            book_id: Book to issue
            member_id: Borrowing member
            issued_on: Issue date (default: today)

        Returns:
            The new open transaction

        Raises:
            MemberNotFoundError: If the member does not exist
            BookNotFoundError: If the book does not exist
            BookUnavailableError: If no copy is on the shelf
        """
        if issued_on is None:
            issued_on = date.today()

        if not self._exists(MemberDB, member_id):
            raise MemberNotFoundError(f"Member {member_id} not found")
        if not self._exists(BookDB, book_id):
            raise BookNotFoundError(f"Book {book_id} not found")

        try:
            taken = self.session.execute(
                update(BookDB)
                .where(BookDB.id == book_id, BookDB.available_copies > 0)
                .values(available_copies=BookDB.available_copies - 1)
                .execution_options(synchronize_session=False)
            )
            if taken.rowcount == 0:
                self.session.rollback()
                logger.info("Issue refused - book %s has no available copies", book_id)
                raise BookUnavailableError(f"Book {book_id} is not available")

            transaction = TransactionDB(
                book_id=book_id,
                member_id=member_id,
                issue_date=issued_on,
            )
            self.session.add(transaction)
            self.session.flush()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise RepositoryException(f"Issue failed: {e!s}") from e

        safe_commit(self.session, "issue book")
        logger.info(
            "Issued book %s to member %s (transaction %s)", book_id, member_id, transaction.id
        )
        return self._to_model(transaction)

    def return_book(
        self, transaction_id: int, returned_on: date | None = None
    ) -> LoanTransaction:
        """
        Close a loan and put the copy back on the shelf.

        Args:
            transaction_id: Loan to close
            returned_on: Return date (default: today)

        Returns:
            The closed transaction

        Raises:
            TransactionNotFoundError: If the transaction does not exist
            AlreadyReturnedError: If the loan is already closed
            CopyCountError: If the book already has all copies on the shelf
            RepositoryException: If the return date precedes the issue date
        """
        if returned_on is None:
            returned_on = date.today()

        transaction = self._get_transaction(transaction_id)
        if transaction is None:
            raise TransactionNotFoundError(f"Transaction {transaction_id} not found")
        if transaction.return_date is not None:
            raise AlreadyReturnedError(
                f"Transaction {transaction_id} was already returned on {transaction.return_date}"
            )
        if returned_on < transaction.issue_date:
            raise RepositoryException(
                f"Return date {returned_on} is before issue date {transaction.issue_date}"
            )

        try:
            closed = self.session.execute(
                update(TransactionDB)
                .where(TransactionDB.id == transaction_id, TransactionDB.return_date.is_(None))
                .values(return_date=returned_on)
                .execution_options(synchronize_session=False)
            )
            if closed.rowcount == 0:
                self.session.rollback()
                raise AlreadyReturnedError(f"Transaction {transaction_id} was already returned")

            restocked = self.session.execute(
                update(BookDB)
                .where(
                    BookDB.id == transaction.book_id,
                    BookDB.available_copies < BookDB.total_copies,
                )
                .values(available_copies=BookDB.available_copies + 1)
                .execution_options(synchronize_session=False)
            )
            if restocked.rowcount == 0:
                self.session.rollback()
                logger.warning(
                    "Return refused - book %s already has every copy on the shelf",
                    transaction.book_id,
                )
                raise CopyCountError(
                    f"Book {transaction.book_id} cannot take back more copies than it owns"
                )
        except SQLAlchemyError as e:
            self.session.rollback()
            raise RepositoryException(f"Return failed: {e!s}") from e

        safe_commit(self.session, "return book")
        self.session.refresh(transaction)
        logger.info("Returned transaction %s (book %s)", transaction_id, transaction.book_id)
        return self._to_model(transaction)

    def overdue_books(self, as_of: date | None = None) -> OverdueReport:
        """
        Report open loans older than the loan period.

        Args:
            as_of: Reference date (default: today)
        """
        if as_of is None:
            as_of = date.today()
        return OverdueReport(self.session, as_of, self.loan_period_days)

    def get_transaction(self, transaction_id: int) -> LoanTransaction | None:
        transaction = self._get_transaction(transaction_id)
        return self._to_model(transaction) if transaction else None

    def open_loans(
        self, book_id: int | None = None, member_id: int | None = None
    ) -> list[LoanTransaction]:
        """List open loans, oldest first, optionally for one book or member."""
        query = (
            select(TransactionDB)
            .where(TransactionDB.return_date.is_(None))
            .order_by(TransactionDB.issue_date, TransactionDB.id)
            .execution_options(populate_existing=True)
        )
        if book_id is not None:
            query = query.where(TransactionDB.book_id == book_id)
        if member_id is not None:
            query = query.where(TransactionDB.member_id == member_id)

        results = safe_query(
            self.session,
            lambda s: s.execute(query).scalars().all(),
            "Failed to list open loans",
        )
        return [self._to_model(t) for t in results]

    def _exists(self, model, id: int) -> bool:
        count = safe_query(
            self.session,
            lambda s: s.execute(
                select(func.count()).select_from(model).where(model.id == id)
            ).scalar(),
            f"Failed to check {model.__name__}",
        )
        return bool(count)

    def _get_transaction(self, transaction_id: int) -> TransactionDB | None:
        return safe_query(
            self.session,
            lambda s: s.execute(
                select(TransactionDB)
                .where(TransactionDB.id == transaction_id)
                .execution_options(populate_existing=True)
            ).scalar_one_or_none(),
            "Failed to get transaction",
        )

    def _to_model(self, transaction: TransactionDB) -> LoanTransaction:
        return LoanTransaction.model_validate(transaction, from_attributes=True)
