"""
Tests for the catalog repositories.

These tests cover:
1. CRUD operations for authors, books and members
2. Copy-count checks on book maintenance
3. Search and pagination
4. Loan history
5. Cascading deletes down the ownership chain
"""

from datetime import date, timedelta

import pytest
from pydantic import ValidationError
from sqlalchemy import func, select

from lending_ledger.database import (
    AuthorNotFoundError,
    AuthorRepository,
    BookNotFoundError,
    BookRepository,
    CopyCountError,
    DuplicateError,
    LendingLedger,
    MemberNotFoundError,
    MemberRepository,
    PaginationParams,
)
from lending_ledger.database.author_repository import AuthorCreateSchema, AuthorUpdateSchema
from lending_ledger.database.book_repository import (
    BookCreateSchema,
    BookSearchParams,
    BookUpdateSchema,
)
from lending_ledger.database.member_repository import MemberCreateSchema, MemberUpdateSchema
from lending_ledger.database.schema import Transaction as TransactionDB
from lending_ledger.models.transaction import LoanStatus

ISSUE_DAY = date(2024, 3, 1)


def transaction_count(session) -> int:
    return session.execute(select(func.count()).select_from(TransactionDB)).scalar()


class TestAuthorRepository:
    """Test author repository operations."""

    def test_create_and_get(self, session):
        repo = AuthorRepository(session)
        author = repo.create(
            AuthorCreateSchema(name="Octavia E. Butler", birth_date=date(1947, 6, 22))
        )

        assert author.id >= 1
        fetched = repo.get_by_id(author.id)
        assert fetched is not None
        assert fetched.name == "Octavia E. Butler"

    def test_update_nationality(self, session, library):
        repo = AuthorRepository(session)
        updated = repo.update(library.martin, AuthorUpdateSchema(nationality="british"))

        assert updated.nationality == "British"
        assert updated.name == "George R.R. Martin"

    def test_update_unknown_author(self, session):
        with pytest.raises(AuthorNotFoundError):
            AuthorRepository(session).update(42, AuthorUpdateSchema(name="Nobody"))

    def test_get_books(self, session, library):
        books = AuthorRepository(session).get_books(library.tolkien)
        assert [book.title for book in books] == ["The Hobbit"]

    def test_get_books_unknown_author(self, session):
        with pytest.raises(AuthorNotFoundError):
            AuthorRepository(session).get_books(42)

    def test_get_all_ordering_and_pagination(self, session, library):
        repo = AuthorRepository(session)

        by_name = repo.get_all(order_by="name")
        assert [a.name for a in by_name] == [
            "George R.R. Martin",
            "J.K. Rowling",
            "J.R.R. Tolkien",
        ]

        page = repo.get_all(pagination=PaginationParams(page=2, page_size=2))
        assert page.total == 3
        assert page.total_pages == 2
        assert [a.id for a in page.items] == [library.tolkien]
        assert page.has_previous is True
        assert page.has_next is False

    def test_invalid_pagination(self, session):
        with pytest.raises(ValueError):
            AuthorRepository(session).get_all(pagination=PaginationParams(page=0))


class TestBookRepository:
    """Test book repository operations."""

    def test_available_defaults_to_total(self, session, library):
        book = BookRepository(session).get_by_id(library.philosophers_stone)

        assert book.total_copies == 10
        assert book.available_copies == 10

    def test_create_rejects_available_above_total(self):
        with pytest.raises(ValidationError):
            BookCreateSchema(title="Overstocked", total_copies=1, available_copies=2)

    def test_create_with_unknown_author(self, session):
        with pytest.raises(AuthorNotFoundError):
            BookRepository(session).create(BookCreateSchema(title="Orphan", author_id=42))

    def test_update_copy_counts(self, session, library):
        repo = BookRepository(session)
        updated = repo.update(
            library.hobbit, BookUpdateSchema(total_copies=12, available_copies=12)
        )

        assert updated.total_copies == 12
        assert updated.available_copies == 12

    def test_update_rejects_available_above_total(self, session, library):
        repo = BookRepository(session)
        with pytest.raises(CopyCountError):
            repo.update(library.hobbit, BookUpdateSchema(available_copies=9))

        assert repo.get_by_id(library.hobbit).available_copies == 8

    def test_update_rejects_total_below_available(self, session, library):
        with pytest.raises(CopyCountError):
            BookRepository(session).update(library.hobbit, BookUpdateSchema(total_copies=7))

    def test_update_unknown_book(self, session):
        with pytest.raises(BookNotFoundError):
            BookRepository(session).update(42, BookUpdateSchema(title="Nothing"))

    def test_search_by_title(self, session, library):
        result = BookRepository(session).search(BookSearchParams(title="harry"))

        assert result.total == 1
        assert result.items[0].id == library.philosophers_stone

    def test_search_all_ordered_by_title(self, session, library):
        result = BookRepository(session).search(BookSearchParams())
        assert [book.title for book in result.items] == [
            "A Game of Thrones",
            "Harry Potter and the Philosopher's Stone",
            "The Hobbit",
        ]

    def test_search_available_only(self, session, library, single_copy_book):
        LendingLedger(session).issue_book(single_copy_book, library.alice)

        result = BookRepository(session).search(BookSearchParams(available_only=True))

        assert single_copy_book not in [book.id for book in result.items]
        assert result.total == 3

    def test_search_by_author_and_genre(self, session, library):
        repo = BookRepository(session)

        assert repo.search(BookSearchParams(author_id=library.martin)).total == 1
        assert repo.search(BookSearchParams(genre="Fantasy")).total == 3
        assert repo.search(BookSearchParams(genre="Poetry")).total == 0


class TestMemberRepository:
    """Test member repository operations."""

    def test_create_and_get_by_email(self, session, library):
        member = MemberRepository(session).get_by_email("bob@example.com")

        assert member is not None
        assert member.id == library.bob
        assert member.name == "Bob Johnson"

    def test_duplicate_email(self, session, library):
        with pytest.raises(DuplicateError):
            MemberRepository(session).create(
                MemberCreateSchema(name="Alice Again", email="alice@example.com")
            )

    def test_update_phone(self, session, library):
        updated = MemberRepository(session).update(
            library.charlie, MemberUpdateSchema(phone="555-0100")
        )
        assert updated.phone == "555-0100"

    def test_loan_history_newest_first(self, session, library):
        ledger = LendingLedger(session)
        first = ledger.issue_book(library.hobbit, library.alice, issued_on=ISSUE_DAY)
        ledger.return_book(first.id, returned_on=ISSUE_DAY + timedelta(days=7))
        second = ledger.issue_book(
            library.game_of_thrones, library.alice, issued_on=ISSUE_DAY + timedelta(days=10)
        )

        history = MemberRepository(session).get_loan_history(library.alice)

        assert [entry.transaction_id for entry in history] == [second.id, first.id]
        assert history[0].book_title == "A Game of Thrones"
        assert history[0].status == LoanStatus.OPEN
        assert history[1].return_date == ISSUE_DAY + timedelta(days=7)

        open_only = MemberRepository(session).get_loan_history(
            library.alice, include_returned=False
        )
        assert [entry.transaction_id for entry in open_only] == [second.id]

    def test_loan_history_unknown_member(self, session):
        with pytest.raises(MemberNotFoundError):
            MemberRepository(session).get_loan_history(42)

    def test_loan_history_empty(self, session, library):
        assert MemberRepository(session).get_loan_history(library.charlie) == []


class TestCascadingDeletes:
    """Deletes remove everything the deleted row owns."""

    def test_delete_member_removes_transactions(self, session, library):
        ledger = LendingLedger(session)
        ledger.issue_book(library.hobbit, library.bob, issued_on=ISSUE_DAY)
        ledger.issue_book(library.hobbit, library.alice, issued_on=ISSUE_DAY)

        assert MemberRepository(session).delete(library.bob) is True

        assert MemberRepository(session).get_by_id(library.bob) is None
        assert transaction_count(session) == 1

    def test_delete_book_removes_transactions(self, session, library):
        ledger = LendingLedger(session)
        ledger.issue_book(library.hobbit, library.alice, issued_on=ISSUE_DAY)

        assert BookRepository(session).delete(library.hobbit) is True
        assert transaction_count(session) == 0
        assert MemberRepository(session).get_by_id(library.alice) is not None

    def test_delete_author_removes_books_and_transactions(self, session, library):
        ledger = LendingLedger(session)
        ledger.issue_book(library.philosophers_stone, library.alice, issued_on=ISSUE_DAY)
        ledger.issue_book(library.hobbit, library.bob, issued_on=ISSUE_DAY)

        assert AuthorRepository(session).delete(library.rowling) is True

        assert BookRepository(session).get_by_id(library.philosophers_stone) is None
        assert BookRepository(session).get_by_id(library.hobbit) is not None
        assert transaction_count(session) == 1

    def test_delete_unknown(self, session):
        assert MemberRepository(session).delete(42) is False
        assert BookRepository(session).exists(42) is False
