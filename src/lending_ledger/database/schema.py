"""
SQLAlchemy database schema for the Lending Ledger.

Four tables back the ledger:
1. authors - who wrote the books
2. books - catalog entries carrying the copy counts
3. members - people allowed to borrow
4. transactions - one row per loan; an open loan has no return date

Deletes cascade down the ownership chain (author -> books -> transactions,
member -> transactions). The cascade is declared on the foreign keys and on
the ORM relationships, so deleting through a session removes children first
regardless of whether the engine enforces foreign keys.
"""

from datetime import date

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import declarative_base, relationship, validates

# Base class for all SQLAlchemy models
Base = declarative_base()


class Author(Base):
    """
    Authors table - stores information about book authors.

    Deleting an author deletes all of their books and, through the books,
    every transaction that references them.
    """

    __tablename__ = "authors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    birth_date = Column(Date, nullable=True)
    nationality = Column(String(50), nullable=True)

    books = relationship("Book", back_populates="author", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_author_name", "name"),
        Index("idx_author_nationality", "nationality"),
    )

    @validates("birth_date")
    def validate_birth_date(self, key, value):  # noqa: ARG002
        if value and value > date.today():
            raise ValueError("Birth date cannot be in the future")
        return value


class Book(Base):
    """
    Books table - the catalog and its copy counts.

    ``available_copies`` is only changed by the lending ledger. The check
    constraints keep it inside ``[0, total_copies]`` at the database level.
    """

    __tablename__ = "books"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    author_id = Column(Integer, ForeignKey("authors.id", ondelete="CASCADE"), nullable=True)
    genre = Column(String(50), nullable=True)
    published_year = Column(Integer, nullable=True)
    total_copies = Column(Integer, nullable=False, default=1)
    available_copies = Column(Integer, nullable=False, default=1)

    author = relationship("Author", back_populates="books")
    transactions = relationship(
        "Transaction", back_populates="book", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_book_title", "title"),
        Index("idx_book_genre", "genre"),
        Index("idx_book_author", "author_id"),
        CheckConstraint("published_year > 0", name="check_published_year_positive"),
        CheckConstraint("total_copies >= 0", name="check_total_copies_non_negative"),
        CheckConstraint("available_copies >= 0", name="check_available_copies_non_negative"),
        CheckConstraint(
            "available_copies <= total_copies", name="check_available_not_exceed_total"
        ),
    )

    @property
    def is_available(self) -> bool:
        return self.available_copies > 0


class Member(Base):
    """
    Members table - people who borrow books.

    Deleting a member deletes their whole loan history.
    """

    __tablename__ = "members"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), nullable=False, unique=True)
    phone = Column(String(15), nullable=True)
    membership_date = Column(Date, nullable=False, default=date.today)

    transactions = relationship(
        "Transaction", back_populates="member", cascade="all, delete-orphan"
    )

    __table_args__ = (Index("idx_member_name", "name"),)


class Transaction(Base):
    """
    Transactions table - one row per loan event.

    Created open by an issue, closed by a return (``return_date`` set).
    Rows disappear only through the book or member cascade.
    """

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    book_id = Column(Integer, ForeignKey("books.id", ondelete="CASCADE"), nullable=False)
    member_id = Column(Integer, ForeignKey("members.id", ondelete="CASCADE"), nullable=False)
    issue_date = Column(Date, nullable=False, default=date.today)
    return_date = Column(Date, nullable=True)

    book = relationship("Book", back_populates="transactions")
    member = relationship("Member", back_populates="transactions")

    __table_args__ = (
        Index("idx_transaction_book", "book_id"),
        Index("idx_transaction_member", "member_id"),
        Index("idx_transaction_open", "return_date", "issue_date"),
        CheckConstraint(
            "return_date IS NULL OR return_date >= issue_date",
            name="check_return_not_before_issue",
        ),
    )

    @property
    def is_open(self) -> bool:
        return self.return_date is None
